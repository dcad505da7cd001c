"""Shared fixtures for lazyactions tests."""

from __future__ import annotations

from itertools import count
from typing import Any

import pytest

from lazyactions.core.models import Job, WorkflowSnapshot


_IDS = count(1)


def build_job(
    name: str = "Build / Compile",
    *,
    status: str = "in_progress",
    conclusion: str | None = None,
    started_at: str = "2025-01-01T10:00:00Z",
    **overrides: Any,
) -> Job:
    job_id = overrides.pop("id", next(_IDS))
    fields: dict[str, Any] = {
        "id": job_id,
        "name": name,
        "run_id": 1000,
        "repo": "octo/widgets",
        "run_url": "https://api.github.com/repos/octo/widgets/actions/runs/1000",
        "actor_login": "octocat",
        "head_branch": "main",
        "status": status,
        "conclusion": conclusion,
        "started_at": started_at,
        "completed_at": None,
        "html_url": f"https://github.com/octo/widgets/actions/runs/1000/job/{job_id}",
    }
    fields.update(overrides)
    return Job(**fields)


@pytest.fixture
def three_job_snapshot() -> WorkflowSnapshot:
    return WorkflowSnapshot(
        jobs=(
            build_job("Build / Compile", status="in_progress"),
            build_job("Build / Test", status="completed", conclusion="success"),
            build_job("Deploy / Push", status="completed", conclusion="failure"),
        )
    )
