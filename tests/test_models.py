"""Tests for job records and fetch results."""

from __future__ import annotations

import dataclasses

import pytest

from lazyactions.core.models import (
    Category,
    FetchResult,
    Job,
    WorkflowSnapshot,
)


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": 42,
        "name": "Lint / Ruff / check",
        "run_id": 7,
        "repo": "octo/widgets",
        "run_url": "https://api.github.com/repos/octo/widgets/actions/runs/7",
        "actor_login": "octocat",
        "head_branch": "main",
        "status": "completed",
        "conclusion": "success",
        "started_at": "2025-01-01T10:00:00Z",
        "completed_at": "2025-01-01T10:02:00Z",
        "html_url": "https://github.com/octo/widgets/actions/runs/7/job/42",
    }
    payload.update(overrides)
    return payload


class TestJobFromPayload:
    """Tests for Job.from_payload."""

    def test_builds_job_from_complete_payload(self) -> None:
        job = Job.from_payload(_payload())

        assert job.id == 42
        assert job.run_id == 7
        assert job.conclusion == "success"
        assert job.completed_at == "2025-01-01T10:02:00Z"

    def test_null_conclusion_and_start_are_accepted(self) -> None:
        job = Job.from_payload(_payload(status="queued", conclusion=None, started_at=None))

        assert job.conclusion is None
        assert job.started_at == ""

    def test_missing_required_field_raises(self) -> None:
        payload = _payload()
        del payload["html_url"]

        with pytest.raises(ValueError, match="html_url"):
            Job.from_payload(payload)

    def test_boolean_is_not_an_integer_id(self) -> None:
        with pytest.raises(ValueError, match="'id'"):
            Job.from_payload(_payload(id=True))

    def test_non_object_payload_raises(self) -> None:
        with pytest.raises(ValueError):
            Job.from_payload(["not", "a", "job"])  # type: ignore[arg-type]

    def test_jobs_are_immutable(self) -> None:
        job = Job.from_payload(_payload())

        with pytest.raises(dataclasses.FrozenInstanceError):
            job.status = "queued"  # type: ignore[misc]


class TestJobAction:
    def test_action_is_last_segment(self) -> None:
        assert Job.from_payload(_payload()).action == "check"

    def test_action_falls_back_to_full_name(self) -> None:
        assert Job.from_payload(_payload(name="build/")).action == "build/"


class TestCategory:
    def test_from_index_wraps(self) -> None:
        assert Category.from_index(0) is Category.IN_PROGRESS
        assert Category.from_index(2) is Category.FAILURE
        assert Category.from_index(3) is Category.IN_PROGRESS
        assert Category.from_index(-1) is Category.FAILURE

    def test_titles(self) -> None:
        assert [category.title for category in Category] == [
            "In Progress",
            "Concluded Success",
            "Concluded Failure",
        ]


class TestFetchResult:
    def test_ok_result(self) -> None:
        result = FetchResult.ok(WorkflowSnapshot())

        assert result.is_ok
        assert result.error is None

    def test_failed_result(self) -> None:
        result = FetchResult.failed("boom")

        assert not result.is_ok
        assert result.snapshot is None
        assert result.error == "boom"
