"""Job, run and snapshot records flowing through the dashboard engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


MAX_DISPLAYED_JOBS = 300
OTHER_GROUP = "Other"


class Category(Enum):
    """Top-level buckets shown as dashboard columns, in column order."""

    IN_PROGRESS = 0
    SUCCESS = 1
    FAILURE = 2

    @property
    def title(self) -> str:
        return _CATEGORY_TITLES[self]

    @classmethod
    def from_index(cls, index: int) -> "Category":
        return _CATEGORY_ORDER[index % len(_CATEGORY_ORDER)]


_CATEGORY_ORDER: tuple[Category, ...] = (
    Category.IN_PROGRESS,
    Category.SUCCESS,
    Category.FAILURE,
)

_CATEGORY_TITLES: dict[Category, str] = {
    Category.IN_PROGRESS: "In Progress",
    Category.SUCCESS: "Concluded Success",
    Category.FAILURE: "Concluded Failure",
}

CATEGORY_COUNT = len(_CATEGORY_ORDER)


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Job field {key!r} must be an integer, got {value!r}")
    return value


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Job field {key!r} must be a string, got {value!r}")
    return value


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Job field {key!r} must be a string or null, got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class Job:
    """One GitHub Actions job as reported by a single fetch."""

    id: int
    name: str
    run_id: int
    repo: str
    run_url: str
    actor_login: str
    head_branch: str
    status: str
    conclusion: str | None
    started_at: str
    completed_at: str | None
    html_url: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Job":
        """Build a job from one decoded JSON object.

        Raises ``ValueError`` when a required field is missing or has the
        wrong type. ``started_at`` may be null for queued jobs and is then
        stored as an empty string, which sorts as the oldest timestamp.
        """

        if not isinstance(payload, dict):
            raise ValueError(f"Job payload must be an object, got {type(payload).__name__}")
        return cls(
            id=_require_int(payload, "id"),
            name=_require_str(payload, "name"),
            run_id=_require_int(payload, "run_id"),
            repo=_require_str(payload, "repo"),
            run_url=_require_str(payload, "run_url"),
            actor_login=_require_str(payload, "actor_login"),
            head_branch=_require_str(payload, "head_branch"),
            status=_require_str(payload, "status"),
            conclusion=_optional_str(payload, "conclusion"),
            started_at=_optional_str(payload, "started_at") or "",
            completed_at=_optional_str(payload, "completed_at"),
            html_url=_require_str(payload, "html_url"),
        )

    @property
    def action(self) -> str:
        parts = [part.strip() for part in self.name.split("/")]
        return parts[-1] or self.name


@dataclass(frozen=True, slots=True)
class WorkflowRun:
    """Parent run metadata the jobs of one snapshot were collected from."""

    id: int
    actor_login: str
    head_branch: str
    repo: str


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    """Complete result of one fetch cycle."""

    jobs: tuple[Job, ...] = ()
    runs: tuple[WorkflowRun, ...] = ()


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of one fetch: either a snapshot or an error message."""

    snapshot: WorkflowSnapshot | None = None
    error: str | None = None

    @classmethod
    def ok(cls, snapshot: WorkflowSnapshot) -> "FetchResult":
        return cls(snapshot=snapshot)

    @classmethod
    def failed(cls, message: str) -> "FetchResult":
        return cls(error=message)

    @property
    def is_ok(self) -> bool:
        return self.snapshot is not None
