"""Categorize and group stored jobs into the dashboard's column layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from lazyactions.core.models import OTHER_GROUP, Category
from lazyactions.core.store import JobStore


_ACTIVE_STATUSES = frozenset({"in_progress", "queued", "waiting"})


def categorize(status: str, conclusion: str | None) -> Category | None:
    """Map a job lifecycle to its column, or ``None`` when it is not shown."""

    if status == "completed":
        if conclusion == "success":
            return Category.SUCCESS
        if conclusion == "failure":
            return Category.FAILURE
        return None
    if status in _ACTIVE_STATUSES:
        return Category.IN_PROGRESS
    return None


def group_key(name: str) -> str:
    """Return the tool segment of a ``"Tool / Workflow / Step"`` job name."""

    head = name.split("/", 1)[0].strip()
    return head or OTHER_GROUP


def _empty_groups() -> dict[Category, dict[str, tuple[int, ...]]]:
    return {category: {} for category in Category}


@dataclass(frozen=True, slots=True)
class PresentationModel:
    """Store positions per category and tool group, in display order.

    Group keys iterate lexicographically; positions inside a group are
    ordered most recently started first.
    """

    _groups: dict[Category, dict[str, tuple[int, ...]]] = field(
        default_factory=_empty_groups
    )

    @classmethod
    def empty(cls) -> "PresentationModel":
        return cls()

    def groups(self, category: Category) -> Mapping[str, tuple[int, ...]]:
        return MappingProxyType(self._groups.get(category, {}))

    def flatten(self, category: Category) -> list[int]:
        positions: list[int] = []
        for members in self.groups(category).values():
            positions.extend(members)
        return positions

    def count(self, category: Category) -> int:
        return sum(len(members) for members in self.groups(category).values())

    def is_empty(self, category: Category) -> bool:
        return self.count(category) == 0


def build_presentation(store: JobStore) -> PresentationModel:
    """Rebuild the full presentation model from the current store contents."""

    ordered = sorted(
        enumerate(store),
        key=lambda item: item[1].started_at,
        reverse=True,
    )

    buckets: dict[Category, dict[str, list[int]]] = {category: {} for category in Category}
    for position, job in ordered:
        category = categorize(job.status, job.conclusion)
        if category is None:
            continue
        buckets[category].setdefault(group_key(job.name), []).append(position)

    groups = {
        category: {key: tuple(members[key]) for key in sorted(members)}
        for category, members in buckets.items()
    }
    return PresentationModel(groups)
