"""Bounded job storage shared by the reducer and the renderer."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator

from lazyactions.core.models import MAX_DISPLAYED_JOBS, Job


class JobStore:
    """Insertion-ordered job buffer that evicts its oldest entries first."""

    def __init__(self, capacity: int = MAX_DISPLAYED_JOBS) -> None:
        if capacity <= 0:
            raise ValueError(f"JobStore capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._jobs: deque[Job] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, job: Job) -> None:
        if len(self._jobs) >= self._capacity:
            self._jobs.popleft()
        self._jobs.append(job)

    def replace(self, jobs: Iterable[Job]) -> None:
        """Drop every stored job, then insert ``jobs`` in order."""

        self._jobs.clear()
        for job in jobs:
            self.append(job)

    def get(self, position: int | None) -> Job | None:
        if position is None or position < 0 or position >= len(self._jobs):
            return None
        return self._jobs[position]

    @property
    def repo(self) -> str | None:
        if not self._jobs:
            return None
        return self._jobs[0].repo or None

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs)
