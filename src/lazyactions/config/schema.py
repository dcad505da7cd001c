"""Dataclass-based configuration schema for lazyactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lazyactions.core.models import MAX_DISPLAYED_JOBS


DEFAULT_LOG_FILE = Path.home() / ".lazyactions" / "lazyactions.log"


@dataclass(frozen=True, slots=True)
class FetchFilters:
    """Run filters resolved once at startup."""

    branch: bool = False
    user: bool = False
    latest: bool = False

    @property
    def run_window(self) -> int:
        """Number of most recent workflow runs to collect jobs from."""

        return 1 if self.latest else 3


@dataclass(slots=True)
class DashboardConfig:
    """Top-level dashboard configuration."""

    filters: FetchFilters = field(default_factory=FetchFilters)
    refresh_rate: float = 0.15
    max_displayed_jobs: int = MAX_DISPLAYED_JOBS
    page_size: int = 25
    fetch_workers: int = 4
    command_timeout: float = 60.0
    log_file: Path | None = DEFAULT_LOG_FILE
    log_level: str = "INFO"

    @property
    def refresh_period(self) -> float:
        return 1.0 / self.refresh_rate

    def validate(self) -> None:
        if self.refresh_rate <= 0:
            raise ValueError(f"refresh_rate must be positive, got {self.refresh_rate}")
        if self.max_displayed_jobs <= 0:
            raise ValueError(
                f"max_displayed_jobs must be positive, got {self.max_displayed_jobs}"
            )
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.command_timeout <= 0:
            raise ValueError(
                f"command_timeout must be positive, got {self.command_timeout}"
            )
