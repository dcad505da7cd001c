"""`lazyactions watch` and `lazyactions snapshot` commands."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any

import tyro

from lazyactions.config.schema import DEFAULT_LOG_FILE, DashboardConfig, FetchFilters
from lazyactions.core.grouping import build_presentation
from lazyactions.core.models import Category, WorkflowSnapshot
from lazyactions.core.store import JobStore
from lazyactions.dashboard.tui_app import run_dashboard
from lazyactions.github.gh_cli import GhCli, GhCliError
from lazyactions.observability.logging import configure_logging


@dataclass(slots=True)
class WatchCommand:
    """Run the live three-column job dashboard."""

    branch: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-b"])] = False
    """Only show runs of the current git branch."""
    user: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-u"])] = False
    """Only show runs triggered by the current GitHub user."""
    latest: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-l"])] = False
    """Only show the latest run instead of the latest three."""
    refresh_rate: Annotated[float, tyro.conf.arg(prefix_name=False)] = 0.15
    """Fetches per second."""
    fetch_workers: Annotated[int, tyro.conf.arg(prefix_name=False)] = 4
    command_timeout: Annotated[float, tyro.conf.arg(prefix_name=False)] = 60.0
    log_file: Annotated[Path | None, tyro.conf.arg(prefix_name=False)] = DEFAULT_LOG_FILE
    log_level: Annotated[str, tyro.conf.arg(prefix_name=False)] = "INFO"


@dataclass(slots=True)
class SnapshotCommand:
    """Fetch once and print the categorized job summary as JSON."""

    branch: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-b"])] = False
    user: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-u"])] = False
    latest: Annotated[bool, tyro.conf.arg(prefix_name=False, aliases=["-l"])] = False
    command_timeout: Annotated[float, tyro.conf.arg(prefix_name=False)] = 60.0
    log_level: Annotated[str, tyro.conf.arg(prefix_name=False)] = "WARNING"


@dataclass(slots=True)
class LogsCommand:
    """Print the raw console log of one job."""

    job_id: Annotated[int, tyro.conf.arg(prefix_name=False)]
    command_timeout: Annotated[float, tyro.conf.arg(prefix_name=False)] = 60.0
    log_level: Annotated[str, tyro.conf.arg(prefix_name=False)] = "WARNING"


def connect(filters: FetchFilters, *, timeout: float) -> GhCli:
    """Verify gh authentication and resolve the repository context."""

    try:
        GhCli(filters, timeout=timeout).check_auth()
    except GhCliError as exc:
        raise SystemExit(str(exc)) from exc
    return GhCli.from_environment(filters, timeout=timeout)


def summarize_snapshot(snapshot: WorkflowSnapshot, *, capacity: int) -> dict[str, Any]:
    """Categorize a snapshot exactly as the dashboard would display it."""

    store = JobStore(capacity)
    store.replace(snapshot.jobs)
    model = build_presentation(store)

    categories: dict[str, Any] = {}
    for category in Category:
        groups: dict[str, list[dict[str, Any]]] = {}
        for tool, positions in model.groups(category).items():
            rows: list[dict[str, Any]] = []
            for position in positions:
                job = store.get(position)
                if job is None:
                    continue
                rows.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "status": job.status,
                        "conclusion": job.conclusion,
                        "started_at": job.started_at,
                        "html_url": job.html_url,
                    }
                )
            groups[tool] = rows
        categories[category.title] = {"count": model.count(category), "groups": groups}

    return {
        "repo": store.repo,
        "runs": [run.id for run in snapshot.runs],
        "stored_jobs": len(store),
        "categories": categories,
    }


def execute_watch(command: WatchCommand) -> None:
    config = DashboardConfig(
        filters=FetchFilters(branch=command.branch, user=command.user, latest=command.latest),
        refresh_rate=command.refresh_rate,
        fetch_workers=command.fetch_workers,
        command_timeout=command.command_timeout,
        log_file=command.log_file,
        log_level=command.log_level,
    )
    try:
        config.validate()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    configure_logging(config.log_level, config.log_file)
    print("Checking GitHub CLI status...")
    client = connect(config.filters, timeout=config.command_timeout)
    print("GitHub CLI is installed and authenticated.")
    run_dashboard(config, client.fetch_workflow_data)


def execute_snapshot(command: SnapshotCommand) -> None:
    configure_logging(command.log_level)
    filters = FetchFilters(branch=command.branch, user=command.user, latest=command.latest)
    client = connect(filters, timeout=command.command_timeout)
    try:
        snapshot = client.fetch_workflow_data()
    except GhCliError as exc:
        raise SystemExit(f"Error fetching GitHub data via gh CLI: {exc}") from exc
    summary = summarize_snapshot(snapshot, capacity=DashboardConfig().max_displayed_jobs)
    print(json.dumps(summary, indent=2, sort_keys=True))


def execute_logs(command: LogsCommand) -> None:
    configure_logging(command.log_level)
    client = connect(FetchFilters(), timeout=command.command_timeout)
    try:
        print(client.fetch_job_logs(command.job_id))
    except GhCliError as exc:
        raise SystemExit(str(exc)) from exc
