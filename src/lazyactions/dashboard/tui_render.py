"""Rich renderables built from a read-only view of the dashboard state."""

from __future__ import annotations

from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lazyactions.core.models import Category, Job
from lazyactions.core.reducer import AppState

from .tui_utils import _clip, _format_age, _format_duration


CATEGORY_COLORS: dict[Category, str] = {
    Category.IN_PROGRESS: "yellow",
    Category.SUCCESS: "green",
    Category.FAILURE: "red",
}

_STATUS_STYLES = {
    "completed": "green",
    "in_progress": "yellow",
    "queued": "bright_black",
    "waiting": "bright_black",
}

_CONCLUSION_STYLES = {
    "success": "bright_green",
    "failure": "red",
    "cancelled": "bright_black",
    "skipped": "blue",
}

LINES_PER_JOB = 4

KEY_HELP = (
    "Esc/q/Ctrl-C quit | Left/Right columns | Up/Down rows | PgUp/PgDn scroll\n"
    "Enter toggles job details | Backspace opens the job on GitHub"
)


def _status_style(status: str) -> str:
    return _STATUS_STYLES.get(status, "white")


def _conclusion_style(conclusion: str) -> str:
    return _CONCLUSION_STYLES.get(conclusion, "white")


def header_text(state: AppState, *, refresh_period: float) -> Text:
    repo = state.store.repo or "N/A"
    text = Text(justify="center")
    text.append("Showing jobs for: ", style="cyan")
    text.append(repo, style="bold cyan")
    text.append(" | Fetch Status: ", style="cyan")
    status_style = "red" if state.status_text.startswith("Error") else "cyan"
    text.append(_clip(state.status_text, 160), style=status_style)
    text.append("\n")
    text.append(KEY_HELP, style="cyan")
    text.append(f"\nAuto-refresh every {refresh_period:.1f} seconds.", style="bright_black")
    return text


def _job_lines(job: Job, *, number: int, highlighted: bool) -> list[Text]:
    base = "reverse cyan" if highlighted else "white"
    status_style = _status_style(job.status)

    title = Text()
    title.append(f"{number}. ", style=f"bold {base}")
    title.append(job.action, style=f"bold {base}")
    title.append(" [", style=status_style)
    title.append(job.status, style=status_style)
    if job.conclusion:
        title.append(f" ({job.conclusion})", style=_conclusion_style(job.conclusion))
    title.append("]", style=status_style)

    workflow = Text("  ")
    workflow.append(job.name, style="reverse bright_yellow" if highlighted else "bright_yellow")

    origin = Text(f"  {job.head_branch} by {job.actor_login}", style="italic bright_black")
    lines = [title, workflow, origin]
    # Blank separator rows pad each job to a fixed height.
    lines.extend(Text("") for _ in range(LINES_PER_JOB - len(lines)))
    return lines


def column_lines(state: AppState, category: Category) -> list[Text]:
    """All lines of one column: a header per tool group, then its jobs."""

    selected_column = state.nav.category is category
    lines: list[Text] = []
    job_number = 0
    for tool, positions in state.presentation.groups(category).items():
        header = Text("── ")
        header.append(tool, style="bold underline bright_cyan")
        header.append(" ──")
        lines.append(header)
        lines.append(Text("─", style="bright_black"))
        for position in positions:
            job = state.store.get(position)
            if job is None:
                continue
            highlighted = selected_column and state.nav.row_index == job_number
            lines.extend(_job_lines(job, number=job_number + 1, highlighted=highlighted))
            job_number += 1
    return lines


def visible_lines(lines: list[Text], *, offset: int, height: int | None) -> list[Text]:
    """Slice ``lines`` to the window starting at ``offset``, never past the end."""

    start = min(max(0, offset), len(lines))
    if height is None:
        return lines[start:]
    end = min(start + max(0, height), len(lines))
    return lines[start:end]


def column_panel(state: AppState, category: Category, *, height: int | None = None) -> Panel:
    selected = state.nav.category is category
    color = CATEGORY_COLORS[category]
    title = f"{category.title} ({state.presentation.count(category)})"
    border_style = f"bold {color}" if selected else color

    if state.presentation.is_empty(category):
        body: Text | Group = Text("No jobs in this category.", style="bright_black", justify="center")
    else:
        inner_height = None if height is None else max(0, height - 2)
        offset = state.nav.scroll_offset if selected else 0
        body = Group(*visible_lines(column_lines(state, category), offset=offset, height=inner_height))

    return Panel(body, title=title, border_style=border_style, height=height)


def details_panel(state: AppState, *, now: datetime | None = None) -> Panel:
    job = state.selected_job()
    if job is None:
        body: Text | Table = Text(
            "No job selected. Select a job in the main view before toggling detailed view.",
            style="bright_black",
            justify="center",
        )
        return Panel(body, title="Job Details", border_style="bright_blue")

    table = Table.grid(padding=(0, 1))
    table.add_column(style="bright_blue", no_wrap=True)
    table.add_column()
    table.add_row("Name:", job.name)
    table.add_row("Repo:", job.repo)
    table.add_row("Run ID:", str(job.run_id))
    table.add_row("Job ID:", str(job.id))
    table.add_row("Status:", Text(job.status, style=_status_style(job.status)))
    if job.conclusion:
        table.add_row("Conclusion:", Text(job.conclusion, style=_conclusion_style(job.conclusion)))
    table.add_row("Branch:", job.head_branch)
    table.add_row("Actor:", job.actor_login)
    table.add_row("Started:", _format_age(job.started_at, now=now))
    table.add_row("Duration:", _format_duration(job.started_at, job.completed_at, now=now))
    table.add_row("URL:", Text(job.html_url, style="underline"))
    return Panel(table, title="Job Details", border_style="bright_blue")
