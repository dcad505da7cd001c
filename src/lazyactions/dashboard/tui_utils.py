"""Shared helpers for dashboard timestamp parsing and formatting."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def _parse_iso8601(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    candidate = value.replace("Z", "+00:00")
    try:
        stamp = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)


def _clip(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def _format_seconds(seconds: int) -> str:
    seconds = max(0, seconds)
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds}s"
    hours, minutes = divmod(minutes, 60)
    if hours < 48:
        return f"{hours}h {minutes}m"
    return f"{hours // 24}d"


def _format_age(iso_ts: str | None, *, now: datetime | None = None) -> str:
    stamp = _parse_iso8601(iso_ts)
    if stamp is None:
        return "n/a"
    current = now or datetime.now(timezone.utc)
    return f"{_format_seconds(int((current - stamp).total_seconds()))} ago"


def _format_duration(
    started_at: str | None,
    completed_at: str | None,
    *,
    now: datetime | None = None,
) -> str:
    """Elapsed time of a job; still-running jobs are measured up to ``now``."""

    start = _parse_iso8601(started_at)
    if start is None:
        return "-"
    end = _parse_iso8601(completed_at) or now or datetime.now(timezone.utc)
    return _format_seconds(int((end - start).total_seconds()))

