"""Timestamp and duration formatting."""

from __future__ import annotations

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(moment: datetime | None = None) -> str:
    """Standardized UTC timestamp with second precision."""
    moment = moment or utc_now()
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def format_duration(seconds: float) -> str:
    """Render a wall-clock duration as ``HhMMmSS.sss``-style text."""
    seconds = max(seconds, 0.0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{int(hours)}h{int(minutes):02d}m{secs:06.3f}s"
    return f"{int(minutes)}m{secs:06.3f}s"
