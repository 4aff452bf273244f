"""Mermaid Gantt chart generation for logged activities."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional

from .models import ActivityRecord, parse_iso

# Latest whole second a task may start at and still get a one second width.
_LAST_START = datetime.max.replace(microsecond=0, tzinfo=timezone.utc) - timedelta(seconds=1)

PREAMBLE = (
    "gantt",
    "    title Activity Timeline",
    "    dateFormat YYYY-MM-DD HH:mm:ss",
    "    axisFormat %H:%M:%S",
    "    section Activities",
)

PLACEHOLDER_TASK = "    No_activities_logged :noact, 2025-01-01 00:00:00, 2025-01-01 00:00:01"

# Applied in order; backslashes are rewritten before any escape is introduced.
_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("\\", "/"),
    ('"', '\\"'),
    (":", "_"),
    ("\n", " "),
    ("#", "\\#"),
    (";", "\\;"),
    (",", "\\,"),
)
_WHITESPACE_RUN = re.compile(r"\s+")


def escape_mermaid_text(text: Any, index: int) -> str:
    """Make free text safe to use as a Mermaid task label."""
    if not isinstance(text, str) or not text.strip():
        return f"Activity_{index + 1}"
    cleaned = text
    for old, new in _REPLACEMENTS:
        cleaned = cleaned.replace(old, new)
    return _WHITESPACE_RUN.sub("_", cleaned).strip()


def resolve_display_time(value: Any, now: Optional[datetime] = None) -> datetime:
    """Parse a timestamp, substituting ``now`` when it is missing or invalid.

    The result is truncated to whole seconds so comparisons match the
    printed values.
    """
    parsed = parse_iso(value) or now or datetime.now(timezone.utc)
    return parsed.astimezone(timezone.utc).replace(microsecond=0)


def render_gantt(activities: Any, now: Optional[datetime] = None) -> str:
    """Build Mermaid Gantt markup with one task row per activity."""
    moment = now or datetime.now(timezone.utc)
    rows: list[str] = []
    entries: Iterable[Any] = activities if isinstance(activities, (list, tuple)) else ()
    for index, activity in enumerate(entries):
        fields = _as_fields(activity)
        if fields is None:
            continue
        rows.extend(_task_rows(fields, index, moment))
    return "\n".join([*PREAMBLE, *(rows or [PLACEHOLDER_TASK])])


class DiagramRenderer:
    """Callable facade used by the dashboard and CLI."""

    def render(self, activities: Any) -> str:
        return render_gantt(activities)


def _as_fields(activity: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(activity, ActivityRecord):
        return activity.to_dict()
    if isinstance(activity, Mapping):
        return activity
    return None


def _task_rows(fields: Mapping[str, Any], index: int, now: datetime) -> list[str]:
    start = resolve_display_time(fields.get("startTime"), now)
    end = resolve_display_time(fields.get("endTime"), now)
    if start >= end:
        start = min(start, _LAST_START)
        end = start + timedelta(seconds=1)
    start_text = _format_time(start)
    end_text = _format_time(end)

    task_id = f"task{index}"
    label = escape_mermaid_text(fields.get("description"), index)
    rows = [f"    {label} :{task_id}, {start_text}, {end_text}"]

    files = fields.get("filesModified")
    if fields.get("includeFiles") and isinstance(files, list) and files:
        rows.append(f"    Files :f{task_id}, {start_text}, {end_text}")
    return rows


def _format_time(value: datetime) -> str:
    # isoformat pads years below 1000, unlike strftime on most platforms.
    return value.replace(tzinfo=None).isoformat(sep=" ")
