"""Domain models for recorded activity."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

DEFAULT_DESCRIPTION = "No description provided"


class TransitionResult(enum.Enum):
    """Outcome of a timer or session transition."""

    APPLIED = "applied"
    IGNORED = "ignored"

    def __bool__(self) -> bool:
        return self is TransitionResult.APPLIED


@dataclass(slots=True)
class ActivityRecord:
    """A single logged unit of tracked work."""

    id: str
    start_time: Optional[str]
    end_time: Optional[str]
    duration: float = 0.0
    description: Optional[str] = DEFAULT_DESCRIPTION
    files_modified: list[str] = field(default_factory=list)
    include_files: bool = False
    tags: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActivityRecord":
        """Build a record from the persisted camelCase shape, tolerating bad fields."""
        files = data.get("filesModified")
        tags = data.get("tags")
        description = data.get("description")
        return cls(
            id=entry_id(data),
            start_time=_optional_str(data.get("startTime")),
            end_time=_optional_str(data.get("endTime")),
            duration=_coerce_duration(data.get("duration")),
            description=description if isinstance(description, str) else None,
            files_modified=[str(path) for path in files] if isinstance(files, list) else [],
            include_files=bool(data.get("includeFiles", False)),
            tags=[str(tag) for tag in tags] if isinstance(tags, list) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "filesModified": list(self.files_modified),
            "includeFiles": self.include_files,
        }
        if self.description is not None:
            payload["description"] = self.description
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        return payload

    def has_tag(self, tag: str) -> bool:
        return bool(self.tags) and tag in self.tags


@dataclass(frozen=True, slots=True)
class SessionState:
    """Orchestrator-owned view of the current timer session."""

    is_running: bool = False
    is_paused: bool = False
    modified_files: tuple[str, ...] = ()

    def started(self, *, fresh: bool) -> "SessionState":
        files = () if fresh else self.modified_files
        return replace(self, is_running=True, is_paused=False, modified_files=files)

    def paused(self) -> "SessionState":
        return replace(self, is_paused=True)

    def with_file(self, path: str) -> "SessionState":
        if path in self.modified_files:
            return self
        return replace(self, modified_files=self.modified_files + (path,))


def generate_activity_id(now: Optional[datetime] = None) -> str:
    """Return a time-based identifier (milliseconds since the epoch)."""
    moment = now or datetime.now(timezone.utc)
    return str(int(moment.timestamp() * 1000))


def to_iso(value: datetime) -> str:
    """Format an aware datetime as ISO-8601 with a trailing ``Z`` for UTC."""
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime, or ``None``."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def entry_id(data: Mapping[str, Any]) -> str:
    """Identifier of a persisted entry as a string; missing or null ids are empty."""
    value = data.get("id")
    return "" if value is None else str(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _coerce_duration(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(duration) or duration < 0:
        return 0.0
    return duration
