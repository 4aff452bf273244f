"""JSON file persistence for activity records."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .config import get_messages
from .models import ActivityRecord, entry_id

logger = logging.getLogger(__name__)

CSV_HEADER = "ID,Start Time,End Time,Duration (seconds),Description,Files Modified"

DELETE_ONE_PROMPT = get_messages("en")["delete_one"]
DELETE_ALL_PROMPT = get_messages("en")["delete_all"]

# Keys written only while the record holds a value for them.
_OPTIONAL_KEYS = ("description", "tags")

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]

# Serializes read-modify-write cycles within this process.
_STORE_LOCK = threading.RLock()


def decline(_message: str) -> bool:
    return False


def log_notification(message: str) -> None:
    logger.info(message)


class ActivityLogStore:
    """Owns the activity log file and every mutation of it.

    Reads fail open: a missing or corrupted file behaves like an empty log.
    Write errors (permissions, full disk) propagate to the caller. Entries
    are kept as the plain objects found on disk, so a mutation rewrites only
    the entry it targets.
    """

    def __init__(
        self,
        log_path: Path,
        *,
        export_path: Optional[Path] = None,
        confirm: Confirm = decline,
        notify: Notify = log_notification,
        messages: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.log_path = Path(log_path)
        self.export_path = Path(export_path) if export_path else self.log_path.with_suffix(".csv")
        self.confirm = confirm
        self.notify = notify
        self.messages = messages or get_messages("en")

    def list(self) -> list[ActivityRecord]:
        return [ActivityRecord.from_dict(entry) for entry in self._load() if isinstance(entry, dict)]

    def get(self, activity_id: str) -> Optional[ActivityRecord]:
        for record in self.list():
            if record.id == activity_id:
                return record
        return None

    def append(self, record: ActivityRecord) -> None:
        with _STORE_LOCK:
            entries = self._load()
            entries.append(record.to_dict())
            self._save(entries)
        logger.debug("Appended activity %s", record.id)

    def update(self, record: ActivityRecord) -> bool:
        with _STORE_LOCK:
            entries = self._load()
            index = _find(entries, record.id)
            if index is not None:
                entries[index] = _merge(entries[index], record)
                self._save(entries)
                return True
        logger.debug("No activity with id=%s to update.", record.id)
        return False

    def remove(self, activity_id: str) -> bool:
        if not self.confirm(self.messages["delete_one"]):
            logger.info("Deletion of activity %s cancelled.", activity_id)
            return False
        with _STORE_LOCK:
            entries = self._load()
            remaining = [
                entry
                for entry in entries
                if not (isinstance(entry, dict) and entry_id(entry) == activity_id)
            ]
            self._save(remaining)
        return len(remaining) != len(entries)

    def remove_all(self) -> bool:
        if not self.confirm(self.messages["delete_all"]):
            logger.info("Deletion of all activities cancelled.")
            return False
        with _STORE_LOCK:
            self._save([])
        return True

    def export_csv(self) -> Optional[Path]:
        activities = self.list()
        if not activities:
            self.notify(self.messages["nothing_to_export"])
            return None
        lines = [CSV_HEADER, *(_csv_row(record) for record in activities)]
        self.export_path.parent.mkdir(parents=True, exist_ok=True)
        self.export_path.write_text("\n".join(lines), encoding="utf-8")
        self.notify(self.messages["exported"].format(path=self.export_path))
        return self.export_path

    def add_tag(self, activity_id: str, tag: str) -> bool:
        with _STORE_LOCK:
            entries = self._load()
            index = _find(entries, activity_id)
            if index is not None:
                entry = entries[index]
                if not isinstance(entry.get("tags"), list):
                    entry["tags"] = []
                entry["tags"].append(tag)
                self._save(entries)
                return True
        logger.debug("No activity with id=%s to tag.", activity_id)
        return False

    def filter_by_tag(self, tag: str) -> list[ActivityRecord]:
        return [record for record in self.list() if record.has_tag(tag)]

    def _load(self) -> list[Any]:
        try:
            data = self.log_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read activity log at %s", self.log_path, exc_info=True)
            return []
        if not data.strip():
            return []
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Activity log at %s is not valid JSON; treating as empty.", self.log_path)
            return []
        entries = parsed.get("activities") if isinstance(parsed, dict) else None
        return entries if isinstance(entries, list) else []

    def _save(self, entries: list[Any]) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text(json.dumps({"activities": entries}, indent=2), encoding="utf-8")


def _find(entries: list[Any], activity_id: str) -> Optional[int]:
    for index, entry in enumerate(entries):
        if isinstance(entry, dict) and entry_id(entry) == activity_id:
            return index
    return None


def _merge(entry: dict[str, Any], record: ActivityRecord) -> dict[str, Any]:
    """Lay ``record`` over the stored entry, keeping keys the record does not model."""
    payload = record.to_dict()
    merged = {**entry, **payload}
    for key in _OPTIONAL_KEYS:
        if key not in payload:
            merged.pop(key, None)
    return merged


def _csv_row(record: ActivityRecord) -> str:
    files = ";".join(record.files_modified)
    description = record.description if record.description is not None else ""
    return (
        f'{record.id},"{record.start_time}","{record.end_time}",'
        f'{_format_number(record.duration)},"{description}","{files}"'
    )


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
