"""Simple reporting utilities for CLI output."""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from .models import ActivityRecord, parse_iso
from .store import ActivityLogStore

UNTAGGED = "(untagged)"


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, store: ActivityLogStore, time_format: str = "24h") -> None:
        self.store = store
        self.time_format = time_format

    def print_summary(self, tag: Optional[str] = None) -> None:
        activities = self.store.filter_by_tag(tag) if tag else self.store.list()
        if not activities:
            print("No activities logged yet.")
            return

        print(f"Activities: {len(activities)}")
        print("-" * 40)
        print(f"Total time: {format_duration(total_duration(activities))}")
        print()

        by_tag = duration_by_tag(activities)
        print("Time by tag:")
        for name, seconds in by_tag:
            print(f"  {name:<30} {format_duration(seconds)}")

        print()
        print("Latest activities:")
        for record in activities[-5:]:
            started = format_clock(parse_iso(record.start_time), self.time_format)
            label = (record.description or "")[:45]
            print(f"  {started:<12} {label:<45} {format_duration(record.duration)}")


def total_duration(activities: Iterable[ActivityRecord]) -> float:
    return sum(record.duration for record in activities)


def duration_by_tag(activities: Iterable[ActivityRecord]) -> list[tuple[str, float]]:
    totals: defaultdict[str, float] = defaultdict(float)
    for record in activities:
        # Duplicate tags on a record count once.
        for tag in dict.fromkeys(record.tags or [UNTAGGED]):
            totals[tag] += record.duration
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def format_duration(seconds: float) -> str:
    total_seconds = int(max(seconds, 0)) if math.isfinite(seconds) else 0
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_clock(value: Optional[datetime], time_format: str = "24h") -> str:
    if value is None:
        return "--:--"
    local = value.astimezone()
    if time_format == "12h":
        return local.strftime("%I:%M %p")
    return local.strftime("%H:%M")
