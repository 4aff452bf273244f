"""Start/pause/stop timer with accumulated duration."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import TransitionResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Timer:
    """Tracks one work session across start/pause cycles.

    ``start()`` may be called again after ``pause()`` to resume; the accumulated
    duration is kept so running intervals add up. Invalid transitions are
    ignored and reported as ``TransitionResult.IGNORED``.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration = 0.0
        self.is_paused = False

    def start(self) -> TransitionResult:
        self.start_time = self._clock()
        self.is_paused = False
        return TransitionResult.APPLIED

    def pause(self) -> TransitionResult:
        if self.start_time is None or self.is_paused:
            logger.debug("Pause ignored: timer not running.")
            return TransitionResult.IGNORED
        self.duration += self._elapsed_since(self.start_time)
        self.is_paused = True
        return TransitionResult.APPLIED

    def stop(self) -> TransitionResult:
        # A paused timer keeps its end time unset; resume before stopping.
        if self.start_time is None or self.is_paused:
            logger.debug("Stop ignored: timer not running.")
            return TransitionResult.IGNORED
        self.end_time = self._clock()
        self.duration += max((self.end_time - self.start_time).total_seconds(), 0.0)
        return TransitionResult.APPLIED

    def reset(self) -> None:
        self.start_time = None
        self.end_time = None
        self.duration = 0.0
        self.is_paused = False

    def get_start_time(self) -> Optional[datetime]:
        return self.start_time

    def get_end_time(self) -> datetime:
        return self.end_time or self._clock()

    def get_duration(self) -> float:
        return self.duration

    def elapsed(self) -> float:
        """Accumulated seconds including the interval currently running."""
        if self.start_time is None or self.is_paused:
            return self.duration
        if self.end_time is not None and self.end_time >= self.start_time:
            return self.duration
        return self.duration + self._elapsed_since(self.start_time)

    def _elapsed_since(self, moment: datetime) -> float:
        return max((self._clock() - moment).total_seconds(), 0.0)
