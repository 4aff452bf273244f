"""Session orchestration: wires the timer to the activity log."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from .config import TrackerSettings, get_messages
from .models import (
    DEFAULT_DESCRIPTION,
    ActivityRecord,
    SessionState,
    TransitionResult,
    generate_activity_id,
    to_iso,
)
from .reporting import format_duration
from .store import ActivityLogStore, log_notification
from .timer import Clock, Timer, utc_now

logger = logging.getLogger(__name__)

REMINDER_MESSAGE = get_messages("en")["reminder"]


class ActivityTracker:
    """Owns one timer session and records finished sessions in the store."""

    def __init__(
        self,
        store: ActivityLogStore,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store
        self._clock = clock or utc_now
        self.timer = Timer(clock=self._clock)
        self.state = SessionState()
        self._lock = threading.Lock()

    def start_timer(self) -> TransitionResult:
        with self._lock:
            if self.state.is_running and not self.state.is_paused:
                logger.info("Timer is already running.")
                return TransitionResult.IGNORED
            fresh = not self.state.is_running
            if fresh:
                self.timer.reset()
            self.timer.start()
            self.state = self.state.started(fresh=fresh)
            logger.info("Timer %s.", "started" if fresh else "resumed")
            return TransitionResult.APPLIED

    def pause_timer(self) -> TransitionResult:
        with self._lock:
            if not self.state.is_running or self.state.is_paused:
                logger.info("Timer is not running or already paused.")
                return TransitionResult.IGNORED
            result = self.timer.pause()
            if result is TransitionResult.APPLIED:
                self.state = self.state.paused()
                logger.info("Timer paused.")
            return result

    def stop_timer(
        self,
        description: Optional[str] = None,
        include_files: bool = False,
    ) -> Optional[ActivityRecord]:
        """Stop the session and log it; returns ``None`` when nothing was running."""
        with self._lock:
            if not self.state.is_running:
                logger.info("Timer is not running.")
                return None
            self.timer.stop()
            start = self.timer.get_start_time()
            record = ActivityRecord(
                id=generate_activity_id(self._clock()),
                start_time=to_iso(start) if start else None,
                end_time=to_iso(self.timer.get_end_time()),
                duration=self.timer.get_duration(),
                description=(description or "").strip() or DEFAULT_DESCRIPTION,
                files_modified=list(self.state.modified_files) if include_files else [],
                include_files=include_files,
            )
            self.state = SessionState()
        self.store.append(record)
        logger.info("Activity %s logged (%s).", record.id, format_duration(record.duration))
        return record

    def record_file_modified(self, path: str) -> TransitionResult:
        with self._lock:
            if not self.state.is_running or not path:
                return TransitionResult.IGNORED
            self.state = self.state.with_file(path)
            return TransitionResult.APPLIED

    @property
    def is_active(self) -> bool:
        return self.state.is_running and not self.state.is_paused

    def status(self) -> dict[str, Any]:
        start = self.timer.get_start_time() if self.state.is_running else None
        elapsed = self.timer.elapsed() if self.state.is_running else 0.0
        return {
            "is_running": self.state.is_running,
            "is_paused": self.state.is_paused,
            "elapsed_seconds": elapsed,
            "elapsed": format_duration(elapsed),
            "start_time": to_iso(start) if start else None,
            "modified_files": list(self.state.modified_files),
        }


class ReminderRunner:
    """Periodically reminds the user while the timer is running, in a background thread."""

    def __init__(
        self,
        tracker: ActivityTracker,
        settings: TrackerSettings,
        notify: Callable[[str], None] = log_notification,
    ) -> None:
        self._tracker = tracker
        self._settings = settings
        self._notify = notify
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(target=self._run, args=(stop_event,), daemon=True)
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.info("Reminder thread started.")

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._thread.is_alive() or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            thread.join(timeout=10)
            logger.info("Reminder thread stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def remind_once(self) -> bool:
        if not self._tracker.is_active:
            return False
        self._notify(self._settings.messages["reminder"])
        return True

    def _run(self, stop_event: threading.Event) -> None:
        interval = self._settings.reminder_interval.total_seconds()
        # Interruptible sleep between reminders.
        while not stop_event.wait(interval):
            try:
                self.remind_once()
            except Exception:
                logger.exception("Reminder notification failed.")
