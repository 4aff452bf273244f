"""Configuration models and helpers for the activity tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

TIME_FORMATS = ("24h", "12h")

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "reminder": "The timer is still running. Keep up the good work!",
        "delete_one": "Are you sure you want to delete this activity?",
        "delete_all": "Are you sure you want to delete all activities? This action cannot be undone.",
        "nothing_to_export": "No activities to export.",
        "exported": "Activities exported to {path}",
    },
    "es": {
        "reminder": "El temporizador sigue en marcha. ¡Buen trabajo!",
        "delete_one": "¿Seguro que quieres eliminar esta actividad?",
        "delete_all": "¿Seguro que quieres eliminar todas las actividades? Esta acción no se puede deshacer.",
        "nothing_to_export": "No hay actividades para exportar.",
        "exported": "Actividades exportadas a {path}",
    },
}
LANGUAGES = tuple(MESSAGES)


def get_messages(language: str) -> Mapping[str, str]:
    """User-facing message table for ``language``, falling back to English."""
    return MESSAGES.get(language, MESSAGES["en"])


@dataclass(slots=True)
class TrackerSettings:
    """User preferences for the timer session and its reminders."""

    reminder_interval: timedelta = timedelta(minutes=15)
    time_format: str = "24h"
    language: str = "en"

    @classmethod
    def from_values(
        cls,
        reminder_minutes: float | None = None,
        time_format: str | None = None,
        language: str | None = None,
    ) -> "TrackerSettings":
        defaults = cls()
        reminder = (
            timedelta(minutes=reminder_minutes)
            if reminder_minutes is not None and reminder_minutes > 0
            else defaults.reminder_interval
        )
        return cls(
            reminder_interval=reminder,
            time_format=time_format if time_format in TIME_FORMATS else defaults.time_format,
            language=language if language in LANGUAGES else defaults.language,
        )

    @property
    def messages(self) -> Mapping[str, str]:
        return get_messages(self.language)
