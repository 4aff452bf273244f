"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "ActivityTracker"
APP_AUTHOR = "ActivityTracker"

WORKSPACE_DIR_NAME = ".activity-tracker"


def get_app_log_path() -> Path:
    """Return the file the application's own logs are written to."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR)
    path = Path(dirs.user_log_path)
    path.mkdir(parents=True, exist_ok=True)
    return path / "activity-tracker.log"


def resolve_workspace(workspace: Optional[Path] = None) -> Path:
    return Path(workspace).expanduser().resolve() if workspace else Path.cwd()


def get_activity_log_path(workspace: Optional[Path] = None) -> Path:
    return resolve_workspace(workspace) / WORKSPACE_DIR_NAME / "activity-log.json"


def get_export_path(workspace: Optional[Path] = None) -> Path:
    return resolve_workspace(workspace) / "activity-log.csv"
