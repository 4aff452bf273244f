"""Launch the timer dashboard for one workspace."""

from __future__ import annotations

import logging
import threading
import webbrowser
from pathlib import Path
from typing import Optional

import uvicorn

from .config import TrackerSettings
from .paths import get_activity_log_path
from .webapp import create_app

logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.0


def dashboard_url(host: str, port: int) -> str:
    # A wildcard bind is reachable on loopback.
    shown_host = "127.0.0.1" if host in ("0.0.0.0", "::") else host
    return f"http://{shown_host}:{port}"


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    workspace: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    open_browser: bool = True,
    log_level: str = "info",
) -> None:
    """Serve the dashboard until interrupted; the timer session lives as long as the server."""
    resolved_settings = settings or TrackerSettings()
    app = create_app(workspace=workspace, settings=resolved_settings)
    url = dashboard_url(host, port)
    logger.info(
        "Dashboard for %s at %s (reminders every %s).",
        get_activity_log_path(workspace),
        url,
        resolved_settings.reminder_interval,
    )

    if open_browser:
        opener = threading.Timer(BROWSER_DELAY_SECONDS, _open_browser, args=(url,))
        opener.daemon = True
        opener.start()

    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _open_browser(url: str) -> None:
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        logger.exception("Failed to launch browser for %s", url)
