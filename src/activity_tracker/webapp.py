"""FastAPI application that exposes a local web UI and API for the activity tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import TrackerSettings
from .diagram import DiagramRenderer
from .models import DEFAULT_DESCRIPTION, ActivityRecord, generate_activity_id
from .paths import get_activity_log_path, get_export_path
from .store import ActivityLogStore
from .tracker import ActivityTracker, ReminderRunner
from .views import render_dashboard_html, render_diagram_html, render_logs_html

logger = logging.getLogger(__name__)


class StopPayload(BaseModel):
    description: Optional[str] = None
    include_files: bool = False

    model_config = ConfigDict(extra="forbid")


class FilePayload(BaseModel):
    path: str = Field(min_length=1)

    model_config = ConfigDict(extra="forbid")


class TagPayload(BaseModel):
    tag: str

    model_config = ConfigDict(extra="forbid")


class ActivityPayload(BaseModel):
    """Activity in its persisted camelCase shape."""

    id: Optional[str] = None
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    duration: float = Field(default=0.0, ge=0)
    description: str = DEFAULT_DESCRIPTION
    files_modified: list[str] = Field(default_factory=list, alias="filesModified")
    include_files: bool = Field(default=False, alias="includeFiles")
    tags: Optional[list[str]] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_record(self, activity_id: Optional[str] = None) -> ActivityRecord:
        return ActivityRecord(
            id=activity_id or self.id or generate_activity_id(),
            start_time=self.start_time,
            end_time=self.end_time,
            duration=self.duration,
            description=self.description or DEFAULT_DESCRIPTION,
            files_modified=list(self.files_modified),
            include_files=self.include_files,
            tags=list(self.tags) if self.tags is not None else None,
        )


def create_app(
    *,
    workspace: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    tracker: Optional[ActivityTracker] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_settings = settings or TrackerSettings()
    if tracker is None:
        store = ActivityLogStore(
            get_activity_log_path(workspace),
            export_path=get_export_path(workspace),
            messages=resolved_settings.messages,
        )
        tracker = ActivityTracker(store)
    reminders = ReminderRunner(tracker, resolved_settings)
    renderer = DiagramRenderer()

    app = FastAPI(title="Activity Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.tracker = tracker
    app.state.reminders = reminders

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        reminders.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        reminders.stop()

    def _store(request: Request) -> ActivityLogStore:
        return request.app.state.tracker.store

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        current: ActivityTracker = request.app.state.tracker
        return {
            **current.status(),
            "log_path": str(current.store.log_path),
            "reminders_running": request.app.state.reminders.is_running(),
            "reminder_minutes": resolved_settings.reminder_interval.total_seconds() / 60.0,
            "time_format": resolved_settings.time_format,
        }

    @app.post("/api/timer/start")
    def start_timer(request: Request) -> Dict[str, Any]:
        current: ActivityTracker = request.app.state.tracker
        if not current.start_timer():
            raise HTTPException(status_code=409, detail="Timer is already running.")
        return current.status()

    @app.post("/api/timer/pause")
    def pause_timer(request: Request) -> Dict[str, Any]:
        current: ActivityTracker = request.app.state.tracker
        if not current.pause_timer():
            raise HTTPException(
                status_code=409, detail="Timer is not running or already paused."
            )
        return current.status()

    @app.post("/api/timer/stop")
    def stop_timer(request: Request, payload: Optional[StopPayload] = None) -> Dict[str, Any]:
        payload = payload or StopPayload()
        record = request.app.state.tracker.stop_timer(
            description=payload.description, include_files=payload.include_files
        )
        if record is None:
            raise HTTPException(status_code=409, detail="Timer is not running.")
        return {"activity": record.to_dict()}

    @app.post("/api/files")
    def record_file(payload: FilePayload, request: Request) -> Dict[str, Any]:
        current: ActivityTracker = request.app.state.tracker
        if not current.record_file_modified(payload.path):
            raise HTTPException(status_code=409, detail="Timer is not running.")
        return {"modified_files": list(current.state.modified_files)}

    @app.get("/api/activities")
    def list_activities(
        request: Request,
        tag: Optional[str] = Query(default=None, description="Only activities with this tag."),
    ) -> Dict[str, Any]:
        store = _store(request)
        activities = store.filter_by_tag(tag) if tag is not None else store.list()
        return {"activities": [record.to_dict() for record in activities]}

    @app.post("/api/activities", status_code=201)
    def add_activity(payload: ActivityPayload, request: Request) -> Dict[str, Any]:
        record = payload.to_record()
        _store(request).append(record)
        return {"activity": record.to_dict()}

    @app.put("/api/activities/{activity_id}")
    def update_activity(
        activity_id: str, payload: ActivityPayload, request: Request
    ) -> Dict[str, Any]:
        record = payload.to_record(activity_id)
        if not _store(request).update(record):
            raise HTTPException(status_code=404, detail="Activity not found")
        return {"activity": record.to_dict()}

    @app.delete("/api/activities/{activity_id}")
    def delete_activity(
        activity_id: str,
        request: Request,
        confirm: bool = Query(default=False, description="Confirm the deletion."),
    ) -> Dict[str, Any]:
        store = _store(request)
        if store.get(activity_id) is None:
            raise HTTPException(status_code=404, detail="Activity not found")
        deleted = _confirmed(store, confirm).remove(activity_id)
        if not deleted:
            raise HTTPException(status_code=409, detail="Deletion not confirmed.")
        return {"deleted": activity_id}

    @app.delete("/api/activities")
    def delete_all_activities(
        request: Request,
        confirm: bool = Query(default=False, description="Confirm the deletion."),
    ) -> Dict[str, Any]:
        if not _confirmed(_store(request), confirm).remove_all():
            raise HTTPException(status_code=409, detail="Deletion not confirmed.")
        return {"deleted": "all"}

    @app.post("/api/activities/{activity_id}/tags")
    def add_tag(activity_id: str, payload: TagPayload, request: Request) -> Dict[str, Any]:
        tag = payload.tag.strip()
        if not tag:
            raise HTTPException(status_code=400, detail="tag is required")
        store = _store(request)
        if not store.add_tag(activity_id, tag):
            raise HTTPException(status_code=404, detail="Activity not found")
        record = store.get(activity_id)
        return {"activity": record.to_dict() if record else None}

    @app.post("/api/export")
    def export_csv(request: Request) -> Dict[str, Any]:
        path = _store(request).export_csv()
        if path is None:
            raise HTTPException(status_code=404, detail="No activities to export.")
        return {"path": str(path)}

    @app.get("/api/diagram")
    def diagram(request: Request) -> Dict[str, Any]:
        return {"diagram": renderer.render(_store(request).list())}

    @app.get("/logs", response_class=HTMLResponse)
    def logs_page(request: Request) -> str:
        return render_logs_html(_store(request).list())

    @app.get("/diagram", response_class=HTMLResponse)
    def diagram_page(request: Request) -> str:
        return render_diagram_html(renderer.render(_store(request).list()))

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request) -> str:
        return render_dashboard_html(request.app.state.tracker.status())

    return app


def _confirmed(store: ActivityLogStore, confirm: bool) -> ActivityLogStore:
    """Copy of ``store`` whose confirmation prompt answers with ``confirm``."""
    return ActivityLogStore(
        store.log_path,
        export_path=store.export_path,
        confirm=lambda _message: confirm,
        notify=store.notify,
        messages=store.messages,
    )
