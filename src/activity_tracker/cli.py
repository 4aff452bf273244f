"""Command-line interface for the activity tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import TrackerSettings
from .diagram import DiagramRenderer
from .models import ActivityRecord, generate_activity_id
from .paths import get_activity_log_path, get_app_log_path, get_export_path
from .reporting import SummaryPrinter, format_duration
from .server_runner import run_dashboard
from .store import ActivityLogStore
from .views import render_diagram_html

app = typer.Typer(help="Personal activity timer and logger.")

WORKSPACE_OPTION = typer.Option(
    None,
    "--workspace",
    "-w",
    path_type=Path,
    file_okay=False,
    help="Workspace holding the activity log. Defaults to the current directory.",
)


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_file: bool = typer.Option(
        False, "--log-file", help="Also write logs to the application log file."
    ),
    language: str = typer.Option(
        "en", "--language", help="Language of prompts and messages (en, es)."
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if log_file:
        handler = logging.FileHandler(get_app_log_path(), encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger().addHandler(handler)
    ctx.obj = TrackerSettings.from_values(language=language)


def _settings(ctx: typer.Context) -> TrackerSettings:
    return ctx.obj if isinstance(ctx.obj, TrackerSettings) else TrackerSettings()


def _open_store(
    ctx: typer.Context, workspace: Optional[Path], *, assume_yes: bool = False
) -> ActivityLogStore:
    return ActivityLogStore(
        get_activity_log_path(workspace),
        export_path=get_export_path(workspace),
        confirm=(lambda _message: True) if assume_yes else _confirm,
        notify=typer.echo,
        messages=_settings(ctx).messages,
    )


def _confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


@app.command("list")
def list_activities(
    ctx: typer.Context,
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only show activities with this tag."),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """List logged activities."""
    store = _open_store(ctx, workspace)
    activities = store.filter_by_tag(tag) if tag is not None else store.list()
    if not activities:
        typer.echo("No activities logged yet.")
        return
    for record in activities:
        tags = f" [{', '.join(record.tags)}]" if record.tags else ""
        description = record.description or ""
        typer.echo(
            f"{record.id}  {record.start_time}  {format_duration(record.duration)}  "
            f"{description}{tags}"
        )


@app.command()
def add(
    ctx: typer.Context,
    description: str = typer.Argument(..., help="What the activity was about."),
    start: str = typer.Option(..., "--start", help="Start time (ISO-8601)."),
    end: str = typer.Option(..., "--end", help="End time (ISO-8601)."),
    duration: float = typer.Option(..., "--duration", min=0.0, help="Duration in seconds."),
    files: Optional[List[str]] = typer.Option(
        None, "--file", "-f", help="Modified file; repeat for several."
    ),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Log an activity that was tracked elsewhere."""
    record = ActivityRecord(
        id=generate_activity_id(),
        start_time=start,
        end_time=end,
        duration=duration,
        description=description,
        files_modified=list(files or []),
        include_files=bool(files),
    )
    _open_store(ctx, workspace).append(record)
    typer.echo(f"Activity {record.id} logged.")


@app.command()
def tag(
    ctx: typer.Context,
    activity_id: str = typer.Argument(..., help="Identifier of the activity."),
    tag_name: str = typer.Argument(..., metavar="TAG", help="Tag to add."),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Add a tag to an activity."""
    if not _open_store(ctx, workspace).add_tag(activity_id, tag_name):
        typer.echo(f"No activity found for id={activity_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Tagged {activity_id} with {tag_name}.")


@app.command()
def delete(
    ctx: typer.Context,
    activity_id: str = typer.Argument(..., help="Identifier of the activity."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Delete one activity."""
    store = _open_store(ctx, workspace, assume_yes=yes)
    if store.get(activity_id) is None:
        typer.echo(f"No activity found for id={activity_id}", err=True)
        raise typer.Exit(code=1)
    if store.remove(activity_id):
        typer.echo(f"Deleted {activity_id}.")
    else:
        typer.echo("Cancelled.")


@app.command()
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Delete every logged activity."""
    if _open_store(ctx, workspace, assume_yes=yes).remove_all():
        typer.echo("All activities deleted.")
    else:
        typer.echo("Cancelled.")


@app.command()
def export(ctx: typer.Context, workspace: Optional[Path] = WORKSPACE_OPTION) -> None:
    """Export the activity log to CSV."""
    _open_store(ctx, workspace).export_csv()


@app.command()
def diagram(
    ctx: typer.Context,
    html: Optional[Path] = typer.Option(
        None, "--html", path_type=Path, help="Write an HTML page instead of printing markup."
    ),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Print the Mermaid Gantt chart for the logged activities."""
    text = DiagramRenderer().render(_open_store(ctx, workspace).list())
    if html is None:
        typer.echo(text)
        return
    html.write_text(render_diagram_html(text), encoding="utf-8")
    typer.echo(f"Diagram written to {html}")


@app.command()
def summary(
    ctx: typer.Context,
    tag_name: Optional[str] = typer.Option(None, "--tag", "-t", help="Only summarize this tag."),
    time_format: str = typer.Option("24h", "--time-format", help="24h or 12h clock."),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Print totals for the logged activities."""
    settings = TrackerSettings.from_values(time_format=time_format)
    SummaryPrinter(_open_store(ctx, workspace), time_format=settings.time_format).print_summary(tag_name)


@app.command()
def web(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    reminder_minutes: float = typer.Option(
        15.0,
        "--reminder-interval",
        min=1.0,
        help="Minutes between 'timer still running' reminders.",
    ),
    time_format: str = typer.Option("24h", "--time-format", help="24h or 12h clock."),
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the dashboard in your default browser.",
    ),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Start the local dashboard that owns the timer session."""
    settings = TrackerSettings.from_values(
        reminder_minutes=reminder_minutes,
        time_format=time_format,
        language=_settings(ctx).language,
    )
    run_dashboard(
        host=host,
        port=port,
        workspace=workspace,
        settings=settings,
        open_browser=open_browser,
    )
