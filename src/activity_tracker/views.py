"""HTML pages for the timer dashboard, the activity log and the timeline diagram."""

from __future__ import annotations

from html import escape
from typing import Any, Iterable, Mapping

from .models import ActivityRecord

MERMAID_CDN = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"


def render_logs_html(activities: Iterable[ActivityRecord]) -> str:
    items = [_activity_item(record) for record in activities]
    body = (
        "<p>No activities logged yet.</p>"
        if not items
        else "<ul>\n" + "\n".join(items) + "\n</ul>"
    )
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <head><meta charset=\"utf-8\"><title>Activity Logs</title></head>\n"
        "  <body>\n"
        "    <h1>Activity Logs</h1>\n"
        f"    {body}\n"
        "  </body>\n"
        "</html>\n"
    )


def _activity_item(record: ActivityRecord) -> str:
    files = ", ".join(record.files_modified) or "None"
    tags = ", ".join(record.tags) if record.tags else "None"
    fields = (
        ("ID", record.id),
        ("Start", record.start_time or ""),
        ("End", record.end_time or ""),
        ("Duration", f"{record.duration / 3600:.2f} hours"),
        ("Description", record.description or ""),
        ("Files", files),
        ("Tags", tags),
    )
    lines = "<br>\n".join(
        f"      <strong>{label}:</strong> {escape(str(value))}" for label, value in fields
    )
    return f"    <li>\n{lines}\n    </li>"


def render_diagram_html(diagram_text: str) -> str:
    escaped = escape(diagram_text, quote=False)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Activity Timeline</title>
    <script src="{MERMAID_CDN}"></script>
    <style>
      body {{ margin: 20px; font-family: Arial, sans-serif; }}
      .mermaid {{ max-width: 100%; overflow-x: auto; }}
      .error {{ color: red; }}
      .mermaid-code {{ background: #f5f5f5; padding: 10px; white-space: pre-wrap; }}
    </style>
  </head>
  <body>
    <h1>Activity Timeline</h1>
    <div class="mermaid">
{escaped}
    </div>
    <div id="error" class="error"></div>
    <h3>Generated Mermaid Code</h3>
    <pre class="mermaid-code">{escaped}</pre>
    <script>
      mermaid.initialize({{ startOnLoad: false, theme: 'default' }});
      mermaid.run().catch((err) => {{
        document.getElementById('error').innerText = 'Error rendering diagram: ' + err.message;
      }});
    </script>
  </body>
</html>
"""


def render_dashboard_html(status: Mapping[str, Any]) -> str:
    """Timer controls with a live elapsed display, backed by the ``/api/timer`` endpoints."""
    elapsed = escape(str(status.get("elapsed", "00:00:00")))
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Activity Tracker</title>
    <style>
      body {{ margin: 20px; font-family: Arial, sans-serif; }}
      #timer-display {{ font-size: 2.5em; font-variant-numeric: tabular-nums; }}
      button {{ font-size: 1.1em; margin-right: 8px; }}
      #start-button {{ color: #28a745; }}
      #pause-button {{ color: #ffc107; }}
      #stop-button {{ color: #dc3545; }}
      .hidden {{ display: none; }}
    </style>
  </head>
  <body>
    <h1>Activity Tracker</h1>
    <div id="timer-display">Timer: {elapsed}</div>
    <p>
      <button id="start-button" onclick="post('/api/timer/start')">Start</button>
      <button id="pause-button" onclick="post('/api/timer/pause')">Pause</button>
      <button id="stop-button" onclick="stopTimer()">Stop</button>
    </p>
    <p id="message"></p>
    <p><a href="/logs">Activity logs</a> | <a href="/diagram">Timeline diagram</a></p>
    <script>
      async function post(url, body) {{
        const response = await fetch(url, {{
          method: 'POST',
          headers: {{ 'Content-Type': 'application/json' }},
          body: body ? JSON.stringify(body) : undefined,
        }});
        const payload = await response.json();
        document.getElementById('message').innerText = response.ok ? '' : payload.detail;
        await refresh();
        return response.ok;
      }}

      async function stopTimer() {{
        const description = window.prompt('Enter a description for this activity', '');
        const includeFiles = window.confirm('Include modified files in the log?');
        if (await post('/api/timer/stop', {{ description: description, include_files: includeFiles }})) {{
          document.getElementById('message').innerText = 'Activity logged.';
        }}
      }}

      function show(id, visible) {{
        document.getElementById(id).classList.toggle('hidden', !visible);
      }}

      async function refresh() {{
        const status = await (await fetch('/api/status')).json();
        const running = status.is_running && !status.is_paused;
        document.getElementById('timer-display').innerText = 'Timer: ' + status.elapsed;
        show('start-button', !running);
        show('pause-button', running);
        show('stop-button', status.is_running);
        show('timer-display', status.is_running);
      }}

      refresh();
      setInterval(refresh, 1000);
    </script>
  </body>
</html>
"""
