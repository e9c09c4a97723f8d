"""Qitrack web UI: JSON API and a minimal HTML page.

Usage:
    uvicorn ui.app:app --host 127.0.0.1 --port 8080

    Or run directly:
    python -m ui.app
"""

from __future__ import annotations

import logging
import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from qitrack import (
    InvalidInput,
    PersistenceFailure,
    Tracker,
    compute_stats,
    describe_entry,
    format_duration,
    load_settings,
    now_local,
    open_tracker,
    workspace_root,
)
from qitrack import timer as practice_timer

logger = logging.getLogger(__name__)


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _parse_minutes(payload: dict[str, Any]) -> int:
    """Minutes from a JSON body; numeric strings are accepted like form input."""
    value = payload.get("minutes")
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidInput(f"Minutes must be a whole number, got {value!r}") from None
    return value  # validated by the engine


# ── App & auth ────────────────────────────────────────────────

app = FastAPI(title="Qitrack UI", version="0.1.0")

security = HTTPBasic(auto_error=False)


@app.exception_handler(InvalidInput)
def _invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "error": str(exc)})


@app.exception_handler(PersistenceFailure)
def _persistence_failure(request: Request, exc: PersistenceFailure) -> JSONResponse:
    logger.error("Request %s %s failed to persist: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"ok": False, "error": str(exc)})


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("QITRACK_USERNAME", "")
    expected_password = os.environ.get("QITRACK_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_tracker() -> Tracker:
    return open_tracker(workspace_root())


def _timer_payload(tracker: Tracker) -> dict[str, Any]:
    root = workspace_root()
    state = practice_timer.load_timer(tracker.current_day, root)
    elapsed = practice_timer.elapsed_seconds(state, now_local(root))
    return {
        **state.to_dict(),
        "running": state.is_running,
        "elapsedSeconds": elapsed,
        "elapsed": format_duration(elapsed),
        "canSkip": practice_timer.can_skip(state),
    }


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> HTMLResponse:
    settings = load_settings()
    summary = tracker.summary(settings.target_energy)
    timer = _timer_payload(tracker)

    rows = []
    for entry in reversed(tracker.log):
        kind = "practice" if entry.practice else "skip"
        rows.append(
            f'<tr class="{kind}"><td>{entry.day}</td>'
            f'<td>{_escape(describe_entry(entry))}</td></tr>'
        )
    table = "".join(rows) or '<tr><td colspan="2" class="muted">(no days logged yet)</td></tr>'

    html = f"""<!doctype html>
<html><head><meta charset="utf-8"><title>Qitrack</title></head>
<body>
<h1>Qitrack</h1>
<p>Day {summary['currentDay']} &middot; {summary['currentEnergy']:.2f} / {summary['targetEnergy']:g} energy
({summary['percent']}%) &middot; {_escape(summary['message'])}</p>
<p>Timer: {timer['elapsed']}{' (running)' if timer['running'] else ''}</p>
<table><thead><tr><th>Day</th><th>Entry</th></tr></thead><tbody>{table}</tbody></table>
</body></html>
"""
    return HTMLResponse(html)


# ── Log API ───────────────────────────────────────────────────

@app.get("/api/state")
def api_state(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    settings = load_settings()
    return {"ok": True, **tracker.summary(settings.target_energy), "timer": _timer_payload(tracker)}


@app.get("/api/log")
def api_log(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    return {"ok": True, "entries": [e.to_dict() for e in tracker.log]}


@app.get("/api/stats")
def api_stats(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    settings = load_settings()
    return {"ok": True, **compute_stats(tracker.log, settings.target_energy).to_dict()}


@app.post("/api/practice")
def api_practice(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    entry = tracker.log_practice(_parse_minutes(payload))
    return {"ok": True, "entry": entry.to_dict(), "currentEnergy": tracker.current_energy}


@app.post("/api/skip")
def api_skip(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    timer = practice_timer.load_timer(tracker.current_day, workspace_root())
    today = tracker.today_entry()
    if not practice_timer.can_skip(timer) or (today is not None and today.practice):
        raise InvalidInput("Cannot skip a day with timed practice; pause the timer or finish the day.")
    entry = tracker.log_skip()
    return {"ok": True, "entry": entry.to_dict(), "currentEnergy": tracker.current_energy}


@app.post("/api/advance")
def api_advance(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    root = workspace_root()
    timer = practice_timer.load_timer(tracker.current_day, root)
    if timer.is_running:
        raise InvalidInput("Pause the practice timer before advancing.")
    closed = tracker.advance_day()
    practice_timer.clear_timer(tracker.current_day, root)
    return {"ok": True, "closed": closed.to_dict(), "currentDay": tracker.current_day,
            "currentEnergy": tracker.current_energy}


@app.put("/api/log/{day}")
def api_edit_day(
    day: int,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    changed = tracker.edit_minutes(day, _parse_minutes(payload))
    return {"ok": True, "updated": [e.to_dict() for e in changed], "currentEnergy": tracker.current_energy}


@app.post("/api/reset")
def api_reset(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    tracker.reset()
    practice_timer.clear_timer(tracker.current_day, workspace_root())
    logger.info("Log reset by %s", username)
    return {"ok": True, "currentDay": tracker.current_day, "currentEnergy": tracker.current_energy}


# ── Timer API ─────────────────────────────────────────────────

@app.get("/api/timer")
def api_timer(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    return {"ok": True, **_timer_payload(tracker)}


@app.post("/api/timer/start")
def api_timer_start(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    practice_timer.start_timer(tracker, workspace_root())
    return {"ok": True, **_timer_payload(tracker)}


@app.post("/api/timer/pause")
def api_timer_pause(username: str = Depends(get_current_user), tracker: Tracker = Depends(get_tracker)) -> dict[str, Any]:
    _, entry = practice_timer.pause_and_log(tracker, workspace_root())
    return {"ok": True, "entry": entry.to_dict(), **_timer_payload(tracker)}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "ui.app:app",
        host=os.environ.get("QITRACK_HOST", "127.0.0.1"),
        port=int(os.environ.get("QITRACK_PORT", "8080")),
        log_level="info",
    )
