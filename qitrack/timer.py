"""Practice timer: start / pause / resume within one unadvanced day.

The timer belongs to the caller, not the engine. Several timed intervals
accumulate into one total, and every pause logs the day's *total* minutes,
which replaces that day's entry. The timer lives in tracker/latest/timer.json
and is discarded once the tracker has moved past its day.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from pathlib import Path

from qitrack.errors import TimerError
from qitrack.fileio import read_json, write_json_atomic
from qitrack.models import DayEntry, TimerState
from qitrack.tracker import Tracker
from qitrack.workspace import load_settings, now_local, timer_path, workspace_root

logger = logging.getLogger(__name__)


# ── State machine ─────────────────────────────────────────────


def start(state: TimerState, now: datetime) -> TimerState:
    """Begin (or resume) an interval."""
    if state.is_running:
        raise TimerError("The practice timer is already running.")
    return TimerState(
        day=state.day,
        started_at=now.isoformat(timespec="seconds"),
        accumulated_seconds=state.accumulated_seconds,
    )


def _interval_seconds(state: TimerState, now: datetime) -> int:
    if state.started_at is None:
        return 0
    try:
        started = datetime.fromisoformat(state.started_at)
    except ValueError:
        logger.warning("Unreadable timer start %r; counting the interval as 0s", state.started_at)
        return 0
    return max(0, math.floor((now - started).total_seconds()))


def pause(state: TimerState, now: datetime) -> TimerState:
    """End the running interval and fold it into the accumulated total."""
    if not state.is_running:
        raise TimerError("The practice timer is not running.")
    return TimerState(
        day=state.day,
        started_at=None,
        accumulated_seconds=state.accumulated_seconds + _interval_seconds(state, now),
    )


def elapsed_seconds(state: TimerState, now: datetime) -> int:
    return state.accumulated_seconds + _interval_seconds(state, now)


def total_minutes(seconds: float, minimum: int = 1) -> int:
    """Whole minutes for *seconds*, rounding half up, never below *minimum*."""
    return max(minimum, math.floor(seconds / 60 + 0.5))


def can_skip(state: TimerState) -> bool:
    """A day with timed practice (or a running timer) cannot be skipped."""
    return not state.is_running and state.accumulated_seconds == 0


# ── Workspace-backed helpers ──────────────────────────────────


def load_timer(day: int, root: Path | None = None) -> TimerState:
    """Timer for *day*; a saved timer for any other day is discarded."""
    if root is None:
        root = workspace_root()
    path = timer_path(root)
    try:
        state = TimerState.from_dict(read_json(path))
    except (ValueError, TypeError) as e:
        logger.warning("Ignoring unreadable timer %s: %s", path, e)
        return TimerState(day=day)
    if state.day != day:
        if state.is_running or state.accumulated_seconds:
            logger.info("Discarding timer for day %d (now day %d)", state.day, day)
        return TimerState(day=day)
    return state


def save_timer(state: TimerState, root: Path | None = None) -> None:
    if root is None:
        root = workspace_root()
    write_json_atomic(timer_path(root), state.to_dict())


def start_timer(tracker: Tracker, root: Path | None = None, now: datetime | None = None) -> TimerState:
    if root is None:
        root = workspace_root()
    now = now or now_local(root)
    state = start(load_timer(tracker.current_day, root), now)
    save_timer(state, root)
    return state


def pause_and_log(
    tracker: Tracker,
    root: Path | None = None,
    now: datetime | None = None,
) -> tuple[TimerState, DayEntry]:
    """Pause the timer and log the day's accumulated minutes as practice.

    The paused timer is saved only after the practice entry is persisted, so
    a PersistenceFailure leaves the timer running and the pause can be retried.
    """
    if root is None:
        root = workspace_root()
    now = now or now_local(root)
    paused = pause(load_timer(tracker.current_day, root), now)
    minutes = total_minutes(paused.accumulated_seconds, load_settings(root).min_logged_minutes)
    entry = tracker.log_practice(minutes)
    save_timer(paused, root)
    logger.info("Timer paused on day %d: %ds total, logged %d min",
                paused.day, paused.accumulated_seconds, minutes)
    return paused, entry


def clear_timer(day: int, root: Path | None = None) -> TimerState:
    """Fresh, idle timer for *day* (after advancing or resetting)."""
    state = TimerState(day=day)
    save_timer(state, root)
    return state
