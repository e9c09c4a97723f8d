"""Persistence-aware orchestration around the energy engine.

Each mutating call runs the pure engine operation, hands the resulting
mutation to the store, and only then replaces the in-memory state. If the
store raises, the state is left exactly as it was and PersistenceFailure is
raised to the caller; nothing is retried here.

With a workspace *root*, the tracker also saves its ``current_day`` to
tracker/latest/day.json on every commit, so a day that was logged but not
advanced is reopened by the next process instead of being closed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from qitrack import engine
from qitrack.errors import PersistenceFailure
from qitrack.fileio import read_json, write_json_atomic
from qitrack.growth import TARGET_ENERGY
from qitrack.hooks import run_hooks
from qitrack.models import DayEntry, EngineState, Mutation
from qitrack.progress import percent_of_target, progress_message, progress_tier
from qitrack.store import JsonLogStore, Store
from qitrack.workspace import open_day_path, workspace_root

logger = logging.getLogger(__name__)


def load_open_day(root: Path) -> int | None:
    """``current_day`` saved by the last commit, or None if unknown."""
    path = open_day_path(root)
    try:
        day = read_json(path).get("currentDay")
        return int(day) if day is not None else None
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return None


def save_open_day(day: int, root: Path) -> None:
    write_json_atomic(open_day_path(root), {"currentDay": day})


class Tracker:
    """Owns the engine state for one log and keeps it in step with a store.

    Hooks (tracker/hooks.yaml) and the saved open day run only when a
    workspace *root* is given.
    """

    def __init__(self, store: Store, state: EngineState | None = None, root: Path | None = None) -> None:
        self.store = store
        self.root = root
        self._state = state if state is not None else EngineState()

    @classmethod
    def load(cls, store: Store, root: Path | None = None) -> Tracker:
        tracker = cls(store, root=root)
        tracker.reload()
        return tracker

    def reload(self) -> EngineState:
        """Rebuild state from the store.

        The current day is the day after the last entry, or the last entry's
        own day when the workspace records it as still open.
        """
        try:
            state = EngineState.from_log(self.store.load_log())
        except PersistenceFailure:
            logger.exception("Loading the log failed")
            raise
        except Exception as e:
            logger.exception("Loading the log failed")
            raise PersistenceFailure(f"Could not load log: {e}") from e

        if self.root is not None:
            state = state.resume_day(load_open_day(self.root))
        for problem in engine.verify_log(state.log):
            logger.warning("Log inconsistency: %s", problem)
        self._state = state
        logger.info("Loaded %d days; current day %d, energy %.2f",
                    len(state.log), state.current_day, state.current_energy)
        return state

    # ── Read access ───────────────────────────────────────────

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def log(self) -> tuple[DayEntry, ...]:
        return self._state.log

    @property
    def current_day(self) -> int:
        return self._state.current_day

    @property
    def current_energy(self) -> float:
        return self._state.current_energy

    def today_entry(self) -> DayEntry | None:
        return self._state.entry_for(self._state.current_day)

    def summary(self, target: float = TARGET_ENERGY) -> dict[str, Any]:
        energy = self._state.current_energy
        today = self.today_entry()
        return {
            "currentDay": self._state.current_day,
            "currentEnergy": round(energy, 2),
            "targetEnergy": target,
            "percent": round(percent_of_target(energy, target), 1),
            "tier": progress_tier(energy, target),
            "message": progress_message(energy, target),
            "today": today.to_dict() if today else None,
            "daysLogged": len(self._state.log),
        }

    # ── Mutations ─────────────────────────────────────────────

    def log_practice(self, minutes: int) -> DayEntry:
        """Record today's practice; replaces today's entry if one exists."""
        new_state, mutation = engine.log_practice(self._state, minutes)
        self._commit(new_state, mutation, "on_practice")
        return mutation.upserts[0]

    def log_skip(self) -> DayEntry:
        new_state, mutation = engine.log_skip(self._state)
        self._commit(new_state, mutation, "on_skip")
        return mutation.upserts[0]

    def advance_day(self) -> DayEntry:
        """Close today (as a skip if nothing was logged) and move to the next day.

        Returns the entry of the day that was closed.
        """
        closing_day = self._state.current_day
        new_state, mutation = engine.advance_day(self._state)
        self._commit(new_state, mutation, "on_advance")
        # the engine always leaves an entry for the day it closes
        return new_state.log[new_state.index_of(closing_day)]

    def edit_minutes(self, day: int, minutes: int) -> list[DayEntry]:
        """Change a past practice day's minutes. Returns the recomputed entries."""
        new_state, mutation = engine.edit_minutes(self._state, day, minutes)
        if mutation.is_empty:
            return []
        self._commit(new_state, mutation, "on_edit", {"editedDay": day, "minutes": minutes})
        return list(mutation.upserts)

    def reset(self) -> None:
        new_state, mutation = engine.reset()
        self._commit(new_state, mutation, "on_reset")

    def _commit(
        self,
        new_state: EngineState,
        mutation: Mutation,
        hook_point: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        try:
            if mutation.clear:
                self.store.persist_delete_all()
            if mutation.upserts:
                self.store.persist_upsert(list(mutation.upserts))
            if self.root is not None:
                save_open_day(new_state.current_day, self.root)
        except Exception as e:
            logger.error("Persisting %s failed; state left at day %d: %s",
                         hook_point, self._state.current_day, e)
            if isinstance(e, PersistenceFailure):
                raise
            raise PersistenceFailure(f"Could not save changes: {e}") from e

        self._state = new_state
        logger.info("%s: day %d, energy %.2f, %d row(s) saved",
                    hook_point, new_state.current_day, new_state.current_energy,
                    len(mutation.upserts))
        self._run_hooks(hook_point, mutation, extra)

    def _run_hooks(self, hook_point: str, mutation: Mutation, extra: dict[str, Any] | None) -> None:
        if self.root is None:
            return
        context: dict[str, Any] = {
            "currentDay": self._state.current_day,
            "currentEnergy": self._state.current_energy,
            "entries": [e.to_dict() for e in mutation.upserts],
        }
        if extra:
            context.update(extra)
        # Hook failures are logged, never raised.
        try:
            run_hooks(hook_point, context, self.root)
        except Exception:
            logger.exception("Hook point %s failed", hook_point)


def open_tracker(root: Path | None = None) -> Tracker:
    """Tracker over the workspace's tracker/log.json, with hooks enabled."""
    if root is None:
        root = workspace_root()
    return Tracker.load(JsonLogStore(root=root), root=root)
