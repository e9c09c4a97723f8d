"""Typed dataclasses for the Qitrack data model.

Stored rows and API payloads use camelCase keys (``growthFactor``,
``currentDay``); Python attributes are snake_case. ``from_dict`` ignores
unknown keys and fills missing ones with defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from qitrack.errors import InvalidInput
from qitrack.growth import INITIAL_ENERGY, TARGET_ENERGY


def _opt_float(value: Any) -> float | None:
    return None if value is None else float(value)


# ── Log ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class DayEntry:
    """One logged day. Replaced wholesale whenever it is recomputed."""

    day: int
    practice: bool = False
    minutes: int = 0
    energy: float = INITIAL_ENERGY
    gain: float | None = None
    loss: float | None = None
    growth_factor: float | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DayEntry:
        practice = bool(d.get("practice", False))
        return cls(
            day=int(d.get("day", 0)),
            practice=practice,
            minutes=int(d.get("minutes", 0) or 0) if practice else 0,
            energy=float(d.get("energy", INITIAL_ENERGY)),
            gain=_opt_float(d.get("gain")),
            loss=_opt_float(d.get("loss")),
            growth_factor=_opt_float(d.get("growthFactor", d.get("growth_factor"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "practice": self.practice,
            "minutes": self.minutes,
            "energy": self.energy,
            "gain": self.gain,
            "loss": self.loss,
            "growthFactor": self.growth_factor,
        }


@dataclass(frozen=True)
class Mutation:
    """Rows an engine operation wants persisted.

    ``clear`` means delete every stored row first; ``upserts`` are keyed by day.
    """

    upserts: tuple[DayEntry, ...] = ()
    clear: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.upserts and not self.clear


@dataclass(frozen=True)
class EngineState:
    log: tuple[DayEntry, ...] = ()
    current_energy: float = INITIAL_ENERGY
    current_day: int = 1

    @classmethod
    def from_log(cls, entries: list[DayEntry] | tuple[DayEntry, ...]) -> EngineState:
        """Rebuild the state a freshly loaded log implies.

        ``current_day`` is the day after the last entry and ``current_energy``
        that entry's energy; an empty log starts at day 1 with 1.0 energy.
        """
        ordered = tuple(sorted(entries, key=lambda e: e.day))
        seen: set[int] = set()
        for entry in ordered:
            if entry.day < 1:
                raise InvalidInput(f"Invalid day number in log: {entry.day}")
            if entry.day in seen:
                raise InvalidInput(f"Duplicate day in log: {entry.day}")
            seen.add(entry.day)
        if not ordered:
            return cls()
        last = ordered[-1]
        return cls(log=ordered, current_energy=last.energy, current_day=last.day + 1)

    def resume_day(self, open_day: int | None) -> EngineState:
        """Reopen the last entry's day if it was logged but never advanced past.

        *open_day* is the ``current_day`` saved at the last commit. Any other
        value leaves the state as ``from_log`` built it.
        """
        last = self.last_entry
        if open_day is None or last is None or open_day != last.day:
            return self
        return EngineState(log=self.log, current_energy=last.energy, current_day=last.day)

    def entry_for(self, day: int) -> DayEntry | None:
        for entry in self.log:
            if entry.day == day:
                return entry
        return None

    def index_of(self, day: int) -> int:
        for i, entry in enumerate(self.log):
            if entry.day == day:
                return i
        return -1

    @property
    def last_entry(self) -> DayEntry | None:
        return self.log[-1] if self.log else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentDay": self.current_day,
            "currentEnergy": self.current_energy,
            "log": [e.to_dict() for e in self.log],
        }


# ── Practice timer ────────────────────────────────────────────


@dataclass
class TimerState:
    day: int = 1
    started_at: str | None = None  # ISO timestamp while running
    accumulated_seconds: int = 0

    @property
    def is_running(self) -> bool:
        return self.started_at is not None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerState:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            day=int(d.get("day", 1)),
            started_at=d.get("startedAt", d.get("started_at")),
            accumulated_seconds=int(d.get("accumulatedSeconds", d.get("accumulated_seconds", 0)) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "startedAt": self.started_at,
            "accumulatedSeconds": self.accumulated_seconds,
        }


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    target_energy: float = TARGET_ENERGY
    min_logged_minutes: int = 1

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            target_energy=float(d.get("target_energy", TARGET_ENERGY)),
            min_logged_minutes=int(d.get("min_logged_minutes", 1)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "target_energy": self.target_energy,
            "min_logged_minutes": self.min_logged_minutes,
        }


# ── Stats ─────────────────────────────────────────────────────


@dataclass
class LogStats:
    days_logged: int = 0
    practice_days: int = 0
    skipped_days: int = 0
    total_minutes: int = 0
    average_minutes: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    peak_energy: float = INITIAL_ENERGY
    days_to_target: int | None = None
    skipped_days_list: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "daysLogged": self.days_logged,
            "practiceDays": self.practice_days,
            "skippedDays": self.skipped_days,
            "totalMinutes": self.total_minutes,
            "averageMinutes": round(self.average_minutes, 1),
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "peakEnergy": self.peak_energy,
            "daysToTarget": self.days_to_target,
            "skippedDaysList": self.skipped_days_list,
        }
