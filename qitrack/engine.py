"""Energy-progression engine: pure transitions over an ordered day log.

Every operation takes an EngineState and returns ``(new_state, mutation)``.
Nothing here performs I/O; the Tracker decides whether a new state is
committed, based on whether persisting the mutation succeeds.

Energy chains through the *stored* (rounded) energy of the previous entry, so
a live log, a reloaded log and a recomputed log all agree exactly.
"""

from __future__ import annotations

from qitrack.errors import InvalidInput
from qitrack.growth import (
    ENERGY_DECIMALS,
    FACTOR_DECIMALS,
    INITIAL_ENERGY,
    practice_energy,
    skip_energy,
)
from qitrack.models import DayEntry, EngineState, Mutation

# Allowed gap between a stored energy and its recomputation (one rounding step).
VERIFY_TOLERANCE = 0.011


# ── Entry construction ────────────────────────────────────────


def validate_minutes(minutes: object) -> int:
    """Return *minutes* as an int, or raise InvalidInput."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise InvalidInput(f"Minutes must be a whole number, got {minutes!r}")
    if minutes < 0:
        raise InvalidInput(f"Minutes cannot be negative, got {minutes}")
    return minutes


def practice_entry(day: int, start: float, minutes: int) -> DayEntry:
    energy, gain, factor = practice_energy(start, minutes)
    return DayEntry(
        day=day,
        practice=True,
        minutes=minutes,
        energy=round(energy, ENERGY_DECIMALS),
        gain=round(gain, ENERGY_DECIMALS),
        loss=None,
        growth_factor=round(factor, FACTOR_DECIMALS),
    )


def skip_entry(day: int, start: float) -> DayEntry:
    energy, loss = skip_energy(start)
    return DayEntry(
        day=day,
        practice=False,
        minutes=0,
        energy=round(energy, ENERGY_DECIMALS),
        gain=None,
        loss=round(loss, ENERGY_DECIMALS),
        growth_factor=None,
    )


def apply_entry(entry: DayEntry, start: float, minutes: int | None = None) -> DayEntry:
    """Recompute *entry* from *start*, keeping its day and practice flag."""
    if entry.practice:
        return practice_entry(entry.day, start, entry.minutes if minutes is None else minutes)
    return skip_entry(entry.day, start)


def _start_energy(state: EngineState) -> float:
    """Energy at the start of ``state.current_day``.

    Uses the previous day's stored energy rather than ``current_energy``, so
    re-logging an unadvanced day never compounds on top of itself.
    """
    previous = state.entry_for(state.current_day - 1)
    if previous is not None:
        return previous.energy
    if state.current_day == 1:
        return INITIAL_ENERGY
    return state.current_energy


def _place(log: tuple[DayEntry, ...], entry: DayEntry) -> tuple[DayEntry, ...]:
    """Replace the entry for ``entry.day`` in place, or insert it in day order."""
    out = list(log)
    for i, existing in enumerate(out):
        if existing.day == entry.day:
            out[i] = entry
            return tuple(out)
    out.append(entry)
    out.sort(key=lambda e: e.day)
    return tuple(out)


# ── Operations ────────────────────────────────────────────────


def log_practice(state: EngineState, minutes: object) -> tuple[EngineState, Mutation]:
    """Record ``state.current_day`` as a practice day of *minutes*.

    Re-logging the same day replaces its entry. Does not advance the day.
    """
    minutes = validate_minutes(minutes)
    entry = practice_entry(state.current_day, _start_energy(state), minutes)
    new_state = EngineState(
        log=_place(state.log, entry),
        current_energy=entry.energy,
        current_day=state.current_day,
    )
    return new_state, Mutation(upserts=(entry,))


def log_skip(state: EngineState) -> tuple[EngineState, Mutation]:
    """Record ``state.current_day`` as skipped (10% decay). Does not advance.

    The decay applies to ``current_energy``, the last applied energy, so a
    skip logged over today's practice decays the practiced energy. Front ends
    refuse that sequence.
    """
    entry = skip_entry(state.current_day, state.current_energy)
    new_state = EngineState(
        log=_place(state.log, entry),
        current_energy=entry.energy,
        current_day=state.current_day,
    )
    return new_state, Mutation(upserts=(entry,))


def advance_day(state: EngineState) -> tuple[EngineState, Mutation]:
    """Close ``current_day`` and move to the next one.

    A day with no entry is closed as an implicit skip first.
    """
    upserts: tuple[DayEntry, ...] = ()
    if state.entry_for(state.current_day) is None:
        state, mutation = log_skip(state)
        upserts = mutation.upserts
    closed = state.entry_for(state.current_day)
    new_state = EngineState(
        log=state.log,
        current_energy=closed.energy if closed is not None else state.current_energy,
        current_day=state.current_day + 1,
    )
    return new_state, Mutation(upserts=upserts)


def _energy_for_current_day(log: tuple[DayEntry, ...], current_day: int) -> float:
    energy = INITIAL_ENERGY
    for entry in log:
        if entry.day == current_day:
            return entry.energy
        if entry.day < current_day:
            energy = entry.energy
    return energy


def recompute(
    state: EngineState,
    start_day: int,
    overrides: dict[int, int] | None = None,
) -> tuple[EngineState, Mutation]:
    """Re-derive every entry from *start_day* to the end of the log.

    *overrides* maps day -> replacement minutes for practice days. Each step
    starts from the freshly recomputed energy of the step before it.
    """
    index = state.index_of(start_day)
    if index == -1:
        raise InvalidInput(f"Day {start_day} is not in the log")
    overrides = overrides or {}

    log = list(state.log)
    energy = log[index - 1].energy if index > 0 else INITIAL_ENERGY
    changed: list[DayEntry] = []
    for i in range(index, len(log)):
        entry = apply_entry(log[i], energy, overrides.get(log[i].day))
        log[i] = entry
        changed.append(entry)
        energy = entry.energy

    new_log = tuple(log)
    new_state = EngineState(
        log=new_log,
        current_energy=_energy_for_current_day(new_log, state.current_day),
        current_day=state.current_day,
    )
    return new_state, Mutation(upserts=tuple(changed))


def edit_minutes(state: EngineState, day: int, minutes: object) -> tuple[EngineState, Mutation]:
    """Change a past practice day's minutes and recompute the suffix after it.

    Editing a skipped day, or a day not in the log, raises InvalidInput.
    Unchanged minutes are a no-op: the same state and an empty mutation.
    """
    minutes = validate_minutes(minutes)
    entry = state.entry_for(day)
    if entry is None:
        raise InvalidInput(f"Day {day} is not in the log")
    if not entry.practice:
        raise InvalidInput(f"Day {day} was skipped; only practice days can be edited")
    if entry.minutes == minutes:
        return state, Mutation()
    return recompute(state, day, {day: minutes})


def reset() -> tuple[EngineState, Mutation]:
    """Empty the log: day 1, initial energy, and a mutation that clears storage."""
    return EngineState(), Mutation(clear=True)


# ── Validation ────────────────────────────────────────────────


def verify_log(log: tuple[DayEntry, ...] | list[DayEntry]) -> list[str]:
    """Check a log against the recurrence. Returns problems (empty if consistent)."""
    problems: list[str] = []
    previous_day = 0
    start = INITIAL_ENERGY
    for entry in log:
        if entry.day < 1:
            problems.append(f"Day {entry.day}: day numbers must be positive")
        elif entry.day <= previous_day:
            problems.append(f"Day {entry.day}: out of order or duplicate (after day {previous_day})")
        if not entry.practice and entry.minutes:
            problems.append(f"Day {entry.day}: skipped day has {entry.minutes} minutes")
        expected = apply_entry(entry, start)
        if abs(expected.energy - entry.energy) > VERIFY_TOLERANCE:
            problems.append(
                f"Day {entry.day}: energy {entry.energy} does not follow from "
                f"{start} (expected {expected.energy})"
            )
        previous_day = max(previous_day, entry.day)
        start = entry.energy
    return problems
