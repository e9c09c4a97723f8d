"""Aggregate statistics over a day log."""

from __future__ import annotations

import math

from qitrack.growth import INITIAL_ENERGY, TARGET_ENERGY, growth_factor
from qitrack.models import DayEntry, LogStats


def practice_streaks(log: tuple[DayEntry, ...] | list[DayEntry]) -> tuple[int, int]:
    """Return (current, best) runs of consecutive practiced days.

    A run breaks on a skipped day or a gap in day numbers. The current run
    is the one ending at the last logged day.
    """
    best = run = 0
    previous_day: int | None = None
    for entry in log:
        if not entry.practice:
            run = 0
        elif run and entry.day == previous_day + 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous_day = entry.day
    return run, best


def days_to_target(energy: float, minutes: float, target: float = TARGET_ENERGY) -> int | None:
    """Practice days of *minutes* each needed to lift *energy* to *target*.

    None when the daily factor cannot grow energy (or energy is not positive).
    """
    if energy >= target:
        return 0
    factor = growth_factor(minutes)
    if factor <= 1 or energy <= 0:
        return None
    return math.ceil(math.log(target / energy) / math.log(factor))


def compute_stats(log: tuple[DayEntry, ...] | list[DayEntry], target: float = TARGET_ENERGY) -> LogStats:
    stats = LogStats()
    stats.days_logged = len(log)
    if not log:
        return stats

    practiced = [e for e in log if e.practice]
    stats.practice_days = len(practiced)
    stats.skipped_days_list = [e.day for e in log if not e.practice]
    stats.skipped_days = len(stats.skipped_days_list)
    stats.total_minutes = sum(e.minutes for e in practiced)
    if practiced:
        stats.average_minutes = stats.total_minutes / len(practiced)
    stats.current_streak, stats.best_streak = practice_streaks(log)
    stats.peak_energy = max([INITIAL_ENERGY] + [e.energy for e in log])

    if practiced:
        stats.days_to_target = days_to_target(log[-1].energy, stats.average_minutes, target)
    return stats
