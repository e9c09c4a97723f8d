"""Progress messaging and display formatting for Qitrack."""

from __future__ import annotations

from qitrack.growth import DECAY_RATE, TARGET_ENERGY
from qitrack.models import DayEntry

# (minimum percent of target, tier key, message), highest first
PROGRESS_TIERS = [
    (150.0, "mastery", "Extraordinary Mastery!"),
    (100.0, "achieved", "Goal Achieved!"),
    (75.0, "excellent", "Excellent Progress"),
    (50.0, "good", "Good Progress"),
    (25.0, "foundation", "Building Foundation"),
]


def percent_of_target(energy: float, target: float = TARGET_ENERGY) -> float:
    if target <= 0:
        return 0.0
    return energy / target * 100


def progress_tier(energy: float, target: float = TARGET_ENERGY) -> str:
    """Short tier key (for styling): mastery, achieved, ..., beginning, start."""
    pct = percent_of_target(energy, target)
    for floor, tier, _message in PROGRESS_TIERS:
        if pct >= floor:
            return tier
    return "beginning" if pct > 0 else "start"


def progress_message(energy: float, target: float = TARGET_ENERGY) -> str:
    pct = percent_of_target(energy, target)
    for floor, _tier, message in PROGRESS_TIERS:
        if pct >= floor:
            return message
    return "Beginning Journey" if pct > 0 else "Start Your Practice"


def format_duration(total_seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    total = max(0, int(total_seconds))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def describe_entry(entry: DayEntry) -> str:
    """One-line description of a logged day.

    'Day 3: practiced 40 min, x1.0525, +0.05 -> 1.10'
    'Day 4: skipped, -0.11 (10%) -> 0.99'
    """
    if entry.practice:
        factor = f"x{entry.growth_factor:.4f}" if entry.growth_factor is not None else "x?"
        gain = f"{entry.gain:+.2f}" if entry.gain is not None else "+?"
        return f"Day {entry.day}: practiced {entry.minutes} min, {factor}, {gain} -> {entry.energy:.2f}"
    loss = f"-{entry.loss:.2f}" if entry.loss is not None else "-?"
    return f"Day {entry.day}: skipped, {loss} ({DECAY_RATE:.0%}) -> {entry.energy:.2f}"
