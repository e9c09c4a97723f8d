"""Growth-factor function and the two daily energy transitions.

The constants were tuned so that, starting from 1.0 energy:
    90 days @ 40 min/day  -> ~100 energy
    30 days @ 120 min/day -> ~100 energy
"""

from __future__ import annotations

BASE_FACTOR = 0.995776
FACTOR_PER_MINUTE = 0.001418
DECAY_RATE = 0.1  # 10% loss on skipped days
INITIAL_ENERGY = 1.0
TARGET_ENERGY = 100.0

ENERGY_DECIMALS = 2
FACTOR_DECIMALS = 6


def growth_factor(minutes: float) -> float:
    """Daily multiplier for a practice day of *minutes*.

    Linear in minutes and monotonically increasing. Note that 0 minutes gives
    a factor just below 1, so a zero-minute "practice" loses a little energy.
    """
    return BASE_FACTOR + minutes * FACTOR_PER_MINUTE


def practice_energy(start: float, minutes: float) -> tuple[float, float, float]:
    """Apply a practice day to *start*. Returns (energy, gain, factor), unrounded."""
    factor = growth_factor(minutes)
    energy = start * factor
    return energy, energy - start, factor


def skip_energy(start: float) -> tuple[float, float]:
    """Apply a skipped day to *start*. Returns (energy, loss), unrounded."""
    loss = start * DECAY_RATE
    return start - loss, loss


def project_energy(start: float, minutes: float, days: int) -> float:
    """Energy after *days* consecutive practice days of *minutes* each.

    Pure compounding without per-day rounding.
    """
    return start * growth_factor(minutes) ** max(0, days)
