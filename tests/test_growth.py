"""Tests for qitrack/growth.py — growth factor and daily transitions."""

import pytest

from qitrack.growth import (
    BASE_FACTOR,
    DECAY_RATE,
    growth_factor,
    practice_energy,
    project_energy,
    skip_energy,
)


def test_growth_factor_zero_minutes():
    assert growth_factor(0) == BASE_FACTOR
    assert growth_factor(0) < 1


def test_growth_factor_known_values():
    assert growth_factor(40) == pytest.approx(1.052496)
    assert growth_factor(120) == pytest.approx(1.165936)


def test_growth_factor_monotonic():
    factors = [growth_factor(m) for m in range(0, 181, 15)]
    assert factors == sorted(factors)
    assert len(set(factors)) == len(factors)


def test_practice_energy():
    energy, gain, factor = practice_energy(2.0, 40)
    assert factor == pytest.approx(1.052496)
    assert energy == pytest.approx(2.104992)
    assert gain == pytest.approx(energy - 2.0)


def test_skip_energy_is_ten_percent():
    energy, loss = skip_energy(5.0)
    assert DECAY_RATE == 0.1
    assert loss == pytest.approx(0.5)
    assert energy == pytest.approx(4.5)


def test_design_targets_compound_to_about_100():
    assert project_energy(1.0, 40, 90) == pytest.approx(100.0, abs=2)
    assert project_energy(1.0, 120, 30) == pytest.approx(100.0, abs=2)


def test_project_energy_zero_days():
    assert project_energy(3.0, 40, 0) == 3.0
    assert project_energy(3.0, 40, -2) == 3.0
