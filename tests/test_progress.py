"""Tests for qitrack/progress.py — tiers, messages and formatting."""

import pytest

from qitrack.models import DayEntry
from qitrack.progress import (
    describe_entry,
    format_duration,
    percent_of_target,
    progress_message,
    progress_tier,
)


def test_percent_of_target():
    assert percent_of_target(50) == 50
    assert percent_of_target(30, target=60) == 50
    assert percent_of_target(10, target=0) == 0.0


@pytest.mark.parametrize(
    "energy,tier,message",
    [
        (160, "mastery", "Extraordinary Mastery!"),
        (100, "achieved", "Goal Achieved!"),
        (80, "excellent", "Excellent Progress"),
        (50, "good", "Good Progress"),
        (30, "foundation", "Building Foundation"),
        (1.0, "beginning", "Beginning Journey"),
        (0, "start", "Start Your Practice"),
    ],
)
def test_progress_tiers(energy, tier, message):
    assert progress_tier(energy) == tier
    assert progress_message(energy) == message


def test_progress_respects_custom_target():
    assert progress_tier(10, target=10) == "achieved"


def test_format_duration():
    assert format_duration(0) == "00:00:00"
    assert format_duration(3725) == "01:02:05"
    assert format_duration(59.9) == "00:00:59"
    assert format_duration(-4) == "00:00:00"


def test_describe_practice_entry():
    entry = DayEntry(day=3, practice=True, minutes=40, energy=1.1, gain=0.05, growth_factor=1.052496)
    assert describe_entry(entry) == "Day 3: practiced 40 min, x1.0525, +0.05 -> 1.10"


def test_describe_skip_entry():
    entry = DayEntry(day=4, practice=False, energy=0.99, loss=0.11)
    assert describe_entry(entry) == "Day 4: skipped, -0.11 (10%) -> 0.99"
