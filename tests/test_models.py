"""Tests for qitrack/models.py — dataclass serialization and log loading."""

import pytest

from qitrack.errors import InvalidInput
from qitrack.models import (
    DayEntry,
    EngineState,
    LogStats,
    Mutation,
    Settings,
    TimerState,
)


def test_day_entry_from_dict_camel_case():
    entry = DayEntry.from_dict({
        "day": 3,
        "practice": True,
        "minutes": 40,
        "energy": 1.1,
        "gain": 0.05,
        "loss": None,
        "growthFactor": 1.052496,
    })
    assert entry.day == 3
    assert entry.practice is True
    assert entry.minutes == 40
    assert entry.growth_factor == 1.052496
    assert entry.loss is None


def test_day_entry_from_dict_snake_case_factor():
    entry = DayEntry.from_dict({"day": 1, "practice": True, "minutes": 10, "growth_factor": 1.01})
    assert entry.growth_factor == 1.01


def test_day_entry_skip_has_zero_minutes():
    entry = DayEntry.from_dict({"day": 2, "practice": False, "minutes": 25, "energy": 0.9, "loss": 0.1})
    assert entry.minutes == 0
    assert entry.gain is None


def test_day_entry_to_dict_keys():
    d = DayEntry(day=1, practice=True, minutes=40, energy=1.05, gain=0.05, growth_factor=1.052496).to_dict()
    assert d == {
        "day": 1,
        "practice": True,
        "minutes": 40,
        "energy": 1.05,
        "gain": 0.05,
        "loss": None,
        "growthFactor": 1.052496,
    }


def test_engine_state_defaults():
    state = EngineState()
    assert state.log == ()
    assert state.current_day == 1
    assert state.current_energy == 1.0
    assert state.last_entry is None


def test_engine_state_from_log_sorts_and_derives():
    entries = [
        DayEntry(day=2, practice=False, energy=0.95, loss=0.11),
        DayEntry(day=1, practice=True, minutes=40, energy=1.05, gain=0.05, growth_factor=1.052496),
    ]
    state = EngineState.from_log(entries)
    assert [e.day for e in state.log] == [1, 2]
    assert state.current_day == 3
    assert state.current_energy == 0.95
    assert state.index_of(2) == 1
    assert state.index_of(7) == -1
    assert state.entry_for(1).minutes == 40


def test_engine_state_from_empty_log():
    assert EngineState.from_log([]) == EngineState()


def test_engine_state_from_log_rejects_duplicates():
    entries = [DayEntry(day=1, energy=0.9), DayEntry(day=1, energy=0.9)]
    with pytest.raises(InvalidInput, match="Duplicate"):
        EngineState.from_log(entries)


def test_engine_state_from_log_rejects_day_zero():
    with pytest.raises(InvalidInput):
        EngineState.from_log([DayEntry(day=0)])


def test_engine_state_to_dict():
    state = EngineState.from_log([DayEntry(day=1, energy=0.9, loss=0.1)])
    d = state.to_dict()
    assert d["currentDay"] == 2
    assert d["currentEnergy"] == 0.9
    assert d["log"][0]["day"] == 1


def test_mutation_is_empty():
    assert Mutation().is_empty is True
    assert Mutation(clear=True).is_empty is False
    assert Mutation(upserts=(DayEntry(day=1),)).is_empty is False


def test_timer_state_round_trip():
    state = TimerState(day=4, started_at="2026-02-11T09:00:00+00:00", accumulated_seconds=90)
    d = state.to_dict()
    assert d["startedAt"] == "2026-02-11T09:00:00+00:00"
    assert d["accumulatedSeconds"] == 90
    assert TimerState.from_dict(d) == state
    assert state.is_running is True


def test_timer_state_from_empty():
    state = TimerState.from_dict({})
    assert state.day == 1
    assert state.is_running is False
    assert state.accumulated_seconds == 0


def test_settings_from_dict_defaults():
    settings = Settings.from_dict({"timezone": "Europe/Berlin"})
    assert settings.timezone == "Europe/Berlin"
    assert settings.target_energy == 100.0
    assert settings.min_logged_minutes == 1


def test_log_stats_to_dict_rounds_average():
    stats = LogStats(practice_days=3, total_minutes=100, average_minutes=100 / 3)
    d = stats.to_dict()
    assert d["averageMinutes"] == 33.3
    assert d["daysToTarget"] is None


def test_resume_day_reopens_last_logged_day():
    state = EngineState.from_log([DayEntry(day=1, practice=True, minutes=40, energy=1.05)])
    resumed = state.resume_day(1)
    assert resumed.current_day == 1
    assert resumed.current_energy == 1.05
    assert resumed.log == state.log


def test_resume_day_ignores_other_days():
    state = EngineState.from_log([DayEntry(day=1, energy=0.9)])
    assert state.resume_day(None) is state
    assert state.resume_day(2) is state
    assert state.resume_day(7) is state
    assert EngineState().resume_day(1) == EngineState()
