"""Tests for qitrack/store.py — JSON log store and in-memory store."""

import json

import pytest

from qitrack.errors import PersistenceFailure
from qitrack.models import DayEntry
from qitrack.store import JsonLogStore, MemoryStore
from qitrack.tracker import Tracker


def _entry(day, energy=0.9):
    return DayEntry(day=day, practice=False, energy=energy, loss=0.1)


def test_missing_log_loads_empty(workspace):
    store = JsonLogStore(root=workspace)
    assert store.load_log() == []


def test_upsert_merges_by_day(workspace):
    store = JsonLogStore(root=workspace)
    store.persist_upsert([_entry(2), _entry(1)])
    store.persist_upsert([_entry(2, energy=0.5)])

    entries = store.load_log()
    assert [e.day for e in entries] == [1, 2]
    assert entries[1].energy == 0.5

    data = json.loads((workspace / "tracker" / "log.json").read_text(encoding="utf-8"))
    assert [row["day"] for row in data["entries"]] == [1, 2]


def test_empty_upsert_writes_nothing(workspace):
    store = JsonLogStore(root=workspace)
    store.persist_upsert([])
    assert not (workspace / "tracker" / "log.json").exists()


def test_delete_all(workspace):
    store = JsonLogStore(root=workspace)
    store.persist_upsert([_entry(1)])
    store.persist_delete_all()
    assert store.load_log() == []


def test_malformed_log_raises_persistence_failure(workspace):
    (workspace / "tracker" / "log.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        JsonLogStore(root=workspace).load_log()


def test_non_list_entries_raise(workspace):
    (workspace / "tracker" / "log.json").write_text('{"entries": 5}', encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        JsonLogStore(root=workspace).load_log()


def test_reload_restores_tracker_state(workspace):
    tracker = Tracker.load(JsonLogStore(root=workspace))
    tracker.log_practice(40)
    tracker.advance_day()
    tracker.log_skip()
    tracker.advance_day()
    tracker.log_practice(60)

    reloaded = Tracker.load(JsonLogStore(root=workspace))
    assert reloaded.log == tracker.log
    assert reloaded.current_energy == tracker.current_energy
    # current day is the day after the last stored entry
    assert reloaded.current_day == 4


def test_memory_store_records_calls():
    store = MemoryStore([_entry(1)])
    store.persist_upsert([_entry(2)])
    store.persist_delete_all()
    assert store.calls == [
        ("persist_upsert", [2]),
        ("persist_delete_all", None),
    ]
    assert store.rows == {}


def test_memory_store_fail_next_fails_once():
    store = MemoryStore()
    store.fail_next()
    with pytest.raises(OSError):
        store.persist_upsert([_entry(1)])
    store.persist_upsert([_entry(1)])
    assert list(store.rows) == [1]


def test_log_holding_a_list_raises(workspace):
    (workspace / "tracker" / "log.json").write_text("[]", encoding="utf-8")
    with pytest.raises(PersistenceFailure, match="expected an object"):
        JsonLogStore(root=workspace).load_log()
