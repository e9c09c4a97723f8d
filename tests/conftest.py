"""Shared test fixtures for Qitrack tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from qitrack.engine import advance_day, log_practice, log_skip
from qitrack.models import EngineState
from qitrack.store import MemoryStore


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Temporary workspace with tracker/ and default settings."""
    root = tmp_path / "workspace"
    (root / "tracker" / "latest").mkdir(parents=True)

    settings = {
        "timezone": "UTC",
        "target_energy": 100,
        "min_logged_minutes": 1,
    }
    (root / "tracker" / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    os.environ["QITRACK_ROOT"] = str(root)
    yield root
    if "QITRACK_ROOT" in os.environ:
        del os.environ["QITRACK_ROOT"]


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


def build_state(days: list[int | None]) -> EngineState:
    """Engine state after logging *days* and advancing past each one.

    Each item is practice minutes, or None for a skipped day.
    """
    state = EngineState()
    for minutes in days:
        if minutes is None:
            state, _ = log_skip(state)
        else:
            state, _ = log_practice(state, minutes)
        state, _ = advance_day(state)
    return state


@pytest.fixture
def sample_state() -> EngineState:
    """Days 1-4: 40 min, 40 min, skipped, 60 min; current day 5."""
    return build_state([40, 40, None, 60])
