"""Workspace root, settings, clock and path helpers for Qitrack."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from qitrack.fileio import read_yaml, write_yaml_atomic
from qitrack.models import Settings


def workspace_root() -> Path:
    """Directory holding tracker/ (set QITRACK_ROOT to override ~/qitrack)."""
    return Path(
        os.environ.get("QITRACK_ROOT", str(Path.home() / "qitrack"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tracker" / "log.json"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tracker" / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tracker" / "hooks.yaml"


def timer_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tracker" / "latest" / "timer.json"


def open_day_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tracker" / "latest" / "day.json"


# ── Settings & clock ──────────────────────────────────────────

def load_settings(root: Path | None = None) -> Settings:
    """Load tracker/settings.yaml, falling back to defaults when absent."""
    return Settings.from_dict(read_yaml(settings_path(root)))


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(settings_path(root), settings.to_dict())


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone from settings.yaml; UTC if unset or unknown."""
    try:
        return ZoneInfo(load_settings(root).timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    return datetime.now(get_user_timezone(root))
