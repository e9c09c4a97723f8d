"""File helpers for the Qitrack workspace: tolerant reads, atomic writes."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """Read a text file; a missing file reads as ''."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object; a missing or blank file reads as {}.

    Malformed JSON, or a top-level value that is not an object, raises
    ValueError. A log file holding a bare list must not read as an empty log.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} holds a JSON {type(data).__name__}, expected an object")
    return data


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; a missing, blank or non-mapping file reads as {}."""
    text = read_text(path)
    if not text.strip():
        return {}
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _atomic_write(path: Path, content: str, suffix: str) -> None:
    """Write via temp file in the same directory, under flock, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", ".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, ".yaml")
