"""Persistence collaborators for the day log.

A store has three operations:
    load_log()            -> entries in day order
    persist_upsert(rows)  -> insert-or-replace keyed by day (idempotent)
    persist_delete_all()  -> empty the log (reset)

JsonLogStore keeps the log in tracker/log.json; MemoryStore keeps it in a
dict and can be primed to fail, for tests and embedders.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Protocol

from qitrack.errors import PersistenceFailure
from qitrack.fileio import read_json, write_json_atomic
from qitrack.models import DayEntry
from qitrack.workspace import log_path

logger = logging.getLogger(__name__)


class Store(Protocol):
    def load_log(self) -> list[DayEntry]: ...

    def persist_upsert(self, entries: list[DayEntry]) -> None: ...

    def persist_delete_all(self) -> None: ...


def _merge(rows: dict[int, DayEntry], entries: Iterable[DayEntry]) -> None:
    for entry in entries:
        rows[entry.day] = entry


class JsonLogStore:
    """Log stored as ``{"entries": [...]}``, rewritten atomically on every change."""

    def __init__(self, path: Path | None = None, root: Path | None = None) -> None:
        self.path = path if path is not None else log_path(root)

    def _read_rows(self) -> dict[int, DayEntry]:
        try:
            data = read_json(self.path)
            raw = data.get("entries") or []
            if not isinstance(raw, list):
                raise ValueError("'entries' must be a list")
            rows: dict[int, DayEntry] = {}
            for item in raw:
                if not isinstance(item, dict):
                    raise ValueError(f"log row is not an object: {item!r}")
                entry = DayEntry.from_dict(item)
                rows[entry.day] = entry
            return rows
        except (OSError, ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            raise PersistenceFailure(f"Cannot read log {self.path}: {e}") from e

    def _write_rows(self, rows: dict[int, DayEntry]) -> None:
        payload: dict[str, Any] = {
            "entries": [rows[day].to_dict() for day in sorted(rows)],
        }
        try:
            write_json_atomic(self.path, payload)
        except (OSError, TypeError) as e:
            raise PersistenceFailure(f"Cannot write log {self.path}: {e}") from e

    def load_log(self) -> list[DayEntry]:
        rows = self._read_rows()
        return [rows[day] for day in sorted(rows)]

    def persist_upsert(self, entries: list[DayEntry]) -> None:
        if not entries:
            return
        rows = self._read_rows()
        _merge(rows, entries)
        self._write_rows(rows)
        logger.debug("Upserted days %s into %s", [e.day for e in entries], self.path)

    def persist_delete_all(self) -> None:
        self._write_rows({})
        logger.debug("Cleared log %s", self.path)


class MemoryStore:
    """In-memory store. ``fail_next(exc)`` makes the next call raise *exc*."""

    def __init__(self, entries: Iterable[DayEntry] = ()) -> None:
        self.rows: dict[int, DayEntry] = {}
        _merge(self.rows, entries)
        self.calls: list[tuple[str, Any]] = []
        self._failure: Exception | None = None

    def fail_next(self, exc: Exception | None = None) -> None:
        self._failure = exc or OSError("simulated store outage")

    def _maybe_fail(self) -> None:
        if self._failure is not None:
            exc, self._failure = self._failure, None
            raise exc

    def load_log(self) -> list[DayEntry]:
        self.calls.append(("load_log", None))
        self._maybe_fail()
        return [self.rows[day] for day in sorted(self.rows)]

    def persist_upsert(self, entries: list[DayEntry]) -> None:
        self.calls.append(("persist_upsert", [e.day for e in entries]))
        self._maybe_fail()
        _merge(self.rows, entries)

    def persist_delete_all(self) -> None:
        self.calls.append(("persist_delete_all", None))
        self._maybe_fail()
        self.rows.clear()
