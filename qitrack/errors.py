"""Exception types raised by the Qitrack core library."""

from __future__ import annotations


class QitrackError(Exception):
    """Base class for all Qitrack errors."""


class InvalidInput(QitrackError, ValueError):
    """Rejected input: bad minutes, unknown day, or an edit on a skipped day.

    Raised before any state change, so the caller can report it and keep
    whatever it was showing.
    """


class PersistenceFailure(QitrackError):
    """The store could not load or save the log.

    The tracker leaves its in-memory state exactly as it was before the
    failed operation. The underlying store exception is chained as __cause__.
    """


class TimerError(InvalidInput):
    """Practice timer used out of order (start while running, pause while idle)."""
