# src/agora/db/time.py
"""Time utilities for database models."""

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Stored timestamps come back naive from SQLite, so everything written and
    compared by the application stays naive UTC.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def hours_ago(hours: float) -> datetime:
    """Return the naive UTC instant ``hours`` before now."""
    return utcnow() - timedelta(hours=hours)
