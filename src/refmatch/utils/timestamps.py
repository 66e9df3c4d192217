"""Timestamp utilities for refmatch."""

from datetime import UTC, datetime

__all__ = ["get_iso_timestamp"]


def get_iso_timestamp() -> str:
    """Current UTC time as ISO8601 with microseconds and a ``Z`` suffix.

    Returns
    -------
    str
        e.g. ``"2026-02-03T12:34:56.123456Z"``.
    """
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
