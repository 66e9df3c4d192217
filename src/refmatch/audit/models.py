"""Data models for audit logging."""

from dataclasses import dataclass
from typing import Any

__all__ = ["LogEvent", "LEVELS"]

LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


@dataclass
class LogEvent:
    """Structured log event.

    Attributes
    ----------
    ts : str
        ISO8601 timestamp with microseconds (UTC).
    run_id : str
        Unique run identifier.
    level : str
        One of ``LEVELS``.
    event : str
        Event type identifier (e.g. ``"stage_finished"``).
    data : dict[str, Any]
        Event-specific payload.
    stage : str | None
        Candidate pass or engine stage the event belongs to.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
