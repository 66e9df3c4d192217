"""Structured audit logger writing one JSON event per line."""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from refmatch.audit.helpers import generate_run_id, get_package_version
from refmatch.audit.models import LEVELS, LogEvent
from refmatch.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """Append-only JSONL event logger with a persistent file handle.

    Every event is flushed after writing so a crashed caller still leaves
    a readable log behind.

    Attributes
    ----------
    run_id : str
        Unique run identifier stamped on every event.
    log_path : Path
        Path to the JSONL log file.
    current_stage : str | None
        Stage attached to events that do not name one.
    """

    def __init__(self, log_path: Path, run_id: str | None = None) -> None:
        """Open *log_path* for appending.

        Parameters
        ----------
        log_path : Path
            Path to JSONL log file; parent directories are created.
        run_id : str | None, optional
            Run identifier, generated when omitted.
        """
        self.run_id = run_id or generate_run_id()
        self.log_path = Path(log_path)
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    @property
    def closed(self) -> bool:
        """Whether the file handle has been closed."""
        return self._file.closed

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Set the stage attached to subsequent events."""
        self.current_stage = stage

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
    ) -> None:
        """Write a structured event.

        Parameters
        ----------
        event_type : str
            Event type identifier.
        data : dict[str, Any] | None, optional
            Event payload.
        level : str, optional
            One of ``LEVELS``, by default ``"INFO"``.
        stage : str | None, optional
            Stage identifier, defaults to ``current_stage``.

        Raises
        ------
        ValueError
            If *level* is not a known level.
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            stage=stage if stage is not None else self.current_stage,
        )
        json.dump(asdict(log_event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def run_started(self, parameters: dict[str, Any], references: int) -> None:
        """Log the package version, options snapshot and input size of a run."""
        self.event(
            "run_started",
            data={
                "package_version": get_package_version(),
                "parameters": parameters,
                "references": references,
            },
        )

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        counters: dict[str, Any] | None = None,
    ) -> None:
        """Log the end of a run.

        Parameters
        ----------
        status : str
            ``"success"`` or ``"failed"``.
        duration_seconds : float
            Wall-clock time of the run.
        counters : dict[str, Any] | None, optional
            Run summary counters.
        """
        data: dict[str, Any] = {"status": status, "duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.set_stage(None)
        self.event("run_finished", data=data)

    def stage_started(self, stage: str, expected_records: int | None = None) -> None:
        """Log the start of *stage* and make it current."""
        self.set_stage(stage)
        data: dict[str, Any] = {}
        if expected_records is not None:
            data["expected_records"] = expected_records
        self.event("stage_started", data=data, stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Log the end of *stage* with its counters."""
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.event("stage_finished", data=data, stage=stage)

    def error(self, exception: BaseException, stage: str | None = None) -> None:
        """Log an exception at ERROR level."""
        self.event(
            "error",
            data={"exception_class": type(exception).__name__, "message": str(exception)},
            level="ERROR",
            stage=stage,
        )
