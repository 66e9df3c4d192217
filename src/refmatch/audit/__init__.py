"""Structured JSONL audit logging for matching runs."""

from refmatch.audit.helpers import generate_run_id, get_package_version
from refmatch.audit.logger import AuditLogger
from refmatch.audit.models import LEVELS, LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "LEVELS",
    "generate_run_id",
    "get_package_version",
]
