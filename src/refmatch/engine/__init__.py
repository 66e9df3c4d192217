"""Matching engine orchestration, options and result types."""

from refmatch.engine.config import DeduplicationOptions, MatchResult
from refmatch.engine.runner import find_duplicates, run_matching

__all__ = [
    "DeduplicationOptions",
    "MatchResult",
    "find_duplicates",
    "run_matching",
]
