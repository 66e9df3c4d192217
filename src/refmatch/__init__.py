"""Candidate duplicate detection for bibliographic references.

This package provides:
- Data models (refmatch.models) — references and duplicate matches
- Normalization (refmatch.normalize) — DOI/PMID keys and title signatures
- Scoring (refmatch.scoring) — blended title similarity
- Candidates (refmatch.candidates) — identifier groups and year buckets
- Aggregation (refmatch.aggregate) — canonical, deduplicated matches
- Engine (refmatch.engine) — options and run orchestration
- Audit (refmatch.audit) — JSONL event logging
- CLI (refmatch.cli) — command-line interface
- Public API (refmatch.api) — JSONL snapshot helpers
"""

__version__ = "0.1.0"
__license__ = "MIT"

from refmatch.api import (
    ReferenceFormatError,
    read_references_jsonl,
    write_matches_jsonl,
)
from refmatch.engine import DeduplicationOptions, MatchResult, find_duplicates, run_matching
from refmatch.models import DuplicateMatch, DuplicateReason, Reference
from refmatch.normalize import normalize_doi, normalize_pmid

__all__ = [
    "__version__",
    "__license__",
    "Reference",
    "DuplicateReason",
    "DuplicateMatch",
    "DeduplicationOptions",
    "MatchResult",
    "find_duplicates",
    "run_matching",
    "normalize_doi",
    "normalize_pmid",
    "read_references_jsonl",
    "write_matches_jsonl",
    "ReferenceFormatError",
]
