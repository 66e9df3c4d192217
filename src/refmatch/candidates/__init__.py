"""Candidate pair generation via identifier grouping and year buckets."""

from refmatch.candidates.blockers import (
    BLOCKER_REGISTRY,
    DEFAULT_BLOCKERS,
    DOIBlocker,
    IdentifierBlocker,
    PMIDBlocker,
    create_blocker,
    create_blockers,
)
from refmatch.candidates.generator import (
    generate_evidence,
    identifier_pass,
    is_year_match,
    title_year_pass,
    year_buckets,
)
from refmatch.candidates.models import PairEvidence, PassStats

__all__ = [
    # Protocol
    "IdentifierBlocker",
    # Blockers
    "DOIBlocker",
    "PMIDBlocker",
    "BLOCKER_REGISTRY",
    "create_blocker",
    "DEFAULT_BLOCKERS",
    "create_blockers",
    # Models
    "PairEvidence",
    "PassStats",
    # Generator
    "generate_evidence",
    "identifier_pass",
    "title_year_pass",
    "is_year_match",
    "year_buckets",
]
