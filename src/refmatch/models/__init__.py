"""Shared data types for refmatch.

Domain-specific types live closer to their consumers:
- Pair evidence → refmatch.candidates.models
- Title signatures → refmatch.normalize.title
- Audit types → refmatch.audit.models
"""

from refmatch.models.records import (
    REASON_ORDER,
    DuplicateMatch,
    DuplicateReason,
    Reference,
)

__all__ = [
    "Reference",
    "DuplicateReason",
    "DuplicateMatch",
    "REASON_ORDER",
]
