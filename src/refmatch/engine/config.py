"""Deduplication options and run result dataclasses."""

from dataclasses import asdict, dataclass, field
from typing import Any

from refmatch.candidates.blockers import BLOCKER_REGISTRY, DEFAULT_BLOCKERS
from refmatch.models.records import DuplicateMatch, DuplicateReason
from refmatch.scoring.similarity import (
    DEFAULT_JACCARD_WEIGHT,
    DEFAULT_SUBTITLE_THRESHOLD,
    ScoringWeights,
)

DEFAULT_TITLE_THRESHOLD = 0.86


@dataclass(frozen=True)
class DeduplicationOptions:
    """Options for one matching run.

    Attributes
    ----------
    title_similarity_threshold : float
        Minimum blended title similarity for a TITLE_YEAR match (default: 0.86).
    require_year_match : bool
        Exclude undated references from title comparison (default: True).
    year_tolerance : int
        Maximum year difference for a TITLE_YEAR match (default: 0).
    normalize_spelling : bool
        Rewrite British spellings to American before comparing (default: True).
    subtitle_rescore_threshold : float
        Full-title score above which pre-colon fragments are also scored
        (default: 0.95).
    jaccard_weight : float
        Token Jaccard weight in the blend; Dice gets the remainder
        (default: 0.6).
    identifier_blockers : tuple[str, ...]
        Identifier passes to run, in order. Available: 'doi', 'pmid'
        (default: both). Empty runs the title/year pass only.
    """

    title_similarity_threshold: float = DEFAULT_TITLE_THRESHOLD
    require_year_match: bool = True
    year_tolerance: int = 0
    normalize_spelling: bool = True
    subtitle_rescore_threshold: float = DEFAULT_SUBTITLE_THRESHOLD
    jaccard_weight: float = DEFAULT_JACCARD_WEIGHT
    identifier_blockers: tuple[str, ...] = DEFAULT_BLOCKERS

    def __post_init__(self) -> None:
        """Validate ranges and blocker names."""
        if isinstance(self.identifier_blockers, str):
            raise ValueError(
                f"identifier_blockers must be a sequence of names, got {self.identifier_blockers!r}"
            )
        object.__setattr__(self, "identifier_blockers", tuple(self.identifier_blockers))

        unknown = [name for name in self.identifier_blockers if name not in BLOCKER_REGISTRY]
        if unknown:
            valid = ", ".join(sorted(BLOCKER_REGISTRY))
            raise ValueError(f"Unknown blocker type: {unknown[0]!r}. Valid types: {valid}")

        if len(set(self.identifier_blockers)) != len(self.identifier_blockers):
            raise ValueError(f"identifier_blockers has duplicates: {self.identifier_blockers}")

        if not 0.0 <= self.title_similarity_threshold <= 1.0:
            raise ValueError(
                "title_similarity_threshold must be in [0, 1], "
                f"got {self.title_similarity_threshold}"
            )

        if isinstance(self.year_tolerance, bool) or not isinstance(self.year_tolerance, int):
            raise ValueError(f"year_tolerance must be an integer, got {self.year_tolerance!r}")

        if self.year_tolerance < 0:
            raise ValueError(f"year_tolerance must be >= 0, got {self.year_tolerance}")

        if not 0.0 <= self.subtitle_rescore_threshold <= 1.0:
            raise ValueError(
                "subtitle_rescore_threshold must be in [0, 1], "
                f"got {self.subtitle_rescore_threshold}"
            )

        if not 0.0 <= self.jaccard_weight <= 1.0:
            raise ValueError(f"jaccard_weight must be in [0, 1], got {self.jaccard_weight}")

    @property
    def weights(self) -> ScoringWeights:
        """Scoring constants derived from these options."""
        return ScoringWeights(
            jaccard_weight=self.jaccard_weight,
            subtitle_threshold=self.subtitle_rescore_threshold,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["identifier_blockers"] = list(self.identifier_blockers)
        return data


@dataclass
class MatchResult:
    """Outcome of one matching run.

    Attributes
    ----------
    matches : list[DuplicateMatch]
        Canonical matches sorted by ``(primary.id, duplicate.id)``.
    total_references : int
        References in the input snapshot.
    total_evidence : int
        Raw pair evidence items before aggregation.
    reason_counts : dict[str, int]
        Matches carrying each reason.
    """

    matches: list[DuplicateMatch]
    total_references: int
    total_evidence: int
    reason_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_matches(self) -> int:
        """Number of canonical matches."""
        return len(self.matches)

    def summary(self) -> dict[str, Any]:
        """Counters without the match payload."""
        return {
            "total_references": self.total_references,
            "total_evidence": self.total_evidence,
            "total_matches": self.total_matches,
            "reason_counts": dict(self.reason_counts),
        }


def count_reasons(matches: list[DuplicateMatch]) -> dict[str, int]:
    """Count matches per reason, every reason present as a key."""
    counts = {reason.value: 0 for reason in DuplicateReason}
    for match in matches:
        for reason in match.reasons:
            counts[reason.value] += 1
    return counts
