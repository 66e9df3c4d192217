"""Data models for raw pair evidence produced by candidate generation."""

from dataclasses import asdict, dataclass

from refmatch.models.records import DuplicateReason, Reference


@dataclass(frozen=True, slots=True)
class PairEvidence:
    """One signal flagging two references as possible duplicates.

    Attributes
    ----------
    first : Reference
        One side of the pair (not yet canonicalized).
    second : Reference
        Other side of the pair.
    reason : DuplicateReason
        Signal that produced the pair.
    similarity : float | None
        Title similarity for ``TITLE_YEAR`` evidence, None otherwise.
    """

    first: Reference
    second: Reference
    reason: DuplicateReason
    similarity: float | None = None


@dataclass
class PassStats:
    """Counters collected while running one candidate pass.

    Attributes
    ----------
    references_seen : int
        Total references processed.
    references_keyed : int
        References that produced a key (identifier) or signature (title).
    unique_keys : int
        Distinct identifier values or year buckets.
    blocks_gt1 : int
        Groups or buckets containing two or more references.
    comparisons : int
        Pairs examined.
    pruned : int
        Title pairs rejected by the similarity upper bound alone.
    pairs_emitted : int
        Pairs turned into evidence.
    max_block : int
        Largest group or bucket size encountered.
    """

    references_seen: int = 0
    references_keyed: int = 0
    unique_keys: int = 0
    blocks_gt1: int = 0
    comparisons: int = 0
    pruned: int = 0
    pairs_emitted: int = 0
    max_block: int = 0

    def to_dict(self) -> dict[str, int]:
        """Serialise to a plain dict."""
        return asdict(self)
