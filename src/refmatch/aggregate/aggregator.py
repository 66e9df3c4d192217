"""Fold raw pair evidence into canonical duplicate matches.

Each unordered pair is keyed by ``(primary_id, duplicate_id)`` with the
lower id as primary. Repeat sightings union their reasons and keep the
highest title similarity. Output is sorted by the canonical key.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import replace

from refmatch.candidates.models import PairEvidence
from refmatch.models.records import DuplicateMatch, Reference

__all__ = ["aggregate", "canonical_pair", "merge_evidence"]


def canonical_pair(first: Reference, second: Reference) -> tuple[Reference, Reference]:
    """Order two references so the lower id comes first.

    Raises
    ------
    ValueError
        If both references share an id.
    """
    if first.id == second.id:
        raise ValueError(f"Cannot pair reference {first.id!r} with itself")
    return (first, second) if first.id <= second.id else (second, first)  # type: ignore[operator]


def merge_evidence(match: DuplicateMatch | None, evidence: PairEvidence) -> DuplicateMatch:
    """Combine *evidence* into *match*, returning a new match.

    Parameters
    ----------
    match : DuplicateMatch | None
        Match accumulated so far for the pair, or None on first sight.
    evidence : PairEvidence
        New evidence for the same pair.

    Returns
    -------
    DuplicateMatch
        Match with the reason added and the similarity maximised.
    """
    if match is None:
        primary, duplicate = canonical_pair(evidence.first, evidence.second)
        return DuplicateMatch(
            primary=primary,
            duplicate=duplicate,
            reasons=frozenset({evidence.reason}),
            title_similarity=evidence.similarity,
        )

    similarity = match.title_similarity
    if evidence.similarity is not None:
        similarity = (
            evidence.similarity if similarity is None else max(similarity, evidence.similarity)
        )

    return replace(
        match,
        reasons=match.reasons | {evidence.reason},
        title_similarity=similarity,
    )


def aggregate(evidence: Iterable[PairEvidence]) -> list[DuplicateMatch]:
    """Fold pair evidence into a sorted, deduplicated match list.

    Parameters
    ----------
    evidence : Iterable[PairEvidence]
        Raw evidence from every candidate pass, in any order.

    Returns
    -------
    list[DuplicateMatch]
        One match per unordered pair, sorted by ``(primary.id, duplicate.id)``.
    """
    matches: dict[tuple[Hashable, Hashable], DuplicateMatch] = {}

    for item in evidence:
        primary, duplicate = canonical_pair(item.first, item.second)
        key = (primary.id, duplicate.id)
        matches[key] = merge_evidence(matches.get(key), item)

    return [matches[key] for key in sorted(matches)]  # type: ignore[type-var]
