"""Reference and match records.

Input references are read-only snapshots supplied by a storage
collaborator. Output matches pair two references with the evidence that
flagged them.
"""

from __future__ import annotations

import re
from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = [
    "Reference",
    "DuplicateReason",
    "DuplicateMatch",
    "REASON_ORDER",
]

_YEAR_RE = re.compile(r"\b(\d{4})\b")

# Serialization decimals for similarity scores
SIMILARITY_DECIMALS = 6


@dataclass(frozen=True, slots=True)
class Reference:
    """A bibliographic reference as seen by the matching engine.

    Attributes
    ----------
    id : Hashable
        Opaque identifier. Ids within one run must be unique and mutually
        orderable (ints or strings in practice).
    title : str
        Title text, possibly empty.
    year : int | None
        Publication year, if known.
    doi : str | None
        DOI as imported (any surface form).
    pmid : str | None
        PubMed identifier as imported (any surface form).
    """

    id: Hashable
    title: str = ""
    year: int | None = None
    doi: str | None = None
    pmid: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reference:
        """Build a reference from a plain JSON object.

        Parameters
        ----------
        data : dict[str, Any]
            Mapping with ``id`` and optional ``title``, ``year``, ``doi``
            and ``pmid`` keys.

        Returns
        -------
        Reference
            Parsed reference.

        Raises
        ------
        KeyError
            If ``id`` is missing.
        TypeError
            If ``title`` is neither a string nor None.
        """
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise TypeError(f"title must be a string, got {type(title).__name__}")
        return cls(
            id=data["id"],
            title=title or "",
            year=_coerce_year(data.get("year")),
            doi=_optional_str(data.get("doi")),
            pmid=_optional_str(data.get("pmid")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "doi": self.doi,
            "pmid": self.pmid,
        }


class DuplicateReason(str, Enum):
    """Independent signal that flagged a pair."""

    DOI = "doi"
    PMID = "pmid"
    TITLE_YEAR = "title_year"


REASON_ORDER: tuple[DuplicateReason, ...] = tuple(DuplicateReason)


@dataclass(frozen=True, slots=True)
class DuplicateMatch:
    """A canonical candidate duplicate pair.

    Attributes
    ----------
    primary : Reference
        Reference with the lower id.
    duplicate : Reference
        Reference with the higher id.
    reasons : frozenset[DuplicateReason]
        Union of every signal that flagged the pair (never empty).
    title_similarity : float | None
        Highest title similarity observed, present iff ``TITLE_YEAR`` is
        among the reasons.
    """

    primary: Reference
    duplicate: Reference
    reasons: frozenset[DuplicateReason]
    title_similarity: float | None = None

    @property
    def pair_key(self) -> tuple[Hashable, Hashable]:
        """Canonical ``(primary_id, duplicate_id)`` key."""
        return (self.primary.id, self.duplicate.id)

    def sorted_reasons(self) -> list[DuplicateReason]:
        """Reasons in declaration order."""
        return [r for r in REASON_ORDER if r in self.reasons]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        sim = self.title_similarity
        return {
            "primary_id": self.primary.id,
            "duplicate_id": self.duplicate.id,
            "reasons": [r.value for r in self.sorted_reasons()],
            "title_similarity": round(sim, SIMILARITY_DECIMALS) if sim is not None else None,
        }


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _coerce_year(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _YEAR_RE.search(str(value))
    return int(match.group(1)) if match else None
