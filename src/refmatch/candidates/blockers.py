"""Identifier blockers for the exact-key candidate pass.

Each blocker maps a reference to at most one normalized identifier.
References sharing a key become candidate pairs tagged with the
blocker's reason.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from refmatch.models.records import DuplicateReason, Reference
from refmatch.normalize.identifiers import normalize_doi, normalize_pmid

__all__ = [
    "IdentifierBlocker",
    "DOIBlocker",
    "PMIDBlocker",
    "BLOCKER_REGISTRY",
    "create_blocker",
    "DEFAULT_BLOCKERS",
    "create_blockers",
]


@runtime_checkable
class IdentifierBlocker(Protocol):
    """Structural protocol every identifier blocker must satisfy.

    Attributes
    ----------
    name : str
        Stable identifier used in audit events.
    reason : DuplicateReason
        Reason attached to every pair the blocker emits.
    """

    name: str
    reason: DuplicateReason

    def block_key(self, reference: Reference) -> str | None:
        """Return the normalized identifier, or None when absent."""
        ...


class DOIBlocker:
    """Block by normalized DOI."""

    name: str = "doi"
    reason: DuplicateReason = DuplicateReason.DOI

    def block_key(self, reference: Reference) -> str | None:
        """Return the normalized DOI if present."""
        return normalize_doi(reference.doi)


class PMIDBlocker:
    """Block by normalized PMID."""

    name: str = "pmid"
    reason: DuplicateReason = DuplicateReason.PMID

    def block_key(self, reference: Reference) -> str | None:
        """Return the normalized PMID if present."""
        return normalize_pmid(reference.pmid)


BLOCKER_REGISTRY: dict[str, Callable[[], IdentifierBlocker]] = {
    "doi": DOIBlocker,
    "pmid": PMIDBlocker,
}

# DOI first, then PMID
DEFAULT_BLOCKERS: tuple[str, ...] = ("doi", "pmid")


def create_blocker(name: str) -> IdentifierBlocker:
    """Instantiate a blocker by registry name.

    Raises
    ------
    ValueError
        If *name* is not in the registry.
    """
    factory = BLOCKER_REGISTRY.get(name)
    if factory is None:
        valid = ", ".join(sorted(BLOCKER_REGISTRY))
        raise ValueError(f"Unknown blocker type: {name!r}. Valid types: {valid}")
    return factory()


def create_blockers(names: Iterable[str]) -> list[IdentifierBlocker]:
    """Instantiate blockers in the given order."""
    return [create_blocker(name) for name in names]
