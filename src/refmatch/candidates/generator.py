"""Candidate pair generation.

Two independent passes feed the aggregator:

* Identifier pass: one per configured blocker (DOI, then PMID by
  default). References are grouped by normalized identifier and every
  pair inside a group of two or more is emitted.
* Title/year pass: title signatures are bucketed by year and compared
  within a bucket and against later buckets inside the year tolerance.
  Undated references are either excluded (``require_year_match``) or
  compared only among themselves.
"""

from __future__ import annotations

import time
from bisect import bisect_right
from collections import defaultdict
from collections.abc import Hashable, Iterable, Iterator, Sequence
from itertools import combinations, product
from typing import TYPE_CHECKING

from refmatch.audit.logger import AuditLogger
from refmatch.candidates.blockers import IdentifierBlocker, create_blockers
from refmatch.candidates.models import PairEvidence, PassStats
from refmatch.models.records import DuplicateReason, Reference
from refmatch.normalize.title import TitleSignature, build_signature
from refmatch.scoring.similarity import similarity_upper_bound, title_similarity

if TYPE_CHECKING:
    from refmatch.engine.config import DeduplicationOptions

__all__ = [
    "DEFAULT_MAX_BLOCK_SIZE",
    "IDENTIFIER_STAGE",
    "TITLE_YEAR_STAGE",
    "generate_evidence",
    "identifier_pass",
    "is_year_match",
    "title_year_pass",
    "year_buckets",
]

DEFAULT_MAX_BLOCK_SIZE = 1000
IDENTIFIER_STAGE = "identifier_pass"
TITLE_YEAR_STAGE = "title_year_pass"

# Bucket key for undated references when years are not required
UNDATED = None


def generate_evidence(
    references: Sequence[Reference],
    options: DeduplicationOptions,
    *,
    blockers: Iterable[IdentifierBlocker] | None = None,
    logger: AuditLogger | None = None,
    max_block_size: int = DEFAULT_MAX_BLOCK_SIZE,
) -> tuple[list[PairEvidence], dict[str, PassStats]]:
    """Run every identifier pass, then the title/year pass.

    Parameters
    ----------
    references : Sequence[Reference]
        Reference snapshot for one scope.
    options : DeduplicationOptions
        Run options.
    blockers : Iterable[IdentifierBlocker] | None, optional
        Identifier blockers. When omitted they are built from
        ``options.identifier_blockers``.
    logger : AuditLogger | None, optional
        Audit logger for observability events.
    max_block_size : int, optional
        Log a warning when a group or bucket exceeds this size.

    Returns
    -------
    tuple[list[PairEvidence], dict[str, PassStats]]
        All raw evidence and per-pass statistics keyed by pass name.
    """
    evidence: list[PairEvidence] = []
    stats: dict[str, PassStats] = {}

    if blockers is None:
        blockers = create_blockers(options.identifier_blockers)

    for blocker in blockers:
        pairs, pass_stats = identifier_pass(
            references, blocker, logger=logger, max_block_size=max_block_size
        )
        evidence.extend(pairs)
        stats[blocker.name] = pass_stats

    pairs, pass_stats = title_year_pass(
        references, options, logger=logger, max_block_size=max_block_size
    )
    evidence.extend(pairs)
    stats["title_year"] = pass_stats

    return evidence, stats


def identifier_pass(
    references: Sequence[Reference],
    blocker: IdentifierBlocker,
    *,
    logger: AuditLogger | None = None,
    max_block_size: int = DEFAULT_MAX_BLOCK_SIZE,
) -> tuple[list[PairEvidence], PassStats]:
    """Emit every pair of references sharing a normalized identifier.

    Parameters
    ----------
    references : Sequence[Reference]
        Input references.
    blocker : IdentifierBlocker
        Supplies the normalized key and the reason tag.
    logger : AuditLogger | None, optional
        Audit logger for observability events.
    max_block_size : int, optional
        Log a warning when a group exceeds this size.

    Returns
    -------
    tuple[list[PairEvidence], PassStats]
        Evidence tagged with ``blocker.reason`` and pass statistics.
    """
    stage = f"{IDENTIFIER_STAGE}:{blocker.name}"
    start = time.perf_counter()
    if logger:
        logger.stage_started(stage, expected_records=len(references))

    stats = PassStats()
    groups: dict[str, list[Reference]] = defaultdict(list)

    for reference in references:
        stats.references_seen += 1
        key = blocker.block_key(reference)
        if key is None:
            continue
        stats.references_keyed += 1
        groups[key].append(reference)

    stats.unique_keys = len(groups)

    evidence: list[PairEvidence] = []
    for key in sorted(groups):
        group = groups[key]
        if len(group) < 2:
            continue

        stats.blocks_gt1 += 1
        stats.max_block = max(stats.max_block, len(group))
        _warn_oversized(logger, stage, key, len(group), max_block_size)

        for first, second in combinations(group, 2):
            stats.comparisons += 1
            stats.pairs_emitted += 1
            evidence.append(PairEvidence(first, second, blocker.reason))

    if logger:
        logger.stage_finished(
            stage=stage,
            duration_seconds=time.perf_counter() - start,
            counters=stats.to_dict(),
        )

    return evidence, stats


def is_year_match(
    year_a: int | None,
    year_b: int | None,
    options: DeduplicationOptions,
) -> bool:
    """Whether two publication years are compatible under *options*.

    Both present: ``|a - b| <= year_tolerance``. Either missing: allowed
    only when ``require_year_match`` is False.
    """
    if year_a is not None and year_b is not None:
        return abs(year_a - year_b) <= options.year_tolerance
    return not options.require_year_match


def year_buckets(
    signatures: Iterable[TitleSignature],
    *,
    require_year_match: bool,
) -> dict[int | None, list[TitleSignature]]:
    """Group signatures by exact publication year.

    Undated signatures are dropped when *require_year_match* is True and
    collected under the ``None`` key otherwise.
    """
    buckets: dict[int | None, list[TitleSignature]] = defaultdict(list)
    for signature in signatures:
        year = signature.reference.year
        if year is None and require_year_match:
            continue
        buckets[year].append(signature)
    return dict(buckets)


def _bucket_pairs(
    buckets: dict[int | None, list[TitleSignature]],
    tolerance: int,
) -> Iterator[tuple[TitleSignature, TitleSignature]]:
    """Yield every pair whose buckets lie within *tolerance* years."""
    dated = sorted(year for year in buckets if year is not None)

    for idx, year in enumerate(dated):
        items = buckets[year]
        yield from combinations(items, 2)
        for other in dated[idx + 1 : bisect_right(dated, year + tolerance)]:
            yield from product(items, buckets[other])

    if UNDATED in buckets:
        yield from combinations(buckets[UNDATED], 2)


def title_year_pass(
    references: Sequence[Reference],
    options: DeduplicationOptions,
    *,
    logger: AuditLogger | None = None,
    max_block_size: int = DEFAULT_MAX_BLOCK_SIZE,
) -> tuple[list[PairEvidence], PassStats]:
    """Emit pairs whose titles are similar and whose years are compatible.

    Parameters
    ----------
    references : Sequence[Reference]
        Input references. Those with blank titles are skipped.
    options : DeduplicationOptions
        Threshold, year rules, spelling toggle and scoring weights.
    logger : AuditLogger | None, optional
        Audit logger for observability events.
    max_block_size : int, optional
        Log a warning when a year bucket exceeds this size.

    Returns
    -------
    tuple[list[PairEvidence], PassStats]
        ``TITLE_YEAR`` evidence carrying similarity, and pass statistics.
    """
    start = time.perf_counter()
    if logger:
        logger.stage_started(TITLE_YEAR_STAGE, expected_records=len(references))

    stats = PassStats(references_seen=len(references))
    signatures = [
        sig
        for sig in (
            build_signature(ref, normalize_spelling=options.normalize_spelling)
            for ref in references
        )
        if sig is not None
    ]
    stats.references_keyed = len(signatures)

    buckets = year_buckets(signatures, require_year_match=options.require_year_match)
    stats.unique_keys = len(buckets)
    for year, items in sorted(buckets.items(), key=lambda kv: _year_sort_key(kv[0])):
        if len(items) < 2:
            continue
        stats.blocks_gt1 += 1
        stats.max_block = max(stats.max_block, len(items))
        _warn_oversized(logger, TITLE_YEAR_STAGE, f"year:{year}", len(items), max_block_size)

    weights = options.weights
    threshold = options.title_similarity_threshold
    evidence: list[PairEvidence] = []

    for left, right in _bucket_pairs(buckets, options.year_tolerance):
        stats.comparisons += 1
        if not is_year_match(left.reference.year, right.reference.year, options):
            continue
        # Exact skip: the pair can reach neither the threshold nor subtitle rescoring
        bound = similarity_upper_bound(left, right, weights)
        if bound < threshold and bound <= weights.subtitle_threshold:
            stats.pruned += 1
            continue
        similarity = title_similarity(left, right, weights)
        if similarity < threshold:
            continue
        stats.pairs_emitted += 1
        evidence.append(
            PairEvidence(left.reference, right.reference, DuplicateReason.TITLE_YEAR, similarity)
        )

    if logger:
        logger.stage_finished(
            stage=TITLE_YEAR_STAGE,
            duration_seconds=time.perf_counter() - start,
            counters=stats.to_dict(),
        )

    return evidence, stats


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _year_sort_key(year: int | None) -> tuple[int, int]:
    return (1, 0) if year is None else (0, year)


def _warn_oversized(
    logger: AuditLogger | None,
    stage: str,
    block_key: Hashable,
    block_size: int,
    max_block_size: int,
) -> None:
    if block_size <= max_block_size or not logger:
        return
    logger.event(
        "oversized_block",
        data={
            "block_key": str(block_key)[:100],
            "block_size": block_size,
            "max_block_size": max_block_size,
        },
        level="WARN",
        stage=stage,
    )
