"""Matching engine runner.

Chains the candidate passes and the aggregator into a single
deterministic, side-effect-free run over an in-memory snapshot:

    Identifier pass (DOI, then PMID)
    Title/year pass
    Aggregation

The only optional side effect is the audit log, which never influences
the result.
"""

import time
from collections.abc import Hashable, Iterable

from refmatch.aggregate.aggregator import aggregate
from refmatch.audit.logger import AuditLogger
from refmatch.candidates.blockers import IdentifierBlocker
from refmatch.candidates.generator import DEFAULT_MAX_BLOCK_SIZE, generate_evidence
from refmatch.engine.config import DeduplicationOptions, MatchResult, count_reasons
from refmatch.models.records import DuplicateMatch, Reference

__all__ = ["find_duplicates", "run_matching", "AGGREGATION_STAGE"]

AGGREGATION_STAGE = "aggregation"


def run_matching(
    references: Iterable[Reference],
    options: DeduplicationOptions | None = None,
    *,
    blockers: Iterable[IdentifierBlocker] | None = None,
    logger: AuditLogger | None = None,
    max_block_size: int = DEFAULT_MAX_BLOCK_SIZE,
) -> MatchResult:
    """Find candidate duplicate pairs and report run counters.

    Parameters
    ----------
    references : Iterable[Reference]
        Reference snapshot for one scope (materialised once).
    options : DeduplicationOptions | None, optional
        Run options, defaults when None.
    blockers : Iterable[IdentifierBlocker] | None, optional
        Identifier blocker instances; overrides ``options.identifier_blockers``.
    logger : AuditLogger | None, optional
        Audit logger for run, stage and warning events.
    max_block_size : int, optional
        Log a warning when a group or bucket exceeds this size.

    Returns
    -------
    MatchResult
        Sorted matches plus counters.

    Raises
    ------
    ValueError
        If two references share an id.
    """
    options = options or DeduplicationOptions()
    snapshot = list(references)
    _check_unique_ids(snapshot)

    start = time.perf_counter()
    if logger:
        logger.run_started(parameters=options.to_dict(), references=len(snapshot))

    try:
        evidence, _ = generate_evidence(
            snapshot,
            options,
            blockers=blockers,
            logger=logger,
            max_block_size=max_block_size,
        )

        stage_start = time.perf_counter()
        if logger:
            logger.stage_started(AGGREGATION_STAGE, expected_records=len(evidence))

        matches = aggregate(evidence)
        reason_counts = count_reasons(matches)

        if logger:
            logger.stage_finished(
                stage=AGGREGATION_STAGE,
                duration_seconds=time.perf_counter() - stage_start,
                counters={"evidence_in": len(evidence), "matches_out": len(matches)},
            )
    except Exception as exc:
        if logger:
            logger.error(exc, stage=logger.current_stage)
            logger.run_finished(status="failed", duration_seconds=time.perf_counter() - start)
        raise

    result = MatchResult(
        matches=matches,
        total_references=len(snapshot),
        total_evidence=len(evidence),
        reason_counts=reason_counts,
    )

    if logger:
        logger.run_finished(
            status="success",
            duration_seconds=time.perf_counter() - start,
            counters=result.summary(),
        )

    return result


def find_duplicates(
    references: Iterable[Reference],
    options: DeduplicationOptions | None = None,
    *,
    logger: AuditLogger | None = None,
) -> list[DuplicateMatch]:
    """Return candidate duplicate pairs for *references*.

    Convenience wrapper around :func:`run_matching` returning only the
    match list, sorted by ``(primary.id, duplicate.id)``. An empty list
    means no candidates were found.

    Examples
    --------
    >>> refs = [
    ...     Reference(id=1, doi="10.1234/test"),
    ...     Reference(id=2, doi="doi:10.1234/test"),
    ... ]
    >>> [m.pair_key for m in find_duplicates(refs)]
    [(1, 2)]
    """
    return run_matching(references, options, logger=logger).matches


def _check_unique_ids(references: list[Reference]) -> None:
    seen: set[Hashable] = set()
    for reference in references:
        if reference.id in seen:
            raise ValueError(f"Duplicate reference id: {reference.id!r}")
        seen.add(reference.id)
