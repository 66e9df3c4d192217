"""Tests for the matching engine run and its options."""

import json
import random
from collections.abc import Callable
from pathlib import Path

import pytest

from refmatch import find_duplicates, run_matching
from refmatch.audit import AuditLogger
from refmatch.engine import DeduplicationOptions, MatchResult
from refmatch.models import DuplicateReason, Reference

DOI = DuplicateReason.DOI
PMID = DuplicateReason.PMID
TITLE = DuplicateReason.TITLE_YEAR

CBT_TITLE = "Effectiveness of cognitive behavioral therapy for depression"


def _keys(matches: list) -> list[tuple]:
    return [m.pair_key for m in matches]


# ========== Options ==========


@pytest.mark.unit
def test_default_options() -> None:
    """Test documented defaults."""
    options = DeduplicationOptions()

    assert options.title_similarity_threshold == 0.86
    assert options.require_year_match is True
    assert options.year_tolerance == 0
    assert options.normalize_spelling is True
    assert options.weights.jaccard_weight == 0.6
    assert options.weights.dice_weight == pytest.approx(0.4)
    assert options.weights.subtitle_threshold == 0.95


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"title_similarity_threshold": -0.01},
        {"title_similarity_threshold": 1.01},
        {"year_tolerance": -1},
        {"year_tolerance": 1.5},
        {"year_tolerance": True},
        {"subtitle_rescore_threshold": 1.5},
        {"jaccard_weight": -0.1},
        {"identifier_blockers": ("isbn",)},
        {"identifier_blockers": ("doi", "doi")},
        {"identifier_blockers": "doi"},
    ],
)
def test_invalid_options_rejected(kwargs: dict) -> None:
    """Test out-of-range options fail fast instead of being clamped."""
    with pytest.raises(ValueError):
        DeduplicationOptions(**kwargs)


@pytest.mark.unit
def test_options_to_dict() -> None:
    """Test options snapshot is JSON serializable."""
    data = DeduplicationOptions(year_tolerance=2).to_dict()

    assert data["year_tolerance"] == 2
    assert data["identifier_blockers"] == ["doi", "pmid"]
    assert json.loads(json.dumps(data)) == data


# ========== Identifier matches ==========


@pytest.mark.unit
def test_exact_doi_duplicate(make_reference: Callable[..., Reference]) -> None:
    """Test DOI surface forms collapse into a single DOI match."""
    refs = [make_reference(1, doi="10.1234/test"), make_reference(2, doi="doi:10.1234/test")]

    matches = find_duplicates(refs)

    assert _keys(matches) == [(1, 2)]
    assert matches[0].reasons == frozenset({DOI})
    assert matches[0].title_similarity is None


@pytest.mark.unit
def test_different_dois_no_match(make_reference: Callable[..., Reference]) -> None:
    """Test distinct DOIs never pair."""
    refs = [
        make_reference(1, "Study A", doi="10.1234/aaa"),
        make_reference(2, "Study B", doi="10.1234/bbb"),
    ]
    assert find_duplicates(refs) == []


@pytest.mark.unit
@pytest.mark.parametrize("field", ["doi", "pmid"])
@pytest.mark.parametrize("blank", [None, "", "  "])
def test_blank_identifiers_no_match(
    make_reference: Callable[..., Reference], field: str, blank: str | None
) -> None:
    """Test absent identifiers are not shared identifiers."""
    refs = [make_reference(1, "Study A", **{field: blank}), make_reference(2, "Study B", **{field: blank})]
    assert find_duplicates(refs) == []


@pytest.mark.unit
def test_exact_pmid_duplicate(make_reference: Callable[..., Reference]) -> None:
    """Test PMID variants pair with the PMID reason."""
    refs = [make_reference(1, pmid="12345678"), make_reference(2, pmid="PMID: 12345678")]

    matches = find_duplicates(refs)

    assert _keys(matches) == [(1, 2)]
    assert matches[0].reasons == frozenset({PMID})


@pytest.mark.unit
def test_three_way_identifier_cluster(make_reference: Callable[..., Reference]) -> None:
    """Test three references sharing a DOI produce every pairwise match."""
    refs = [
        make_reference(1, "A", doi="10.1234/test"),
        make_reference(2, "B", doi="https://doi.org/10.1234/TEST"),
        make_reference(3, "C", doi="10.1234/test."),
    ]

    matches = find_duplicates(refs)

    assert _keys(matches) == [(1, 2), (1, 3), (2, 3)]
    assert all(m.reasons == frozenset({DOI}) for m in matches)


@pytest.mark.unit
def test_primary_has_lower_id(make_reference: Callable[..., Reference]) -> None:
    """Test the canonical pair puts the lower id first."""
    refs = [make_reference(5, "Study A", doi="10.1234/test"), make_reference(3, "Study B", doi="10.1234/test")]

    (match,) = find_duplicates(refs)

    assert match.primary.id == 3
    assert match.duplicate.id == 5


# ========== Title/year matches ==========


@pytest.mark.unit
@pytest.mark.parametrize(
    ("left", "right"),
    [
        (CBT_TITLE, CBT_TITLE),
        (
            "Effectiveness of cognitive behavioral therapy for treatment of depression",
            "Effectiveness of Cognitive Behavioral Therapy for Treatment of Depression",
        ),
        (CBT_TITLE, "Effectiveness of cognitive behavioural therapy for depression"),
        (
            "Randomized paediatric trial at a centre for behavioral research",
            "Randomised paediatric trial at a centre for behavioural research",
        ),
        (
            "Cognitive-Behavioral Therapy: A Systematic Review",
            "Cognitive Behavioral Therapy - A Systematic Review",
        ),
        (
            "EFFECTIVENESS OF COGNITIVE BEHAVIORAL THERAPY",
            "effectiveness of cognitive behavioral therapy",
        ),
    ],
)
def test_title_variants_match(
    make_reference: Callable[..., Reference], left: str, right: str
) -> None:
    """Test case, punctuation and spelling variants still match."""
    refs = [make_reference(1, left, year=2022), make_reference(2, right, year=2022)]

    matches = find_duplicates(refs)

    assert _keys(matches) == [(1, 2)]
    assert matches[0].reasons == frozenset({TITLE})
    assert matches[0].title_similarity >= 0.86


@pytest.mark.unit
def test_spelling_variant_depends_on_toggle(make_reference: Callable[..., Reference]) -> None:
    """Test British spellings only collapse when normalization is enabled."""
    refs = [
        make_reference(1, "Behavioral tumor markers in pediatric anemia", year=2022),
        make_reference(2, "Behavioural tumour markers in paediatric anaemia", year=2022),
    ]

    enabled = find_duplicates(refs)
    disabled = find_duplicates(refs, DeduplicationOptions(normalize_spelling=False))

    assert enabled[0].title_similarity == pytest.approx(1.0)
    assert disabled == []


@pytest.mark.unit
def test_unrelated_titles_no_match(make_reference: Callable[..., Reference]) -> None:
    """Test unrelated titles in the same year are not matched."""
    refs = [
        make_reference(1, CBT_TITLE, year=2022),
        make_reference(2, "Machine learning approaches to protein folding prediction", year=2022),
    ]
    assert find_duplicates(refs) == []


@pytest.mark.unit
def test_empty_titles_no_title_match(make_reference: Callable[..., Reference]) -> None:
    """Test empty titles are skipped by the title pass."""
    refs = [make_reference(1, "", year=2022), make_reference(2, "", year=2022)]
    assert find_duplicates(refs) == []


@pytest.mark.unit
def test_empty_title_still_matches_by_identifier(make_reference: Callable[..., Reference]) -> None:
    """Test a missing title does not block identifier matching."""
    refs = [make_reference(1, "", doi="10.1/x"), make_reference(2, "   ", doi="10.1/X")]

    (match,) = find_duplicates(refs)

    assert match.reasons == frozenset({DOI})


@pytest.mark.unit
def test_cross_year_tolerance(make_reference: Callable[..., Reference]) -> None:
    """Test adjacent years match only with a tolerance of one."""
    refs = [make_reference(1, CBT_TITLE, year=2021), make_reference(2, CBT_TITLE, year=2022)]

    tolerant = find_duplicates(refs, DeduplicationOptions(year_tolerance=1))
    strict = find_duplicates(refs, DeduplicationOptions(year_tolerance=0))

    assert _keys(tolerant) == [(1, 2)]
    assert tolerant[0].reasons == frozenset({TITLE})
    assert strict == []


@pytest.mark.unit
@pytest.mark.parametrize("tolerance", [0, 1, 2, 5])
def test_year_tolerance_boundary(make_reference: Callable[..., Reference], tolerance: int) -> None:
    """Test years exactly tolerance apart match and one more do not."""
    options = DeduplicationOptions(year_tolerance=tolerance)
    at_limit = [
        make_reference(1, CBT_TITLE, year=2000),
        make_reference(2, CBT_TITLE, year=2000 + tolerance),
    ]
    beyond = [
        make_reference(1, CBT_TITLE, year=2000),
        make_reference(2, CBT_TITLE, year=2000 + tolerance + 1),
    ]

    assert len(find_duplicates(at_limit, options)) == 1
    assert find_duplicates(beyond, options) == []


@pytest.mark.unit
def test_same_year_matches_regardless_of_tolerance(make_reference: Callable[..., Reference]) -> None:
    """Test same-year pairs match for every tolerance."""
    refs = [make_reference(1, CBT_TITLE, year=2022), make_reference(2, CBT_TITLE, year=2022)]
    assert len(find_duplicates(refs, DeduplicationOptions(year_tolerance=1))) == 1


@pytest.mark.unit
def test_missing_years(make_reference: Callable[..., Reference]) -> None:
    """Test undated references match each other only when years are optional."""
    refs = [make_reference(1, CBT_TITLE), make_reference(2, CBT_TITLE)]

    assert find_duplicates(refs, DeduplicationOptions(require_year_match=True)) == []
    lenient = find_duplicates(refs, DeduplicationOptions(require_year_match=False))
    assert _keys(lenient) == [(1, 2)]
    assert lenient[0].reasons == frozenset({TITLE})


@pytest.mark.unit
def test_undated_never_matches_dated(make_reference: Callable[..., Reference]) -> None:
    """Test an undated reference is not compared against dated ones."""
    refs = [make_reference(1, CBT_TITLE), make_reference(2, CBT_TITLE, year=2020)]
    assert find_duplicates(refs, DeduplicationOptions(require_year_match=False)) == []


# ========== Reason union ==========


@pytest.mark.unit
def test_doi_and_title_reasons_combined(make_reference: Callable[..., Reference]) -> None:
    """Test one match carries both DOI and title evidence."""
    refs = [
        make_reference(1, CBT_TITLE, year=2022, doi="10.1234/test"),
        make_reference(2, CBT_TITLE, year=2022, doi="10.1234/test"),
    ]

    (match,) = find_duplicates(refs)

    assert match.reasons == frozenset({DOI, TITLE})
    assert match.title_similarity == pytest.approx(1.0)


@pytest.mark.unit
def test_doi_and_pmid_reasons_combined(make_reference: Callable[..., Reference]) -> None:
    """Test identifier reasons are unioned."""
    refs = [
        make_reference(1, "Study A", doi="10.1234/test", pmid="12345678"),
        make_reference(2, "Study B", doi="10.1234/test", pmid="12345678"),
    ]

    (match,) = find_duplicates(refs)

    assert match.reasons == frozenset({DOI, PMID})


@pytest.mark.unit
def test_all_three_reasons(make_reference: Callable[..., Reference]) -> None:
    """Test every signal is recorded on a single match."""
    refs = [
        make_reference(1, CBT_TITLE, year=2022, doi="10.1234/test", pmid="12345678"),
        make_reference(2, CBT_TITLE, year=2022, doi="10.1234/test", pmid="12345678"),
    ]

    (match,) = find_duplicates(refs)

    assert match.sorted_reasons() == [DOI, PMID, TITLE]


# ========== Edge cases ==========


@pytest.mark.unit
def test_no_references() -> None:
    """Test an empty snapshot is a normal, empty result."""
    assert find_duplicates([]) == []


@pytest.mark.unit
def test_single_reference(make_reference: Callable[..., Reference]) -> None:
    """Test a lone reference has nothing to pair with."""
    assert find_duplicates([make_reference(1, "Study A", year=2022, doi="10.1/x")]) == []


@pytest.mark.unit
def test_duplicate_ids_rejected(make_reference: Callable[..., Reference]) -> None:
    """Test two references with the same id are an input error."""
    refs = [make_reference(1, "Study A"), make_reference(1, "Study B")]

    with pytest.raises(ValueError, match="Duplicate reference id"):
        find_duplicates(refs)


@pytest.mark.unit
def test_accepts_any_iterable(make_reference: Callable[..., Reference]) -> None:
    """Test a generator snapshot is materialised once."""
    refs = (make_reference(i, doi="10.1/x") for i in (1, 2))
    assert _keys(find_duplicates(refs)) == [(1, 2)]


@pytest.mark.unit
def test_string_ids(make_reference: Callable[..., Reference]) -> None:
    """Test string ids are canonicalised lexicographically."""
    refs = [make_reference("ref-b", doi="10.1/x"), make_reference("ref-a", doi="10.1/x")]
    assert _keys(find_duplicates(refs)) == [("ref-a", "ref-b")]


# ========== Properties ==========


def _mixed_snapshot() -> list[Reference]:
    return [
        Reference(id=1, title=CBT_TITLE, year=2020, doi="10.1/a"),
        Reference(id=2, title=CBT_TITLE.upper(), year=2020, pmid="555"),
        Reference(id=3, title="Effectiveness of cognitive behavioural therapy for depression", year=2021),
        Reference(id=4, title="Machine learning approaches to protein folding prediction", year=2020, pmid="555"),
        Reference(id=5, title="Machine learning approach to protein folding predictions", year=2020),
        Reference(id=6, title="Deep learning for medical image segmentation: a review", year=2019, doi="doi:10.1/A"),
        Reference(id=7, title="Deep learning for medical image segmentation: review", year=2019),
        Reference(id=8, title="Statin therapy and cardiovascular outcomes", year=2018),
        Reference(id=9, title="", year=2018, doi="https://doi.org/10.1/a"),
        Reference(id=10, title="Statin therapy and cardiovascular outcomes in older adults", year=2018),
    ]


@pytest.mark.unit
def test_deterministic_and_order_independent() -> None:
    """Test repeated and shuffled runs give identical output."""
    refs = _mixed_snapshot()
    shuffled = refs[:]
    random.Random(7).shuffle(shuffled)

    first = find_duplicates(refs, DeduplicationOptions(year_tolerance=1))
    second = find_duplicates(refs, DeduplicationOptions(year_tolerance=1))
    third = find_duplicates(shuffled, DeduplicationOptions(year_tolerance=1))

    assert first == second == third


@pytest.mark.unit
def test_canonical_sorted_unique_output() -> None:
    """Test no self matches, lower id first, ascending and unique keys."""
    matches = find_duplicates(_mixed_snapshot(), DeduplicationOptions(year_tolerance=1))
    keys = _keys(matches)

    assert keys
    assert all(primary < duplicate for primary, duplicate in keys)
    assert keys == sorted(keys)
    assert len(keys) == len(set(keys))
    for match in matches:
        assert match.reasons
        assert (match.title_similarity is not None) == (TITLE in match.reasons)


@pytest.mark.unit
def test_threshold_monotonicity() -> None:
    """Test raising the threshold never adds title matches."""
    refs = _mixed_snapshot()
    counts = []
    for threshold in (0.0, 0.3, 0.6, 0.8, 0.86, 0.9, 0.95, 0.99, 1.0):
        matches = find_duplicates(
            refs, DeduplicationOptions(title_similarity_threshold=threshold, year_tolerance=1)
        )
        counts.append(sum(TITLE in m.reasons for m in matches))

    assert counts == sorted(counts, reverse=True)
    assert counts[0] > counts[-1]


@pytest.mark.unit
def test_mixed_snapshot_expected_pairs() -> None:
    """Test every signal contributes on a mixed snapshot."""
    matches = {
        m.pair_key: m for m in find_duplicates(_mixed_snapshot(), DeduplicationOptions(year_tolerance=1))
    }

    assert matches[(1, 2)].reasons == frozenset({TITLE})
    assert matches[(1, 3)].reasons == frozenset({TITLE})
    assert matches[(1, 6)].reasons == frozenset({DOI})
    assert matches[(1, 9)].reasons == frozenset({DOI})
    assert matches[(2, 4)].reasons == frozenset({PMID})
    assert matches[(6, 7)].reasons == frozenset({TITLE})
    assert matches[(6, 7)].title_similarity == pytest.approx(1.0)
    assert (8, 10) not in matches


# ========== Run result and logging ==========


@pytest.mark.unit
def test_run_matching_result_counters(make_reference: Callable[..., Reference]) -> None:
    """Test the result reports totals and per-reason counts."""
    refs = [
        make_reference(1, CBT_TITLE, year=2022, doi="10.1/x"),
        make_reference(2, CBT_TITLE, year=2022, doi="10.1/x"),
        make_reference(3, "Other", pmid="9"),
        make_reference(4, "Another", pmid="9"),
    ]

    result = run_matching(refs)

    assert isinstance(result, MatchResult)
    assert result.total_references == 4
    assert result.total_matches == 2
    assert result.total_evidence == 3
    assert result.reason_counts == {"doi": 1, "pmid": 1, "title_year": 1}
    assert result.summary()["total_matches"] == 2


@pytest.mark.unit
def test_run_matching_logs_stages(tmp_path: Path, make_reference: Callable[..., Reference]) -> None:
    """Test a run writes its stages in order between run events."""
    refs = [make_reference(1, doi="10.1/x"), make_reference(2, doi="10.1/x")]
    log_path = tmp_path / "events.jsonl"

    with AuditLogger(log_path) as logger:
        run_matching(refs, logger=logger)

    events = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert [(e["event"], e["stage"]) for e in events] == [
        ("run_started", None),
        ("stage_started", "identifier_pass:doi"),
        ("stage_finished", "identifier_pass:doi"),
        ("stage_started", "identifier_pass:pmid"),
        ("stage_finished", "identifier_pass:pmid"),
        ("stage_started", "title_year_pass"),
        ("stage_finished", "title_year_pass"),
        ("stage_started", "aggregation"),
        ("stage_finished", "aggregation"),
        ("run_finished", None),
    ]
    assert events[0]["data"]["references"] == 2
    assert events[0]["data"]["parameters"]["title_similarity_threshold"] == 0.86
    assert events[-1]["data"]["status"] == "success"
    assert events[-1]["data"]["counters"]["total_matches"] == 1
    assert len({e["run_id"] for e in events}) == 1


class _FailingBlocker:
    name = "boom"
    reason = DuplicateReason.DOI

    def block_key(self, reference: Reference) -> str | None:
        raise RuntimeError("key lookup failed")


@pytest.mark.unit
def test_run_matching_logs_failure(tmp_path: Path, make_reference: Callable[..., Reference]) -> None:
    """Test a failing stage is logged and the error propagates."""
    log_path = tmp_path / "events.jsonl"

    with AuditLogger(log_path) as logger:
        with pytest.raises(RuntimeError, match="key lookup failed"):
            run_matching([make_reference(1)], blockers=[_FailingBlocker()], logger=logger)

    events = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    error = next(e for e in events if e["event"] == "error")
    assert error["level"] == "ERROR"
    assert error["stage"] == "identifier_pass:boom"
    assert error["data"] == {"exception_class": "RuntimeError", "message": "key lookup failed"}
    assert events[-1]["event"] == "run_finished"
    assert events[-1]["data"]["status"] == "failed"
