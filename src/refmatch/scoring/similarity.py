"""Blended title similarity.

Score = ``w * Jaccard(tokens) + (1 - w) * Dice(bigrams)`` with the token
weight ``w`` defaulting to 0.6. When the full-title score already exceeds
the subtitle threshold (0.95), the pre-colon fragments are scored too and
the larger value wins.

All functions are pure and deterministic.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from refmatch.normalize.title import TitleForm, TitleSignature, bigrams

__all__ = [
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "DEFAULT_JACCARD_WEIGHT",
    "DEFAULT_SUBTITLE_THRESHOLD",
    "bigram_dice",
    "dice_coefficient",
    "jaccard_similarity",
    "blended_score",
    "title_similarity",
    "similarity_upper_bound",
]

DEFAULT_JACCARD_WEIGHT = 0.6
DEFAULT_SUBTITLE_THRESHOLD = 0.95


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Tuned scoring constants.

    Attributes
    ----------
    jaccard_weight : float
        Weight of token Jaccard; Dice gets the remainder.
    subtitle_threshold : float
        Full-title score above which pre-colon fragments are also scored.
    """

    jaccard_weight: float = DEFAULT_JACCARD_WEIGHT
    subtitle_threshold: float = DEFAULT_SUBTITLE_THRESHOLD

    @property
    def dice_weight(self) -> float:
        """Weight of character Dice."""
        return 1.0 - self.jaccard_weight


DEFAULT_WEIGHTS = ScoringWeights()


def jaccard_similarity(set_a: frozenset[str], set_b: frozenset[str]) -> float:
    """Calculate Jaccard similarity between two token sets.

    Notes
    -----
    Two empty sets score 0.0: missing vocabulary is not evidence of a match.
    """
    if not set_a and not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def bigram_dice(grams_a: Counter[str], grams_b: Counter[str]) -> float:
    """Sørensen-Dice coefficient over two bigram multisets.

    Returns 0.0 when either multiset is empty.
    """
    if not grams_a or not grams_b:
        return 0.0
    shared = sum((grams_a & grams_b).values())
    return 2.0 * shared / (grams_a.total() + grams_b.total())


def dice_coefficient(compact_a: str, compact_b: str) -> float:
    """Dice coefficient between the bigram multisets of two strings.

    Returns 0.0 when either string is shorter than two characters.

    Examples
    --------
    >>> dice_coefficient("night", "nacht")
    0.25
    """
    return bigram_dice(bigrams(compact_a), bigrams(compact_b))


def blended_score(
    form_a: TitleForm,
    form_b: TitleForm,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted blend of token Jaccard and character Dice."""
    jaccard = jaccard_similarity(form_a.tokens, form_b.tokens)
    dice = bigram_dice(form_a.bigrams, form_b.bigrams)
    return weights.jaccard_weight * jaccard + weights.dice_weight * dice


def similarity_upper_bound(
    sig_a: TitleSignature,
    sig_b: TitleSignature,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Cheap upper bound on the full-title blended score.

    Uses exact Jaccard and bounds Dice by the bigram counts alone:
    ``2 * min(n_a, n_b) / (n_a + n_b)``.
    """
    n_a = sig_a.full.bigram_count
    n_b = sig_b.full.bigram_count
    dice_max = 2.0 * min(n_a, n_b) / (n_a + n_b) if n_a and n_b else 0.0
    jaccard = jaccard_similarity(sig_a.tokens, sig_b.tokens)
    return weights.jaccard_weight * jaccard + weights.dice_weight * dice_max


def title_similarity(
    sig_a: TitleSignature,
    sig_b: TitleSignature,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Similarity in [0, 1] between two title signatures.

    Parameters
    ----------
    sig_a : TitleSignature
        First signature.
    sig_b : TitleSignature
        Second signature.
    weights : ScoringWeights, optional
        Tuned constants, by default ``DEFAULT_WEIGHTS``.

    Returns
    -------
    float
        Blended score, raised to the pre-colon score when that is higher
        and the full-title score exceeds ``weights.subtitle_threshold``.
        A title without a colon contributes its whole form as fragment.
    """
    score = blended_score(sig_a.full, sig_b.full, weights)
    if score <= weights.subtitle_threshold:
        return score

    if sig_a.pre_colon is None and sig_b.pre_colon is None:
        return score

    head_a = sig_a.pre_colon or sig_a.full
    head_b = sig_b.pre_colon or sig_b.full
    return max(score, blended_score(head_a, head_b, weights))
