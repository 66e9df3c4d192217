"""Title similarity scoring."""

from refmatch.scoring.similarity import (
    DEFAULT_JACCARD_WEIGHT,
    DEFAULT_SUBTITLE_THRESHOLD,
    DEFAULT_WEIGHTS,
    ScoringWeights,
    bigram_dice,
    blended_score,
    dice_coefficient,
    jaccard_similarity,
    similarity_upper_bound,
    title_similarity,
)

__all__ = [
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "DEFAULT_JACCARD_WEIGHT",
    "DEFAULT_SUBTITLE_THRESHOLD",
    "bigram_dice",
    "dice_coefficient",
    "jaccard_similarity",
    "blended_score",
    "similarity_upper_bound",
    "title_similarity",
]
