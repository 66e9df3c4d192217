"""Match aggregation."""

from refmatch.aggregate.aggregator import aggregate, canonical_pair, merge_evidence

__all__ = ["aggregate", "canonical_pair", "merge_evidence"]
