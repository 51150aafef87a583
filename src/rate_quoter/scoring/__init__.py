"""Scoring algorithms for the rate quoter."""

from .weight_fit import WeightFitRanker, WEIGHT_FIT_PENALTY
from .composite import CompositeScorer, NEUTRAL_SCORE

__all__ = ["WeightFitRanker", "WEIGHT_FIT_PENALTY", "CompositeScorer", "NEUTRAL_SCORE"]
