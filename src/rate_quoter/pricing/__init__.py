"""Pricing: raw rate normalization and cost computation."""

from .cost_model import CostModel, KG_PER_LB
from .normalizer import RateRow, normalize_row, normalize_rows

__all__ = ["CostModel", "KG_PER_LB", "RateRow", "normalize_row", "normalize_rows"]
