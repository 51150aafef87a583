"""Data models for the rate quoter."""

from .enums import Mode, ChargeBasis, RateType, RankingMethod, FALLBACK_MODE
from .shipment import ShipmentSpec
from .quote import (
    RateComponents,
    Quote,
    ScoreBreakdown,
    ScoredQuote,
    ScoringWeights,
    PolicyWeights,
    ScoringPolicy,
)

__all__ = [
    # Enums
    "Mode",
    "ChargeBasis",
    "RateType",
    "RankingMethod",
    "FALLBACK_MODE",
    # Shipment
    "ShipmentSpec",
    # Quote
    "RateComponents",
    "Quote",
    "ScoreBreakdown",
    "ScoredQuote",
    "ScoringWeights",
    "PolicyWeights",
    "ScoringPolicy",
]
