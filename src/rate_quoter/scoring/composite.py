"""
Composite Multi-Factor Scorer

Scores quotes on four factors, each normalized to 0..1 (higher is better):

- cost: position of the total cost within the batch's cost range
- time: position of the transit days within the batch's transit range
- reliability: reputable carrier bonus and weight-bracket fit bonus
- risk: inverse of a fixed baseline risk per transport mode

The factors are blended with caller or default weights into a composite
score, and quotes are ranked best first. Degenerate ranges (all costs equal,
no transit data) score a neutral 0.5 instead of dividing by zero.
"""

from typing import Optional

from ..config import DEFAULT_MODE_RISK, MODE_RISK, REPUTABLE_CARRIERS
from ..models.quote import (
    PolicyWeights,
    Quote,
    ScoreBreakdown,
    ScoredQuote,
    ScoringPolicy,
    ScoringWeights,
)
from ..pricing.cost_model import CostModel
from .weight_fit import cost_per_lb, weight_fit_penalty

NEUTRAL_SCORE = 0.5
REPUTABLE_CARRIER_BONUS = 0.25
BRACKET_FIT_BONUS = 0.15


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _range_score(value: float, low: float, high: float) -> float:
    """1 at the low end of a range, 0 at the high end, neutral when flat."""
    if high > low:
        return 1 - (value - low) / (high - low)
    return NEUTRAL_SCORE


class CompositeScorer:
    """
    Ranks quotes by a weighted blend of cost, time, reliability and risk.

    Score range: 0.0 (worst) to 1.0 (best) for the composite.
    The scored quote's `score` is 1 - composite so that lower stays better,
    matching the weight-fit ranker.
    """

    def __init__(
        self,
        cost_model: CostModel,
        default_weights: Optional[ScoringWeights] = None,
        reputable_carriers: Optional[frozenset[str]] = None,
        mode_risk: Optional[dict[str, float]] = None,
    ):
        """
        Initialize the scorer.

        Args:
            cost_model: Cost model used to price every quote
            default_weights: Weights used where the policy sets none
            reputable_carriers: Carrier names earning the reliability bonus
            mode_risk: Baseline risk per mode value
        """
        self.cost_model = cost_model
        self.default_weights = default_weights or ScoringWeights()
        self.reputable_carriers = REPUTABLE_CARRIERS if reputable_carriers is None else reputable_carriers
        self.mode_risk = MODE_RISK if mode_risk is None else mode_risk

    def resolve_weights(self, overrides: Optional[PolicyWeights] = None) -> ScoringWeights:
        """
        Merge policy overrides over the defaults and normalize to sum 1.

        Falls back to the defaults when the merged weights sum to zero.
        """
        defaults = self.default_weights
        if defaults.total <= 0:
            defaults = ScoringWeights()

        merged = defaults
        if overrides is not None:
            merged = defaults.model_copy(update=overrides.model_dump(exclude_none=True))

        if merged.total <= 0:
            return defaults.normalized()
        return merged.normalized()

    def score_reliability(self, quote: Quote, weight_lbs: float) -> float:
        """Reliability heuristic: carrier reputation and bracket fit."""
        score = NEUTRAL_SCORE
        if quote.carrier_name and quote.carrier_name in self.reputable_carriers:
            score += REPUTABLE_CARRIER_BONUS
        if quote.fits_weight(weight_lbs):
            score += BRACKET_FIT_BONUS
        return _clamp(score)

    def score_risk(self, quote: Quote) -> float:
        """Lower mode risk = higher score."""
        risk = self.mode_risk.get(quote.mode.value, DEFAULT_MODE_RISK)
        return _clamp(1 - risk)

    def rank(
        self,
        quotes: list[Quote],
        weight_lbs: float,
        policy: Optional[ScoringPolicy] = None,
    ) -> list[ScoredQuote]:
        """
        Score and rank quotes by composite score descending.

        Args:
            quotes: Quotes to rank
            weight_lbs: Shipment weight in pounds
            policy: Optional weight overrides

        Returns:
            New list of scored quotes, best first; ties keep input order
        """
        if not quotes:
            return []

        bases = [self.cost_model.compute_base(q, weight_lbs) for q in quotes]
        totals = [
            self.cost_model.compute_total(q, weight_lbs, base=base)
            for q, base in zip(quotes, bases)
        ]
        min_cost, max_cost = min(totals), max(totals)

        # Only quotes with transit data shape the range
        transit_values = [q.transit_days for q in quotes if q.transit_days and q.transit_days > 0]
        has_transit = bool(transit_values)
        min_transit = min(transit_values) if has_transit else 0
        max_transit = max(transit_values) if has_transit else 0

        weights = self.resolve_weights(policy.weights if policy else None)

        scored = []
        for quote, base, total_cost in zip(quotes, bases, totals):
            cost_score = _range_score(total_cost, min_cost, max_cost)

            time_score = NEUTRAL_SCORE
            if has_transit:
                # Missing transit counts as the slowest in the batch
                transit = quote.transit_days if quote.transit_days else max_transit
                time_score = _range_score(transit, min_transit, max_transit)

            reliability_score = self.score_reliability(quote, weight_lbs)
            risk_score = self.score_risk(quote)

            composite = (
                cost_score * weights.cost
                + time_score * weights.time
                + reliability_score * weights.reliability
                + risk_score * weights.risk
            )

            breakdown = ScoreBreakdown(
                total_cost_usd=total_cost,
                cost_per_lb_usd=cost_per_lb(total_cost, weight_lbs),
                # Informational only, not applied to the composite
                weight_fit_penalty=weight_fit_penalty(quote, weight_lbs),
                currency=quote.currency,
                base_amount=base,
                fuel_pct_applied=quote.fuel_pct,
                cost_score=cost_score,
                time_score=time_score,
                reliability_score=reliability_score,
                risk_score=risk_score,
                composite_score=composite,
                weights=weights,
            )
            scored.append(ScoredQuote.from_quote(quote, score=1 - composite, breakdown=breakdown))

        return sorted(scored, key=lambda q: q.breakdown.composite_score, reverse=True)
