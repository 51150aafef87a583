"""
Weight-Fit Cost Ranker

Single-factor ranking: cheapest effective cost first. Quotes whose weight
bracket does not cover the shipment weight pay a flat 15% penalty.
Scores are lower-is-better.
"""

from ..models.quote import Quote, ScoreBreakdown, ScoredQuote
from ..pricing.cost_model import CostModel

WEIGHT_FIT_PENALTY = 0.15


def weight_fit_penalty(quote: Quote, weight_lbs: float) -> float:
    """Penalty for a shipment weight outside the quote's bracket."""
    return 0.0 if quote.fits_weight(weight_lbs) else WEIGHT_FIT_PENALTY


def cost_per_lb(total_cost: float, weight_lbs: float) -> float:
    """Cost per pound, or the total itself for a non-positive weight."""
    return total_cost / weight_lbs if weight_lbs > 0 else total_cost


class WeightFitRanker:
    """Ranks quotes by weight-adjusted total cost, ascending."""

    def __init__(self, cost_model: CostModel):
        self.cost_model = cost_model

    def score_quote(self, quote: Quote, weight_lbs: float) -> ScoredQuote:
        """Price a quote and attach its weight-fit score."""
        base = self.cost_model.compute_base(quote, weight_lbs)
        total_cost = self.cost_model.compute_total(quote, weight_lbs, base=base)
        penalty = weight_fit_penalty(quote, weight_lbs)

        breakdown = ScoreBreakdown(
            total_cost_usd=total_cost,
            cost_per_lb_usd=cost_per_lb(total_cost, weight_lbs),
            weight_fit_penalty=penalty,
            currency=quote.currency,
            base_amount=base,
            fuel_pct_applied=quote.fuel_pct,
        )
        return ScoredQuote.from_quote(quote, score=total_cost * (1 + penalty), breakdown=breakdown)

    def rank(self, quotes: list[Quote], weight_lbs: float) -> list[ScoredQuote]:
        """
        Score and rank quotes by score ascending.

        Args:
            quotes: Quotes to rank
            weight_lbs: Shipment weight in pounds

        Returns:
            New list of scored quotes, cheapest first; ties keep input order
        """
        scored = [self.score_quote(quote, weight_lbs) for quote in quotes]
        return sorted(scored, key=lambda q: q.score)
