"""
Rate Quoter Service

Engine entry points used by the dispatch layers (HTTP server and CLI):
fetch and normalize quotes for a shipment, then rank them by weight-fit
cost or by composite score.

Store failures never reach the caller. A missing store or a failed lookup
is logged and reported as an empty quote list.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Protocol

from .config import Settings, get_settings
from .db.repository import RateRepository
from .models.enums import Mode, RankingMethod
from .models.quote import Quote, ScoredQuote, ScoringPolicy
from .models.shipment import ShipmentSpec
from .pricing.cost_model import CostModel
from .pricing.normalizer import normalize_rows
from .scoring.composite import CompositeScorer
from .scoring.weight_fit import WeightFitRanker

logger = logging.getLogger(__name__)

# Lane used by health probes; expected to match nothing
HEALTH_PROBE_LANE = "HEALTH"


class RateStore(Protocol):
    """Record store answering lane lookups."""

    async def query_rates(
        self,
        origin: str,
        destination: str,
        mode: Optional[Mode] = None,
    ) -> list[dict[str, Any]]:
        ...


@dataclass
class HealthReport:
    """Result of a service health probe."""

    store_configured: bool
    store_reachable: bool
    sample_count: int = 0
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.store_configured and self.store_reachable:
            return "healthy"
        return "degraded"

    @property
    def summary(self) -> str:
        if not self.store_configured:
            return "RateQuoterService OK; no record store configured."
        if self.store_reachable:
            return f"RateQuoterService OK; store probe executed ({self.sample_count} rows)."
        return "RateQuoterService OK; store probe failed."


class RateQuoterService:
    """
    Fetches, prices and ranks carrier quotes.

    Stateless between calls; concurrent requests need no coordination.
    """

    def __init__(self, store: Optional[RateStore] = None, settings: Optional[Settings] = None):
        """
        Initialize the service.

        Args:
            store: Record store for rate lookups; None means no store configured
            settings: Pricing and scoring configuration (defaults to get_settings())
        """
        self.store = store
        self.settings = settings or get_settings()
        self.cost_model = CostModel.from_settings(self.settings)
        self.weight_fit_ranker = WeightFitRanker(self.cost_model)
        self.composite_scorer = CompositeScorer(
            self.cost_model,
            default_weights=self.settings.default_weights(),
        )

    async def fetch_and_normalize(self, shipment: ShipmentSpec) -> list[Quote]:
        """
        Look up rates for a shipment's lane and normalize them into quotes.

        Returns:
            Quotes in store order; empty when the store is missing or fails
        """
        if self.store is None:
            logger.warning("No record store configured; returning empty rates")
            return []

        logger.info(
            "Fetching rates: origin=%s destination=%s mode=%s weight_lbs=%s",
            shipment.origin,
            shipment.destination,
            shipment.mode.value if shipment.mode else "any",
            shipment.weight_lbs,
        )

        try:
            rows = await self.store.query_rates(
                shipment.origin,
                shipment.destination,
                shipment.mode,
            )
        except Exception:
            logger.exception("Rate lookup failed for %s", shipment.lane)
            return []

        quotes = normalize_rows(rows or [])
        logger.info("Rates fetched: count=%d", len(quotes))
        return quotes

    def rank_by_weight_fit(self, quotes: list[Quote], weight_lbs: float) -> list[ScoredQuote]:
        """Rank quotes by weight-adjusted cost, cheapest first."""
        return self.weight_fit_ranker.rank(quotes, weight_lbs)

    def rank_composite(
        self,
        quotes: list[Quote],
        weight_lbs: float,
        policy: Optional[ScoringPolicy] = None,
    ) -> list[ScoredQuote]:
        """Rank quotes by composite score, best first."""
        return self.composite_scorer.rank(quotes, weight_lbs, policy)

    def rank(
        self,
        quotes: list[Quote],
        weight_lbs: float,
        method: RankingMethod = RankingMethod.WEIGHT_FIT,
        policy: Optional[ScoringPolicy] = None,
    ) -> list[ScoredQuote]:
        """Rank quotes with the chosen method."""
        if method == RankingMethod.COMPOSITE:
            return self.rank_composite(quotes, weight_lbs, policy)
        return self.rank_by_weight_fit(quotes, weight_lbs)

    async def get_top_rates(
        self,
        shipment: ShipmentSpec,
        limit: int = 3,
        method: RankingMethod = RankingMethod.WEIGHT_FIT,
        policy: Optional[ScoringPolicy] = None,
    ) -> list[ScoredQuote]:
        """
        Fetch, rank and keep the best quotes for a shipment.

        Args:
            shipment: Shipment to quote
            limit: Number of quotes to keep
            method: Ranking method
            policy: Composite weights, ignored for weight-fit ranking

        Returns:
            Up to `limit` scored quotes, best first
        """
        quotes = await self.fetch_and_normalize(shipment)
        return self.rank(quotes, shipment.weight_lbs, method, policy)[:limit]

    async def health(self) -> HealthReport:
        """Probe the record store with a lane that should match nothing."""
        if self.store is None:
            return HealthReport(store_configured=False, store_reachable=False)

        try:
            rows = await self.store.query_rates(HEALTH_PROBE_LANE, HEALTH_PROBE_LANE)
        except Exception as e:
            logger.warning("Health probe failed: %s", e)
            return HealthReport(store_configured=True, store_reachable=False, error=str(e))

        return HealthReport(store_configured=True, store_reachable=True, sample_count=len(rows or []))


def build_service(settings: Optional[Settings] = None) -> RateQuoterService:
    """Build a service, attaching the SQL store when DATABASE_URL is set."""
    settings = settings or get_settings()
    store = None
    if settings.store_configured():
        store = RateRepository(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            query_limit=settings.RATE_QUERY_LIMIT,
        )
    return RateQuoterService(store=store, settings=settings)


@lru_cache
def get_service() -> RateQuoterService:
    """Get cached service instance."""
    return build_service()
