"""
Rate Quoter Service Tests

Fetch, normalize and rank through a fake store.
"""

import asyncio
import logging

import pytest

from rate_quoter.models import Mode, PolicyWeights, RankingMethod, ScoringPolicy, ShipmentSpec
from rate_quoter.service import HEALTH_PROBE_LANE, RateQuoterService, build_service


@pytest.fixture
def shipment():
    return ShipmentSpec(origin="Ningbo", destination="Hamburg", weight_lbs=2000)


@pytest.fixture
def service(fake_store, settings):
    return RateQuoterService(store=fake_store, settings=settings)


class TestFetchAndNormalize:

    def test_returns_normalized_quotes(self, service, shipment):
        quotes = asyncio.run(service.fetch_and_normalize(shipment))

        assert [q.carrier_id for q in quotes] == ["msk", "lh"]
        assert quotes[0].mode == Mode.OCEAN
        assert quotes[1].mode == Mode.AIR

    def test_passes_lane_and_mode_to_store(self, service, fake_store):
        shipment = ShipmentSpec(origin="Ningbo", destination="Hamburg", weight_lbs=500, mode="air")

        asyncio.run(service.fetch_and_normalize(shipment))

        assert fake_store.calls == [("Ningbo", "Hamburg", Mode.AIR)]

    def test_no_store_returns_empty(self, settings, shipment, caplog):
        service = RateQuoterService(store=None, settings=settings)

        with caplog.at_level(logging.WARNING):
            quotes = asyncio.run(service.fetch_and_normalize(shipment))

        assert quotes == []
        assert "No record store configured" in caplog.text

    def test_store_error_returns_empty(self, settings, make_store, shipment, caplog):
        store = make_store(error=ConnectionError("connection refused"))
        service = RateQuoterService(store=store, settings=settings)

        with caplog.at_level(logging.ERROR):
            quotes = asyncio.run(service.fetch_and_normalize(shipment))

        assert quotes == []
        assert "Rate lookup failed" in caplog.text

    def test_store_returning_nothing(self, settings, make_store, shipment):
        service = RateQuoterService(store=make_store(rows=[]), settings=settings)
        assert asyncio.run(service.fetch_and_normalize(shipment)) == []

    def test_rows_that_are_not_mappings_are_skipped(self, settings, make_store, ningbo_rows, shipment, caplog):
        store = make_store(rows=[("Ningbo", "Hamburg"), *ningbo_rows, None])
        service = RateQuoterService(store=store, settings=settings)

        with caplog.at_level(logging.WARNING):
            quotes = asyncio.run(service.fetch_and_normalize(shipment))

        assert [q.carrier_id for q in quotes] == ["msk", "lh"]
        assert "not a mapping" in caplog.text


class TestRanking:

    def test_rank_dispatches_by_method(self, service, make_quote):
        quotes = [
            make_quote(base_rate=1200, mode=Mode.OCEAN, carrier_id="ocean", transit_days=32),
            make_quote(base_rate=900, mode=Mode.AIR, carrier_id="air", transit_days=4),
        ]

        by_cost = service.rank(quotes, 2000)
        by_composite = service.rank(quotes, 2000, RankingMethod.COMPOSITE)

        assert by_cost[0].breakdown.composite_score is None
        assert by_composite[0].breakdown.composite_score is not None

    def test_settings_flow_into_pricing(self, settings, make_quote):
        settings.SURCHARGES_ENABLED = False
        service = RateQuoterService(settings=settings)

        ranked = service.rank_by_weight_fit([make_quote(base_rate=900, mode=Mode.AIR)], 100)

        assert ranked[0].breakdown.total_cost_usd == pytest.approx(900)

    def test_settings_flow_into_default_weights(self, settings):
        settings.SCORING_WEIGHTS_COST = 1
        settings.SCORING_WEIGHTS_TIME = 0
        settings.SCORING_WEIGHTS_RELIABILITY = 0
        settings.SCORING_WEIGHTS_RISK = 0
        service = RateQuoterService(settings=settings)

        weights = service.composite_scorer.resolve_weights()

        assert weights.cost == pytest.approx(1.0)
        assert weights.time == 0


class TestGetTopRates:

    def test_weight_fit_top(self, service, shipment):
        ranked = asyncio.run(service.get_top_rates(shipment))

        assert [q.carrier_id for q in ranked] == ["lh", "msk"]
        assert ranked[0].breakdown.total_cost_usd == pytest.approx(993.0)
        assert ranked[1].breakdown.total_cost_usd == pytest.approx(1299.0)

    def test_limit(self, service, shipment):
        ranked = asyncio.run(service.get_top_rates(shipment, limit=1))

        assert len(ranked) == 1
        assert ranked[0].carrier_id == "lh"

    def test_composite_top(self, service, shipment):
        ranked = asyncio.run(service.get_top_rates(shipment, method=RankingMethod.COMPOSITE))

        assert [q.carrier_id for q in ranked] == ["lh", "msk"]
        assert ranked[0].breakdown.composite_score == pytest.approx(0.885)
        assert ranked[1].breakdown.composite_score == pytest.approx(0.265)

    def test_composite_policy(self, service, shipment):
        policy = ScoringPolicy(weights=PolicyWeights(cost=1, time=1, reliability=1, risk=1))

        ranked = asyncio.run(
            service.get_top_rates(shipment, method=RankingMethod.COMPOSITE, policy=policy)
        )

        assert ranked[0].breakdown.weights.cost == pytest.approx(0.25)

    def test_no_quotes(self, settings, shipment):
        service = RateQuoterService(store=None, settings=settings)
        assert asyncio.run(service.get_top_rates(shipment)) == []


class TestHealth:

    def test_no_store(self, settings):
        report = asyncio.run(RateQuoterService(settings=settings).health())

        assert report.store_configured is False
        assert report.status == "degraded"
        assert report.summary == "RateQuoterService OK; no record store configured."

    def test_reachable_store(self, settings, make_store):
        store = make_store(rows=[])
        report = asyncio.run(RateQuoterService(store=store, settings=settings).health())

        assert report.status == "healthy"
        assert report.sample_count == 0
        assert report.summary == "RateQuoterService OK; store probe executed (0 rows)."
        assert store.calls == [(HEALTH_PROBE_LANE, HEALTH_PROBE_LANE, None)]

    def test_failing_store(self, settings, make_store):
        store = make_store(error=RuntimeError("database is locked"))
        report = asyncio.run(RateQuoterService(store=store, settings=settings).health())

        assert report.status == "degraded"
        assert report.store_reachable is False
        assert report.error == "database is locked"
        assert report.summary == "RateQuoterService OK; store probe failed."


class TestBuildService:

    def test_without_database_url(self, settings):
        assert build_service(settings).store is None

    def test_with_database_url(self, settings, tmp_path):
        settings.DATABASE_URL = f"sqlite:///{tmp_path / 'rates.db'}"
        settings.RATE_QUERY_LIMIT = 10

        service = build_service(settings)

        assert service.store is not None
        assert service.store.query_limit == 10
