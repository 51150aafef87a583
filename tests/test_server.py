"""
API Server Tests

Endpoints run against a service backed by a fake store.
"""

import pytest
from fastapi.testclient import TestClient

from rate_quoter.server import app
from rate_quoter.service import RateQuoterService, get_service


@pytest.fixture
def client(fake_store, settings):
    service = RateQuoterService(store=fake_store, settings=settings)
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def storeless_client(settings):
    service = RateQuoterService(store=None, settings=settings)
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


SHIPMENT = {"origin": "Ningbo", "destination": "Hamburg", "weight_lbs": 2000}


class TestSystemEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["top_rates"] == "POST /v1/rates/top"

    def test_health_with_store(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["store_configured"] is True
        assert body["message"].startswith("RateQuoterService OK; store probe executed")

    def test_health_without_store(self, storeless_client):
        body = storeless_client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["message"] == "RateQuoterService OK; no record store configured."


class TestRatesEndpoint:

    def test_lookup(self, client):
        response = client.post("/v1/rates", json={**SHIPMENT, "mode": "ocean"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["quotes"][0]["carrier_id"] == "msk"
        assert body["message"] == "Found 2 quotes for Ningbo -> Hamburg (ocean)."

    def test_no_store(self, storeless_client):
        body = storeless_client.post("/v1/rates", json=SHIPMENT).json()

        assert body["count"] == 0
        assert body["message"] == "No quotes found for Ningbo -> Hamburg."

    @pytest.mark.parametrize(
        "override",
        [
            {"mode": "hovercraft"},
            {"weight_lbs": -5},
            {"weight_lbs": 0},
            {"origin": "   "},
        ],
    )
    def test_invalid_shipment(self, client, override):
        response = client.post("/v1/rates", json={**SHIPMENT, **override})
        assert response.status_code == 422

    def test_mode_is_case_insensitive(self, client, fake_store):
        response = client.post("/v1/rates", json={**SHIPMENT, "mode": "AIR"})

        assert response.status_code == 200
        assert fake_store.calls[-1][2].value == "air"


class TestTopRatesEndpoint:

    def test_weight_fit(self, client):
        body = client.post("/v1/rates/top", json=SHIPMENT).json()

        assert body["method"] == "weight_fit"
        assert [q["carrier_id"] for q in body["quotes"]] == ["lh", "msk"]
        assert body["quotes"][0]["breakdown"]["total_cost_usd"] == pytest.approx(993.0)
        assert body["message"].splitlines() == [
            "Top 2 for Ningbo -> Hamburg at 2000 lbs:",
            "1. Lufthansa - 993.00 EUR (air, ~4d)",
            "2. Maersk - 1,299.00 EUR (ocean, ~32d)",
        ]

    def test_limit(self, client):
        body = client.post("/v1/rates/top", json={**SHIPMENT, "limit": 1}).json()
        assert body["count"] == 1

    def test_composite_with_policy(self, client):
        payload = {
            **SHIPMENT,
            "method": "composite",
            "policy": {"weights": {"cost": 1, "time": 1, "reliability": 1, "risk": 1}},
        }

        body = client.post("/v1/rates/top", json=payload).json()

        top = body["quotes"][0]
        assert top["carrier_id"] == "lh"
        assert top["breakdown"]["weights"]["cost"] == pytest.approx(0.25)
        assert top["score"] == pytest.approx(1 - top["breakdown"]["composite_score"])

    def test_limit_out_of_range(self, client):
        assert client.post("/v1/rates/top", json={**SHIPMENT, "limit": 0}).status_code == 422

    def test_no_matches(self, storeless_client):
        body = storeless_client.post("/v1/rates/top", json=SHIPMENT).json()

        assert body["count"] == 0
        assert body["message"] == "No matching rates."


class TestScoreEndpoint:

    QUOTES = [
        {
            "carrier_id": "msk",
            "carrier_name": "Maersk",
            "mode": "ocean",
            "origin": "Ningbo",
            "destination": "Hamburg",
            "components": {"base_rate": 1200},
            "transit_days": 32,
        },
        {
            "carrier_id": "lh",
            "mode": "air",
            "origin": "Ningbo",
            "destination": "Hamburg",
            "components": {"base_rate": 900},
            "transit_days": 4,
        },
    ]

    def test_composite(self, client):
        payload = {"weight_lbs": 2000, "quotes": self.QUOTES, "method": "composite"}

        body = client.post("/v1/quotes/score", json=payload).json()

        assert [q["carrier_id"] for q in body["quotes"]] == ["lh", "msk"]
        assert body["quotes"][0]["breakdown"]["composite_score"] == pytest.approx(0.885)
        assert body["message"].startswith("Top 2 options by composite for 2000 lbs:")

    def test_unknown_mode_scored_as_ocean(self, client):
        quote = {**self.QUOTES[1], "mode": "rail"}

        body = client.post("/v1/quotes/score", json={"weight_lbs": 100, "quotes": [quote]}).json()

        assert body["quotes"][0]["mode"] == "ocean"

    def test_empty_quotes_rejected(self, client):
        assert client.post("/v1/quotes/score", json={"weight_lbs": 100, "quotes": []}).status_code == 422

    def test_inverted_bracket_rejected(self, client):
        quote = {**self.QUOTES[0], "min_weight_lbs": 5000, "max_weight_lbs": 100}
        response = client.post("/v1/quotes/score", json={"weight_lbs": 100, "quotes": [quote]})
        assert response.status_code == 422

    def test_ranking_failure_is_500(self, client, monkeypatch):
        def broken_rank(*args, **kwargs):
            raise RuntimeError("scorer exploded")

        service = app.dependency_overrides[get_service]()
        monkeypatch.setattr(service, "rank", broken_rank)

        response = client.post("/v1/quotes/score", json={"weight_lbs": 100, "quotes": self.QUOTES})

        assert response.status_code == 500
        assert "scorer exploded" in response.json()["detail"]
