"""Shared fixtures for rate quoter tests."""

from typing import Any, Optional

import pytest

from rate_quoter.config import Settings
from rate_quoter.models import Mode, Quote, RateComponents
from rate_quoter.pricing import CostModel


class FakeStore:
    """In-memory record store returning canned rows."""

    def __init__(self, rows: Optional[list[dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple] = []

    async def query_rates(self, origin, destination, mode=None):
        self.calls.append((origin, destination, mode))
        if self.error is not None:
            raise self.error
        return list(self.rows)


# Rows shaped like the SQL store's lane lookup
NINGBO_HAMBURG_ROWS = [
    {
        "origin": "Ningbo",
        "destination": "Hamburg",
        "mode": "ocean",
        "carrier_id": "msk",
        "carrier_name": "Maersk",
        "min_weight": 1000,
        "max_weight": 30000,
        "base_rate": 1200,
        "transit_days": 32,
    },
    {
        "origin": "Ningbo",
        "destination": "Hamburg",
        "mode": "air",
        "carrier_id": "lh",
        "carrier_name": "Lufthansa",
        "min_weight": 100,
        "max_weight": 5000,
        "base_rate": 900,
        "transit_days": 4,
    },
]


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, ignoring any local .env file."""
    return Settings(_env_file=None, DATABASE_URL=None)


@pytest.fixture
def cost_model() -> CostModel:
    return CostModel()


@pytest.fixture
def make_quote():
    """Factory for quotes with sensible lane defaults."""

    def _make(
        base_rate: float = 1000.0,
        mode: Mode = Mode.OCEAN,
        carrier_id: str = "c1",
        **fields,
    ) -> Quote:
        values = {
            "carrier_id": carrier_id,
            "mode": mode,
            "origin": "Ningbo",
            "destination": "Hamburg",
            "components": RateComponents(base_rate=base_rate),
        }
        values.update(fields)
        return Quote(**values)

    return _make


@pytest.fixture
def fake_store():
    return FakeStore(rows=NINGBO_HAMBURG_ROWS)


@pytest.fixture
def ningbo_rows():
    return [dict(row) for row in NINGBO_HAMBURG_ROWS]


@pytest.fixture
def make_store():
    """Factory for fake stores with custom rows or a lookup error."""
    return FakeStore
