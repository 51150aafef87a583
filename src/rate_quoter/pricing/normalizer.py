"""
Rate Row Normalizer

Maps raw rate records from the record store (or any other source with
similar columns) into canonical Quote objects.

Rows are decoded field by field. A value that cannot be coerced falls back
to 0 for required numbers and to None for optional ones, so one bad row
never aborts a batch. Unknown modes fall back to ocean.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..models.enums import ChargeBasis, Mode
from ..models.quote import Quote, RateComponents

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "EUR"
UNKNOWN_CARRIER_ID = "unknown"


def coerce_number(value: Any) -> Optional[float]:
    """
    Coerce a raw column value to a finite float.

    Returns None for missing, blank or unparseable values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_text(value: Any) -> Optional[str]:
    """Coerce a raw column value to stripped text, None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RateRow(BaseModel):
    """
    Typed view of one raw rate record.

    Accepts the store's snake_case columns and a few alternate spellings
    seen in other rate feeds.
    """

    model_config = ConfigDict(extra="ignore")

    origin: str = ""
    destination: str = ""
    mode: Optional[str] = None
    carrier_id: str = UNKNOWN_CARRIER_ID
    carrier_name: Optional[str] = None

    base_rate: float = 0.0
    rate_per_lb: float = Field(
        default=0.0,
        validation_alias=AliasChoices("rate_per_lb", "ratePerLb"),
    )
    fuel_pct: float = Field(
        default=0.0,
        validation_alias=AliasChoices("fuel_surcharge", "fuel_pct", "fuelPct"),
    )
    min_weight: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("min_weight", "min_weight_lbs", "minWeightLbs"),
    )
    max_weight: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("max_weight", "max_weight_lbs", "maxWeightLbs"),
    )
    transit_days: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("transit_days", "transitDays"),
    )
    charge_basis: str = Field(
        default=ChargeBasis.PER_SHIPMENT.value,
        validation_alias=AliasChoices("charge_basis", "chargeBasis"),
    )
    currency: str = DEFAULT_CURRENCY

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def decode_location(cls, value):
        return coerce_text(value) or ""

    @field_validator("mode", mode="before")
    @classmethod
    def decode_mode(cls, value):
        # Kept verbatim; Mode.from_row decides what is unknown
        return None if value is None else str(value)

    @field_validator("carrier_name", mode="before")
    @classmethod
    def decode_optional_text(cls, value):
        return coerce_text(value)

    @field_validator("carrier_id", mode="before")
    @classmethod
    def decode_carrier_id(cls, value):
        return coerce_text(value) or UNKNOWN_CARRIER_ID

    @field_validator("base_rate", "rate_per_lb", "fuel_pct", mode="before")
    @classmethod
    def decode_required_number(cls, value):
        return coerce_number(value) or 0.0

    @field_validator("min_weight", "max_weight", "transit_days", mode="before")
    @classmethod
    def decode_optional_number(cls, value):
        return coerce_number(value)

    @field_validator("charge_basis", mode="before")
    @classmethod
    def decode_charge_basis(cls, value):
        return coerce_text(value) or ChargeBasis.PER_SHIPMENT.value

    @field_validator("currency", mode="before")
    @classmethod
    def decode_currency(cls, value):
        return coerce_text(value) or DEFAULT_CURRENCY

    def to_quote(self) -> Quote:
        """Build the canonical Quote, repairing values Quote would reject."""
        min_weight, max_weight = self.min_weight, self.max_weight
        if min_weight is not None and max_weight is not None and min_weight > max_weight:
            logger.debug(
                "Swapping inverted weight bracket %s/%s for carrier %s",
                min_weight, max_weight, self.carrier_id,
            )
            min_weight, max_weight = max_weight, min_weight

        transit_days = None
        if self.transit_days is not None and self.transit_days > 0:
            transit_days = math.ceil(self.transit_days)

        return Quote(
            carrier_id=self.carrier_id,
            carrier_name=self.carrier_name,
            mode=Mode.from_row(self.mode),
            origin=self.origin,
            destination=self.destination,
            min_weight_lbs=min_weight,
            max_weight_lbs=max_weight,
            components=RateComponents(
                base_rate=max(0.0, self.base_rate),
                rate_per_lb=max(0.0, self.rate_per_lb),
            ),
            transit_days=transit_days,
            charge_basis=self.charge_basis,
            fuel_pct=self.fuel_pct,
            currency=self.currency,
        )


def normalize_row(row: Mapping[str, Any]) -> Quote:
    """Normalize a single raw rate record into a Quote."""
    return RateRow.model_validate(dict(row)).to_quote()


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[Quote]:
    """
    Normalize raw rate records into Quotes.

    Args:
        rows: Raw records with at least origin, destination, mode,
            carrier_id and base_rate

    Returns:
        One Quote per mapping row, in input order; rows that are not
        mappings are logged and skipped
    """
    quotes = []
    for row in rows:
        if not isinstance(row, Mapping):
            logger.warning("Skipping rate row of type %s: not a mapping", type(row).__name__)
            continue
        quotes.append(normalize_row(row))
    return quotes
