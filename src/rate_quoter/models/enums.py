"""Enumerations for the rate quoter."""

from enum import Enum
from typing import Optional


class Mode(str, Enum):
    """Transport modes a carrier rate can be quoted for."""

    PARCEL = "parcel"
    LTL = "LTL"  # Less than truckload
    FTL = "FTL"  # Full truckload
    AIR = "air"
    OCEAN = "ocean"

    @classmethod
    def parse(cls, value: str) -> "Mode":
        """
        Parse a mode case-insensitively.

        Raises:
            ValueError: If the value names no known mode
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for mode in cls:
            if mode.value.lower() == key:
                return mode
        raise ValueError(f"Unknown transport mode: {value!r}")

    @classmethod
    def from_row(cls, value: Optional[str]) -> "Mode":
        """
        Parse a stored mode, falling back to ocean for anything unknown.

        Stored codes are matched case-insensitively but not trimmed, so a
        padded code such as " air " is unknown.
        """
        if isinstance(value, cls):
            return value
        key = str(value).lower() if value is not None else ""
        for mode in cls:
            if mode.value.lower() == key:
                return mode
        return FALLBACK_MODE

    @property
    def store_code(self) -> str:
        """Lower-case code used by the record store."""
        return self.value.lower()


FALLBACK_MODE = Mode.OCEAN


class ChargeBasis(str, Enum):
    """Unit a carrier's base rate is denominated in."""

    PER_SHIPMENT = "per_shipment"
    PER_KG = "per_kg"
    PER_LB = "per_lb"
    PER_CBM = "per_cbm"  # Volume not modelled yet


class RateType(str, Enum):
    """Commercial type of a stored rate."""

    CONTRACT = "contract"
    SPOT = "spot"


class RankingMethod(str, Enum):
    """Ranking strategies offered to callers."""

    WEIGHT_FIT = "weight_fit"
    COMPOSITE = "composite"
