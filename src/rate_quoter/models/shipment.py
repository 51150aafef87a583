"""Shipment model describing what a caller wants quoted."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import Mode


class ShipmentSpec(BaseModel):
    """A shipment to be quoted: lane, weight and optional mode."""

    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    weight_lbs: float = Field(..., gt=0)
    mode: Optional[Mode] = None

    @field_validator("origin", "destination")
    @classmethod
    def strip_location(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Location must not be blank")
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value):
        """Accept modes in any letter case ("ltl", "Air", "OCEAN")."""
        if value is None or value == "":
            return None
        return Mode.parse(value)

    @property
    def lane(self) -> str:
        """Lane string (e.g., 'Ningbo -> Hamburg')."""
        return f"{self.origin} -> {self.destination}"

    def __str__(self) -> str:
        suffix = f" ({self.mode.value})" if self.mode else ""
        return f"{self.lane}{suffix}"
