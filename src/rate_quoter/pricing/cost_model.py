"""
Cost Model

Single source of truth for what a quote costs at a given shipment weight.
Both rankers price quotes through this module.

Total cost composition:
    base   = base rate converted per charge basis
    total  = base * (1 + fuel%)
    total  = total * (1 + generic%) + flat    (when surcharges are enabled)

The flat accessorial applies to ocean and air only.
"""

from typing import Optional

from ..config import Settings
from ..models.enums import ChargeBasis, Mode
from ..models.quote import Quote

KG_PER_LB = 0.45359237

# Modes that carry the flat accessorial
FLAT_ACCESSORIAL_MODES: frozenset[Mode] = frozenset({Mode.OCEAN, Mode.AIR})


class CostModel:
    """
    Prices quotes at a shipment weight.

    Configuration is fixed at construction; pricing never reads the
    environment.
    """

    def __init__(
        self,
        surcharges_enabled: bool = True,
        generic_surcharge_pct: float = 0.02,
        flat_accessorial: float = 75.0,
    ):
        """
        Initialize the cost model.

        Args:
            surcharges_enabled: Apply the generic loading and flat accessorial
            generic_surcharge_pct: Generic loading as a fraction (0.02 = 2%)
            flat_accessorial: Flat amount added for ocean/air, in quote currency
        """
        self.surcharges_enabled = surcharges_enabled
        self.generic_surcharge_pct = generic_surcharge_pct
        self.flat_accessorial = flat_accessorial

    @classmethod
    def from_settings(cls, settings: Settings) -> "CostModel":
        """Build a cost model from application settings."""
        return cls(
            surcharges_enabled=settings.SURCHARGES_ENABLED,
            generic_surcharge_pct=settings.GENERIC_SURCHARGE_PCT,
            flat_accessorial=settings.FLAT_ACCESSORIAL,
        )

    def compute_base(self, quote: Quote, weight_lbs: float) -> float:
        """
        Convert the quote's base rate per its charge basis.

        per_cbm is flat until a volume input exists; unknown bases are flat too.
        """
        base_rate = quote.components.base_rate
        basis = quote.charge_basis

        if basis == ChargeBasis.PER_LB:
            return base_rate * weight_lbs
        if basis == ChargeBasis.PER_KG:
            return base_rate * (weight_lbs * KG_PER_LB)
        return base_rate

    def flat_for(self, mode: Mode) -> float:
        """Flat accessorial owed for a mode."""
        return self.flat_accessorial if mode in FLAT_ACCESSORIAL_MODES else 0.0

    def compute_total(self, quote: Quote, weight_lbs: float, base: Optional[float] = None) -> float:
        """
        Calculate the total cost of a quote at a weight.

        Args:
            quote: The quote to price
            weight_lbs: Shipment weight in pounds
            base: Precomputed compute_base() result, if the caller has one

        Returns:
            Total in the quote's currency
        """
        if base is None:
            base = self.compute_base(quote, weight_lbs)

        fuel_factor = max(0.0, quote.fuel_pct / 100)
        total = base * (1 + fuel_factor)

        if self.surcharges_enabled:
            # Multiply first, then add the flat amount
            total = total * (1 + self.generic_surcharge_pct) + self.flat_for(quote.mode)

        return total
