"""Quote models: priced carrier offers and their scored counterparts."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import ChargeBasis, Mode


class RateComponents(BaseModel):
    """Monetary components of a carrier rate."""

    model_config = ConfigDict(frozen=True)

    base_rate: float = Field(default=0.0, ge=0)
    rate_per_lb: float = Field(default=0.0, ge=0)


class Quote(BaseModel):
    """
    A priced carrier offer for a lane.

    Built fresh by each normalization pass and never mutated afterwards.
    Weight bounds are inclusive; a missing bound is unbounded on that side.
    """

    model_config = ConfigDict(frozen=True)

    # Carrier
    carrier_id: str = Field(..., min_length=1)
    carrier_name: Optional[str] = None

    # Lane
    mode: Mode
    origin: str
    destination: str

    # Weight bracket
    min_weight_lbs: Optional[float] = None
    max_weight_lbs: Optional[float] = None

    # Pricing
    components: RateComponents = Field(default_factory=RateComponents)
    transit_days: Optional[int] = Field(default=None, gt=0)
    charge_basis: str = ChargeBasis.PER_SHIPMENT.value
    fuel_pct: float = 0.0  # Percentage points
    currency: str = "EUR"

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value):
        return Mode.from_row(value)

    @field_validator("charge_basis", mode="before")
    @classmethod
    def default_charge_basis(cls, value):
        if isinstance(value, ChargeBasis):
            return value.value
        return value or ChargeBasis.PER_SHIPMENT.value

    @model_validator(mode="after")
    def check_bracket(self) -> "Quote":
        if (
            self.min_weight_lbs is not None
            and self.max_weight_lbs is not None
            and self.min_weight_lbs > self.max_weight_lbs
        ):
            raise ValueError(
                f"min_weight_lbs {self.min_weight_lbs} exceeds max_weight_lbs {self.max_weight_lbs}"
            )
        return self

    def fits_weight(self, weight_lbs: float) -> bool:
        """Check if a shipment weight lies inside the quote's bracket."""
        if self.min_weight_lbs is not None and weight_lbs < self.min_weight_lbs:
            return False
        if self.max_weight_lbs is not None and weight_lbs > self.max_weight_lbs:
            return False
        return True

    @property
    def display_name(self) -> str:
        """Carrier name, or the carrier id when no name is known."""
        return self.carrier_name or self.carrier_id


class ScoringWeights(BaseModel):
    """Resolved composite weights for cost, time, reliability and risk."""

    model_config = ConfigDict(frozen=True)

    cost: float = Field(default=0.35, ge=0)
    time: float = Field(default=0.25, ge=0)
    reliability: float = Field(default=0.30, ge=0)
    risk: float = Field(default=0.10, ge=0)

    @property
    def total(self) -> float:
        return self.cost + self.time + self.reliability + self.risk

    def normalized(self) -> "ScoringWeights":
        """Scale the weights so the four sum to 1."""
        total = self.total
        return ScoringWeights(
            cost=self.cost / total,
            time=self.time / total,
            reliability=self.reliability / total,
            risk=self.risk / total,
        )


class PolicyWeights(BaseModel):
    """Caller overrides for composite weights; unset fields keep their default."""

    cost: Optional[float] = Field(default=None, ge=0)
    time: Optional[float] = Field(default=None, ge=0)
    reliability: Optional[float] = Field(default=None, ge=0)
    risk: Optional[float] = Field(default=None, ge=0)


class ScoringPolicy(BaseModel):
    """
    Optional caller policy for composite ranking.

    max_transit_days and preferred_carriers are accepted and carried through
    but not yet enforced: the composite scorer does not filter on them.
    """

    weights: Optional[PolicyWeights] = None
    max_transit_days: Optional[int] = Field(default=None, gt=0)
    preferred_carriers: list[str] = Field(default_factory=list)


class ScoreBreakdown(BaseModel):
    """Sub-computations that produced a quote's score."""

    model_config = ConfigDict(frozen=True)

    total_cost_usd: float
    cost_per_lb_usd: float
    weight_fit_penalty: float  # 0.15 outside the bracket, else 0

    # Pricing extras
    currency: Optional[str] = None
    base_amount: Optional[float] = None
    fuel_pct_applied: Optional[float] = None

    # Composite sub-scores, 0..1 where higher is better
    cost_score: Optional[float] = None
    time_score: Optional[float] = None
    reliability_score: Optional[float] = None
    risk_score: Optional[float] = None
    composite_score: Optional[float] = None
    weights: Optional[ScoringWeights] = None


class ScoredQuote(Quote):
    """A quote with its ranking score and breakdown."""

    score: float
    breakdown: ScoreBreakdown

    @classmethod
    def from_quote(cls, quote: Quote, score: float, breakdown: ScoreBreakdown) -> "ScoredQuote":
        """Build a new scored quote from a copy of the quote's fields."""
        fields = quote.model_dump(exclude={"score", "breakdown"})
        return cls(**fields, score=score, breakdown=breakdown)
