"""Configuration management for the rate quoter."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.quote import ScoringWeights


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    APP_NAME: str = "Rate Quoter"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==========================================================================
    # Record Store
    # ==========================================================================
    # Unset means no store is configured; lookups then return no quotes.
    DATABASE_URL: Optional[str] = Field(default=None, description="SQLAlchemy URL of the rate store")
    RATE_QUERY_LIMIT: int = Field(default=50, ge=1)

    # ==========================================================================
    # Dispatch Layer Limits
    # ==========================================================================
    # Declared for the dispatch layer; the engine does not enforce these.
    RATE_LIMIT_PER_MINUTE: int = Field(default=120, ge=1)
    MAX_CONCURRENT_REQUESTS: int = Field(default=8, ge=1)
    CACHE_TTL_SECONDS: int = Field(default=300, ge=0)

    # ==========================================================================
    # Pricing
    # ==========================================================================
    SURCHARGES_ENABLED: bool = True
    GENERIC_SURCHARGE_PCT: float = Field(default=0.02, ge=0)  # 2% generic loading
    FLAT_ACCESSORIAL: float = Field(default=75.0, ge=0)  # ocean/air only, quote currency

    # ==========================================================================
    # Composite Scoring Defaults
    # ==========================================================================
    SCORING_WEIGHTS_COST: float = Field(default=0.35, ge=0)
    SCORING_WEIGHTS_TIME: float = Field(default=0.25, ge=0)
    SCORING_WEIGHTS_RELIABILITY: float = Field(default=0.30, ge=0)
    SCORING_WEIGHTS_RISK: float = Field(default=0.10, ge=0)

    def default_weights(self) -> ScoringWeights:
        """Get the configured composite weights as a ScoringWeights."""
        return ScoringWeights(
            cost=self.SCORING_WEIGHTS_COST,
            time=self.SCORING_WEIGHTS_TIME,
            reliability=self.SCORING_WEIGHTS_RELIABILITY,
            risk=self.SCORING_WEIGHTS_RISK,
        )

    def store_configured(self) -> bool:
        """Check if a record store connection is configured."""
        return bool(self.DATABASE_URL)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# ==========================================================================
# Scoring Tables
# ==========================================================================
# Carriers that earn the reliability bonus (exact name match)
REPUTABLE_CARRIERS: frozenset[str] = frozenset({
    "FedEx", "UPS", "DHL", "TForce", "XPO", "CH Robinson",
})

# Baseline risk per mode; lower is safer
MODE_RISK: dict[str, float] = {
    "air": 0.1,
    "parcel": 0.1,
    "LTL": 0.2,
    "FTL": 0.15,
    "ocean": 0.3,
}
DEFAULT_MODE_RISK: float = 0.2
