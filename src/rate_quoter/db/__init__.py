"""Record store for the rate quoter."""

from .repository import RateRepository, get_repository, RATE_COLUMNS

__all__ = [
    "RateRepository",
    "get_repository",
    "RATE_COLUMNS",
]
