"""SQL record store for carriers and contract rates."""

import asyncio
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from sqlalchemy import (
    create_engine,
    or_,
    Column,
    String,
    Float,
    Boolean,
    DateTime,
    Text,
    Index,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from ..config import get_settings
from ..models.enums import ChargeBasis, Mode, RateType

Base = declarative_base()

# Mode codes the store accepts; wider than the quoting modes
STORE_MODES = ("parcel", "ltl", "ftl", "air", "ocean", "rail", "intermodal")

# Columns every rate lookup returns
RATE_COLUMNS = (
    "origin",
    "destination",
    "mode",
    "carrier_id",
    "carrier_name",
    "min_weight",
    "max_weight",
    "base_rate",
    "charge_basis",
    "fuel_surcharge",
    "currency",
    "transit_days",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# SQLAlchemy Models (Database Tables)
# =============================================================================

class CarrierRecord(Base):
    """SQLAlchemy model for carriers table."""

    __tablename__ = "carriers"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(20))
    mode = Column(String(20))
    country = Column(String(2))
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class RateRecord(Base):
    """SQLAlchemy model for rates table."""

    __tablename__ = "rates"

    id = Column(String(36), primary_key=True, default=_new_id)
    carrier_id = Column(String(36), nullable=False, index=True)

    # Lane
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    mode = Column(String(20), nullable=False, index=True)  # lower-case store code
    rate_type = Column(String(20), nullable=False, default=RateType.CONTRACT.value)

    # Pricing
    base_rate = Column(Float, nullable=False)
    charge_basis = Column(String(20), default=ChargeBasis.PER_SHIPMENT.value)
    fuel_surcharge = Column(Float, default=0.0)  # Percentage points
    accessorials = Column(Text)  # JSON object, not priced
    currency = Column(String(3), default="EUR")

    # Validity window
    valid_from = Column(DateTime, nullable=False)
    valid_to = Column(DateTime, nullable=False)

    # Service
    transit_days = Column(Text)  # Free text in carrier sheets
    min_weight = Column(Float)
    max_weight = Column(Float)
    contract_number = Column(String(100))
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_rates_validity", "valid_from", "valid_to"),
    )


# =============================================================================
# Repository Class
# =============================================================================

class RateRepository:
    """Repository for carrier and rate lookups."""

    def __init__(self, database_url: str, echo: bool = False, query_limit: int = 50):
        self.database_url = database_url
        self.query_limit = query_limit

        # Ensure data directory exists
        if self.database_url.startswith("sqlite:///"):
            db_path = Path(self.database_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            self.database_url,
            echo=echo,
            connect_args={"check_same_thread": False} if "sqlite" in self.database_url else {},
        )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def init_db(self) -> None:
        """Create all tables."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    # =========================================================================
    # Carrier Operations
    # =========================================================================

    def add_carrier(
        self,
        name: str,
        code: Optional[str] = None,
        mode: Optional[str] = None,
        country: Optional[str] = None,
        is_active: bool = True,
        carrier_id: Optional[str] = None,
    ) -> str:
        """Insert a carrier and return its id."""
        with self.get_session() as session:
            record = CarrierRecord(
                id=carrier_id or _new_id(),
                name=name,
                code=code,
                mode=mode,
                country=country,
                is_active=is_active,
            )
            session.add(record)
            session.commit()
            return record.id

    # =========================================================================
    # Rate Operations
    # =========================================================================

    def add_rate(
        self,
        carrier_id: str,
        origin: str,
        destination: str,
        mode: Union[Mode, str],
        base_rate: float,
        valid_from: datetime,
        valid_to: datetime,
        rate_type: str = RateType.CONTRACT.value,
        charge_basis: str = ChargeBasis.PER_SHIPMENT.value,
        fuel_surcharge: float = 0.0,
        currency: str = "EUR",
        transit_days: Optional[Union[int, str]] = None,
        min_weight: Optional[float] = None,
        max_weight: Optional[float] = None,
        contract_number: Optional[str] = None,
        is_active: Optional[bool] = True,
        rate_id: Optional[str] = None,
    ) -> str:
        """Insert a rate and return its id."""
        mode_code = _mode_code(mode)
        if mode_code not in STORE_MODES:
            raise ValueError(f"Unsupported store mode: {mode!r}")

        with self.get_session() as session:
            record = RateRecord(
                id=rate_id or _new_id(),
                carrier_id=carrier_id,
                origin=origin,
                destination=destination,
                mode=mode_code,
                rate_type=rate_type,
                base_rate=base_rate,
                charge_basis=charge_basis,
                fuel_surcharge=fuel_surcharge,
                currency=currency,
                valid_from=valid_from,
                valid_to=valid_to,
                transit_days=None if transit_days is None else str(transit_days),
                min_weight=min_weight,
                max_weight=max_weight,
                contract_number=contract_number,
                is_active=is_active,
            )
            session.add(record)
            session.commit()
            return record.id

    def find_rates(
        self,
        origin: str,
        destination: str,
        mode: Optional[Union[Mode, str]] = None,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[dict[str, Any]]:
        """
        Find rates valid now on a lane.

        Origin and destination match as case-insensitive substrings. Rates
        must be active (or unflagged) and inside their validity window.

        Args:
            origin: Origin substring
            destination: Destination substring
            mode: Exact mode to match, if any
            limit: Maximum rows (defaults to the repository limit)
            now: Reference time for the validity window

        Returns:
            Row dicts with the RATE_COLUMNS keys
        """
        now = now or _utcnow()
        with self.get_session() as session:
            query = (
                session.query(
                    RateRecord.origin,
                    RateRecord.destination,
                    RateRecord.mode,
                    RateRecord.carrier_id,
                    CarrierRecord.name.label("carrier_name"),
                    RateRecord.min_weight,
                    RateRecord.max_weight,
                    RateRecord.base_rate,
                    RateRecord.charge_basis,
                    RateRecord.fuel_surcharge,
                    RateRecord.currency,
                    RateRecord.transit_days,
                )
                .outerjoin(CarrierRecord, CarrierRecord.id == RateRecord.carrier_id)
                .filter(
                    RateRecord.origin.icontains(origin.strip(), autoescape=True),
                    RateRecord.destination.icontains(destination.strip(), autoescape=True),
                    RateRecord.valid_from <= now,
                    RateRecord.valid_to >= now,
                    or_(RateRecord.is_active.is_(True), RateRecord.is_active.is_(None)),
                )
            )

            if mode:
                query = query.filter(RateRecord.mode == _mode_code(mode))

            rows = query.limit(limit or self.query_limit).all()
            return [dict(row._mapping) for row in rows]

    async def query_rates(
        self,
        origin: str,
        destination: str,
        mode: Optional[Mode] = None,
    ) -> list[dict[str, Any]]:
        """Run find_rates off the event loop."""
        return await asyncio.to_thread(self.find_rates, origin, destination, mode)

    def get_stats(self) -> dict:
        """Get row counts for the store."""
        now = _utcnow()
        with self.get_session() as session:
            return {
                "carriers": session.query(CarrierRecord).count(),
                "rates": {
                    "total": session.query(RateRecord).count(),
                    "valid_now": session.query(RateRecord).filter(
                        RateRecord.valid_from <= now,
                        RateRecord.valid_to >= now,
                    ).count(),
                },
            }


def _mode_code(mode: Union[Mode, str]) -> str:
    if isinstance(mode, Mode):
        return mode.store_code
    return str(mode).strip().lower()


@lru_cache
def get_repository() -> RateRepository:
    """Get cached repository for the configured DATABASE_URL."""
    settings = get_settings()
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured")
    return RateRepository(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        query_limit=settings.RATE_QUERY_LIMIT,
    )
