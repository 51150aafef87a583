"""
Rate Quoter FastAPI Server

RESTful API exposing rate lookup and quote ranking to external callers.

USAGE:
    Local: rate-quoter serve (runs on http://localhost:8000)
    Docs: http://localhost:8000/docs (Swagger UI)
    OpenAPI: http://localhost:8000/openapi.json
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from .config import get_settings
from .formatting import rates_found_message, ranked_message
from .models import Quote, RankingMethod, ScoredQuote, ScoringPolicy, ShipmentSpec
from .service import RateQuoterService, get_service

settings = get_settings()

# Bounds concurrent store lookups across requests
_lookup_slots = asyncio.Semaphore(settings.MAX_CONCURRENT_REQUESTS)


# =============================================================================
# API Models (Request/Response Schemas)
# =============================================================================

class RatesRequest(ShipmentSpec):
    """Request to look up rates for a shipment"""


class TopRatesRequest(ShipmentSpec):
    """Request to look up and rank rates for a shipment"""
    limit: int = Field(default=3, ge=1, le=20, description="Number of quotes to return")
    method: RankingMethod = Field(default=RankingMethod.WEIGHT_FIT, description="Ranking method")
    policy: Optional[ScoringPolicy] = Field(default=None, description="Composite weights")


class ScoreRequest(BaseModel):
    """Request to rank caller-supplied quotes"""
    weight_lbs: float = Field(..., gt=0, description="Shipment weight in pounds")
    quotes: List[Quote] = Field(..., min_length=1, description="Quotes to rank")
    limit: int = Field(default=3, ge=1, le=50, description="Number of quotes to return")
    method: RankingMethod = Field(default=RankingMethod.WEIGHT_FIT, description="Ranking method")
    policy: Optional[ScoringPolicy] = Field(default=None, description="Composite weights")


class RatesResponse(BaseModel):
    """Response from a rate lookup"""
    success: bool
    count: int
    quotes: List[Quote]
    message: str


class RankedResponse(BaseModel):
    """Ranked quotes, best first"""
    success: bool
    count: int
    method: RankingMethod
    quotes: List[ScoredQuote]
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    store_configured: bool
    store_reachable: bool
    message: str


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Rate Quoter API",
    description=(
        "Freight rate quoting API\n\n"
        "- Look up carrier rates for a lane\n"
        "- Rank quotes by weight-adjusted cost\n"
        "- Rank quotes by composite cost/time/reliability/risk score"
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


async def _fetch(service: RateQuoterService, shipment: ShipmentSpec) -> list[Quote]:
    async with _lookup_slots:
        return await service.fetch_and_normalize(shipment)


# =============================================================================
# Health & Status Endpoints
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(service: RateQuoterService = Depends(get_service)):
    """
    Health check endpoint for monitoring and load balancers.

    Probes the record store with a lane that matches nothing.
    """
    report = await service.health()
    return HealthResponse(
        status=report.status,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        store_configured=report.store_configured,
        store_reachable=report.store_reachable,
        message=report.summary,
    )


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": "Rate Quoter API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "endpoints": {
            "rates": "POST /v1/rates",
            "top_rates": "POST /v1/rates/top",
            "score": "POST /v1/quotes/score",
        },
    }


# =============================================================================
# Quoting Endpoints
# =============================================================================

@app.post("/v1/rates", response_model=RatesResponse, tags=["Rates"])
async def get_rates(request: RatesRequest, service: RateQuoterService = Depends(get_service)):
    """
    Look up rates for a lane and optional mode.

    Example:
        ```json
        {"origin": "Ningbo", "destination": "Hamburg", "weight_lbs": 2000, "mode": "ocean"}
        ```
    """
    try:
        quotes = await _fetch(service, request)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Rate lookup failed: {str(e)}")

    return RatesResponse(
        success=True,
        count=len(quotes),
        quotes=quotes,
        message=rates_found_message(request, len(quotes)),
    )


@app.post("/v1/rates/top", response_model=RankedResponse, tags=["Rates"])
async def get_top_rates(request: TopRatesRequest, service: RateQuoterService = Depends(get_service)):
    """
    Look up rates for a lane and return the best options.

    Weight-fit ranking orders by effective cost; composite ranking blends
    cost, transit time, reliability and mode risk.
    """
    try:
        quotes = await _fetch(service, request)
        ranked = service.rank(quotes, request.weight_lbs, request.method, request.policy)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Ranking failed: {str(e)}")

    top = ranked[:request.limit]
    title = f"for {request.lane} at {request.weight_lbs:g} lbs"
    return RankedResponse(
        success=True,
        count=len(top),
        method=request.method,
        quotes=top,
        message=ranked_message(title, top),
    )


@app.post("/v1/quotes/score", response_model=RankedResponse, tags=["Quotes"])
async def score_quotes(request: ScoreRequest, service: RateQuoterService = Depends(get_service)):
    """
    Rank caller-supplied quotes without a store lookup.

    Unknown quote modes are scored as ocean.
    """
    try:
        ranked = service.rank(request.quotes, request.weight_lbs, request.method, request.policy)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Scoring failed: {str(e)}")

    top = ranked[:request.limit]
    title = f"options by {request.method.value} for {request.weight_lbs:g} lbs"
    return RankedResponse(
        success=True,
        count=len(top),
        method=request.method,
        quotes=top,
        message=ranked_message(title, top),
    )
