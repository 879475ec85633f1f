"""HTTP API exposing the oracle operations as JSON."""

import uuid
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from .domain import (
    SUPPORTED_REGIONS,
    CarbonCreditSnapshot,
    CarbonMarketType,
    CertificationRecord,
    EnergyPriceSnapshot,
    EnergyType,
    MarketSnapshot,
    RefreshResult,
    Region,
    WeatherSnapshot,
)
from .service import OracleService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Standard success wrapper: payload plus request metadata."""
    success: bool = True
    data: T
    metadata: dict[str, Any] = Field(default_factory=dict)


class MessageResponse(BaseModel):
    """Success wrapper for operations without a payload."""
    success: bool = True
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict)


def get_oracle(request: Request) -> OracleService:
    """Return the OracleService built at application startup."""
    return request.app.state.oracle


def _metadata(**extra: Any) -> dict[str, Any]:
    """Per-response metadata: a request id and a timestamp."""
    return {
        "requestId": str(uuid.uuid4()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **extra,
    }


router = APIRouter()


@router.get("/weather", response_model=Envelope[WeatherSnapshot])
async def get_weather(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    oracle: OracleService = Depends(get_oracle),
):
    """Current weather for a coordinate."""
    logger.info("Weather requested", extra={"latitude": latitude, "longitude": longitude})
    weather = await oracle.aggregator.get_weather(latitude, longitude)
    return Envelope[WeatherSnapshot](data=weather, metadata=_metadata(sourceTag=weather.source_tag.value))


@router.get("/energy-prices", response_model=Envelope[EnergyPriceSnapshot])
async def get_energy_prices(
    region: Region = Region.BR,
    energy_type: EnergyType = Query(EnergyType.RENEWABLE, alias="type"),
    oracle: OracleService = Depends(get_oracle),
):
    """Spot energy price for a region and generation mix."""
    logger.info("Energy prices requested", extra={"region": region.value, "energy_type": energy_type.value})
    prices = await oracle.aggregator.get_energy_prices(region, energy_type)
    return Envelope[EnergyPriceSnapshot](data=prices, metadata=_metadata(sourceTag=prices.source_tag.value))


@router.get("/carbon-credits", response_model=Envelope[CarbonCreditSnapshot])
async def get_carbon_credits(
    market: CarbonMarketType = CarbonMarketType.VOLUNTARY,
    oracle: OracleService = Depends(get_oracle),
):
    """Carbon-credit quote for a market segment."""
    logger.info("Carbon credits requested", extra={"market": market.value})
    credits = await oracle.aggregator.get_carbon_credits(market)
    return Envelope[CarbonCreditSnapshot](data=credits, metadata=_metadata(sourceTag=credits.source_tag.value))


@router.get("/verify-certification", response_model=Envelope[CertificationRecord])
async def verify_certification(
    certificate_id: str = Query(alias="certificateId", min_length=5, max_length=50),
    issuer: str = Query(min_length=1),
    oracle: OracleService = Depends(get_oracle),
):
    """Registry status of a renewable-energy certificate."""
    logger.info("Certification check requested", extra={"certificate_id": certificate_id, "issuer": issuer})
    record = await oracle.aggregator.verify_certification(certificate_id, issuer)
    return Envelope[CertificationRecord](data=record, metadata=_metadata(sourceTag=record.source_tag.value))


@router.get("/market-data", response_model=Envelope[MarketSnapshot])
async def get_market_data(
    region: Region = Region.GLOBAL,
    oracle: OracleService = Depends(get_oracle),
):
    """Blended market view with composite indicators."""
    logger.info("Market data requested", extra={"region": region.value})
    snapshot = await oracle.aggregator.get_market_snapshot(region)
    return Envelope[MarketSnapshot](data=snapshot, metadata=_metadata())


@router.post("/update", response_model=Envelope[RefreshResult])
async def force_update(oracle: OracleService = Depends(get_oracle)):
    """Re-fetch weather, energy and carbon data regardless of cache state."""
    logger.info("Forced update requested")
    result = await oracle.refresher.update_all()
    return Envelope[RefreshResult](
        data=result,
        metadata=_metadata(updateCount=result.update_count, errorCount=len(result.errors)),
    )


@router.delete("/cache", response_model=MessageResponse)
def clear_cache(oracle: OracleService = Depends(get_oracle)):
    """Invalidate every cached snapshot."""
    logger.info("Cache clear requested")
    oracle.aggregator.clear_cache()
    return MessageResponse(message="Oracle cache cleared", metadata=_metadata())


@router.get("/status")
def get_status(oracle: OracleService = Depends(get_oracle)):
    """Cache contents and upstream configuration."""
    return {"success": True, "data": oracle.status(), "metadata": _metadata()}


@router.get("/supported-regions")
def get_supported_regions():
    """Static catalogue of regions, energy types and carbon markets."""
    return {
        "success": True,
        "data": {
            "regions": [region.model_dump(mode="json", by_alias=True) for region in SUPPORTED_REGIONS],
            "total": len(SUPPORTED_REGIONS),
            "defaultRegion": Region.BR.value,
            "defaultEnergyType": EnergyType.RENEWABLE.value,
            "defaultCarbonMarket": CarbonMarketType.VOLUNTARY.value,
        },
        "metadata": _metadata(),
    }
