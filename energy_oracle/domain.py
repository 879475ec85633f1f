"""Domain vocabulary and immutable snapshot schemas served by the oracle.

Snapshots are frozen pydantic models. Python code uses snake_case field names;
JSON output uses camelCase aliases (`windSpeed`, `priceChange24h`, `sourceTag`)
so the wire shape matches what existing consumers already parse.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase, keeping digit runs lower-case (24h)."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class _SnapshotModel(BaseModel):
    """Base model for immutable, camelCase-serialized payloads."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class SourceTag(str, Enum):
    """Provenance of a snapshot."""
    LIVE = "Live"
    MOCK = "Mock"


class WeatherCondition(str, Enum):
    """Coarse sky condition."""
    CLEAR = "Clear"
    CLOUDS = "Clouds"
    RAIN = "Rain"
    SNOW = "Snow"
    MIST = "Mist"


class Region(str, Enum):
    """Energy-market regions."""
    BR = "BR"
    US = "US"
    EU = "EU"
    GLOBAL = "global"


class EnergyType(str, Enum):
    """Generation mix a price quote refers to."""
    RENEWABLE = "renewable"
    CONVENTIONAL = "conventional"
    MIXED = "mixed"


class CarbonMarketType(str, Enum):
    """Carbon-credit market segment."""
    VOLUNTARY = "voluntary"
    COMPLIANCE = "compliance"
    OFFSET = "offset"


class CertificationStatus(str, Enum):
    """Registry status of a renewable-energy certificate."""
    ACTIVE = "active"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class WeatherSnapshot(_SnapshotModel):
    """Current weather at a coordinate."""
    temperature: float  # °C
    humidity: float  # %
    pressure: float  # hPa
    wind_speed: float
    wind_direction: float  # degrees
    cloud_cover: float  # %
    visibility: float  # metres
    uv_index: float
    condition: WeatherCondition
    description: str
    sunrise: datetime
    sunset: datetime
    timestamp: datetime
    source_tag: SourceTag


class EnergyPriceSnapshot(_SnapshotModel):
    """Spot energy price for a region and generation mix."""
    region: Region
    energy_type: EnergyType
    current_price: float  # currency / kWh
    currency: str
    price_change_24h: float
    price_change_percent: float
    market_cap: float
    volume_24h: float
    high_24h: float
    low_24h: float
    timestamp: datetime
    source_tag: SourceTag


class CarbonCreditSnapshot(_SnapshotModel):
    """Carbon-credit market quote."""
    market_type: CarbonMarketType
    current_price: float  # currency / tCO2
    currency: str
    price_change_24h: float
    volume: float
    market_cap: float
    available_credits: float
    retired_credits: float
    average_vintage: int
    top_projects: List[str] = Field(default_factory=list)
    timestamp: datetime
    source_tag: SourceTag


class CertificationRecord(_SnapshotModel):
    """Verification result for a renewable-energy certificate."""
    certificate_id: str
    issuer: str
    is_valid: bool
    status: CertificationStatus
    issued_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    energy_source: Optional[str] = None
    capacity: Optional[float] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    verification_hash: Optional[str] = None
    last_updated: Optional[datetime] = None
    timestamp: datetime
    source_tag: SourceTag


class WeatherSummary(_SnapshotModel):
    """Weather fields carried into a market snapshot."""
    temperature: float
    condition: WeatherCondition
    wind_speed: float
    cloud_cover: float


class PriceSummary(_SnapshotModel):
    """Price fields carried into a market snapshot."""
    price: float
    currency: str
    change_24h: float


class MarketIndicators(_SnapshotModel):
    """Composite indicators blended from weather, energy and carbon data."""
    renewable_index: int = Field(ge=0, le=100)
    carbon_intensity: int = Field(ge=0)
    sustainability_score: int = Field(ge=0, le=100)


class MarketSnapshot(_SnapshotModel):
    """Derived market view. Recomputed on every request, never cached."""
    region: Region
    weather: WeatherSummary
    energy: PriceSummary
    carbon: PriceSummary
    indicators: MarketIndicators
    timestamp: datetime


class RefreshResult(_SnapshotModel):
    """Outcome of a forced refresh. Each None field has one matching error."""
    weather: Optional[WeatherSnapshot] = None
    energy: Optional[EnergyPriceSnapshot] = None
    carbon: Optional[CarbonCreditSnapshot] = None
    errors: List[str] = Field(default_factory=list)
    timestamp: datetime

    @property
    def update_count(self) -> int:
        """Number of domains that produced a snapshot."""
        return sum(1 for item in (self.weather, self.energy, self.carbon) if item is not None)


class RegionInfo(_SnapshotModel):
    """Static catalogue entry for a supported region."""
    code: Region
    name: str
    currency: str
    energy_types: List[EnergyType]
    carbon_markets: List[CarbonMarketType]


SUPPORTED_REGIONS: List[RegionInfo] = [
    RegionInfo(
        code=Region.BR,
        name="Brazil",
        currency="BRL",
        energy_types=list(EnergyType),
        carbon_markets=[CarbonMarketType.VOLUNTARY, CarbonMarketType.COMPLIANCE],
    ),
    RegionInfo(
        code=Region.US,
        name="United States",
        currency="USD",
        energy_types=list(EnergyType),
        carbon_markets=list(CarbonMarketType),
    ),
    RegionInfo(
        code=Region.EU,
        name="European Union",
        currency="EUR",
        energy_types=list(EnergyType),
        carbon_markets=[CarbonMarketType.COMPLIANCE, CarbonMarketType.VOLUNTARY],
    ),
    RegionInfo(
        code=Region.GLOBAL,
        name="Global",
        currency="USD",
        energy_types=list(EnergyType),
        carbon_markets=list(CarbonMarketType),
    ),
]
