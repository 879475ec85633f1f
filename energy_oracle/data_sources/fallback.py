"""Synthetic snapshots served when an upstream source is unavailable.

Every generator returns the same schema as the live client, tagged
`SourceTag.MOCK`, with values drawn from fixed plausible ranges. Generators
never touch the network and never raise. Pass a seeded `random.Random` and a
fixed `now` to make the output reproducible.
"""

from __future__ import annotations

import random
import string
from datetime import datetime, timedelta, timezone
from typing import Optional

from energy_oracle.domain import (
    CarbonCreditSnapshot,
    CarbonMarketType,
    CertificationRecord,
    CertificationStatus,
    EnergyPriceSnapshot,
    EnergyType,
    Region,
    SourceTag,
    WeatherCondition,
    WeatherSnapshot,
)

RENEWABLE_BASE_PRICE = 0.12
CONVENTIONAL_BASE_PRICE = 0.15
ENERGY_PRICE_SPREAD = 0.04
CARBON_BASE_PRICE = 25.50
CARBON_PRICE_SPREAD = 5.0
MOCK_TOP_PROJECTS = ("Forest Conservation", "Solar Farm", "Wind Energy")
MOCK_ENERGY_SOURCES = ("solar", "wind", "hydro")
CERTIFICATE_VALID_PROBABILITY = 0.9
_HASH_ALPHABET = string.digits + string.ascii_lowercase


def _resolve(rng: Optional[random.Random], now: Optional[datetime]) -> tuple[random.Random, datetime]:
    """Default to a freshly seeded RNG and the current UTC time."""
    return rng or random.Random(), now or datetime.now(timezone.utc)


def _centered(rng: random.Random, spread: float) -> float:
    """Uniform draw in [-spread/2, spread/2)."""
    return (rng.random() - 0.5) * spread


def mock_weather(
    latitude: float,
    longitude: float,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> WeatherSnapshot:
    """Random weather; the coordinate only identifies the request."""
    rng, now = _resolve(rng, now)
    condition = rng.choice(list(WeatherCondition))
    return WeatherSnapshot(
        temperature=round(rng.random() * 30 + 10, 2),
        humidity=round(rng.random() * 100),
        pressure=round(rng.random() * 100 + 1000, 2),
        wind_speed=round(rng.random() * 20, 2),
        wind_direction=round(rng.random() * 360),
        cloud_cover=round(rng.random() * 100),
        visibility=round(rng.random() * 10000 + 1000),
        uv_index=round(rng.random() * 11),
        condition=condition,
        description=condition.value.lower(),
        sunrise=now - timedelta(hours=6),
        sunset=now + timedelta(hours=6),
        timestamp=now,
        source_tag=SourceTag.MOCK,
    )


def mock_energy_prices(
    region: Region,
    energy_type: EnergyType,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> EnergyPriceSnapshot:
    """Price around 0.12 (renewable) or 0.15 (other mixes), +/- 0.02 per kWh."""
    rng, now = _resolve(rng, now)
    base_price = RENEWABLE_BASE_PRICE if energy_type == EnergyType.RENEWABLE else CONVENTIONAL_BASE_PRICE
    variation = _centered(rng, ENERGY_PRICE_SPREAD)
    return EnergyPriceSnapshot(
        region=region,
        energy_type=energy_type,
        current_price=round(base_price + variation, 4),
        currency="USD",
        price_change_24h=round(_centered(rng, 0.02), 4),
        price_change_percent=round(_centered(rng, 10), 2),
        market_cap=round(rng.random() * 1_000_000_000),
        volume_24h=round(rng.random() * 10_000_000),
        high_24h=round(base_price + abs(variation) + 0.01, 4),
        low_24h=round(base_price - abs(variation) - 0.01, 4),
        timestamp=now,
        source_tag=SourceTag.MOCK,
    )


def mock_carbon_credits(
    market_type: CarbonMarketType,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> CarbonCreditSnapshot:
    """Price around 25.50 per tCO2, +/- 2.50."""
    rng, now = _resolve(rng, now)
    return CarbonCreditSnapshot(
        market_type=market_type,
        current_price=round(CARBON_BASE_PRICE + _centered(rng, CARBON_PRICE_SPREAD), 2),
        currency="USD",
        price_change_24h=round(_centered(rng, 2), 2),
        volume=round(rng.random() * 1_000_000),
        market_cap=round(rng.random() * 100_000_000),
        available_credits=round(rng.random() * 10_000_000),
        retired_credits=round(rng.random() * 5_000_000),
        average_vintage=now.year - rng.randrange(5),
        top_projects=list(MOCK_TOP_PROJECTS),
        timestamp=now,
        source_tag=SourceTag.MOCK,
    )


def mock_certification(
    certificate_id: str,
    issuer: str,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> CertificationRecord:
    """Certificate that is valid (and active) nine times out of ten."""
    rng, now = _resolve(rng, now)
    is_valid = rng.random() < CERTIFICATE_VALID_PROBABILITY
    year = timedelta(days=365)
    return CertificationRecord(
        certificate_id=certificate_id,
        issuer=issuer,
        is_valid=is_valid,
        status=CertificationStatus.ACTIVE if is_valid else CertificationStatus.EXPIRED,
        issued_date=now - year * rng.random(),
        expiry_date=now + year * rng.random(),
        energy_source=rng.choice(MOCK_ENERGY_SOURCES),
        capacity=round(rng.random() * 5000 + 100),
        location="Mock Location",
        owner="Mock Owner",
        verification_hash="".join(rng.choice(_HASH_ALPHABET) for _ in range(13)),
        last_updated=now,
        timestamp=now,
        source_tag=SourceTag.MOCK,
    )
