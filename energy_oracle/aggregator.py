"""Cache-or-fetch access to each upstream domain, plus the blended market view.

Cache lookups happen on the event loop. Blocking HTTP calls run on worker
threads via `asyncio.to_thread`. Concurrent misses on one key share a single
in-flight fetch task, so every waiter gets the first caller's result (live or
fallback) and only one worker thread is used per key.
Only live snapshots are cached; fallback data is returned but never stored,
so the next call retries the upstream.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar

from pydantic import ValidationError

from energy_oracle.cache_store import CacheStore
from energy_oracle.data_sources import SourceClients
from energy_oracle.domain import (
    CarbonCreditSnapshot,
    CarbonMarketType,
    CertificationRecord,
    EnergyPriceSnapshot,
    EnergyType,
    MarketSnapshot,
    PriceSummary,
    Region,
    SourceTag,
    WeatherSnapshot,
    WeatherSummary,
)
from energy_oracle.errors import AggregationError
from energy_oracle.indicators import compute_indicators
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="aggregator")

T = TypeVar("T")

DEFAULT_CERTIFICATION_TTL_SECONDS = 3600
# Sao Paulo
DEFAULT_REFERENCE_COORDINATE = (-23.5505, -46.6333)


def weather_key(latitude: float, longitude: float) -> str:
    return f"weather_{latitude}_{longitude}"


def energy_key(region: Region, energy_type: EnergyType) -> str:
    return f"energy_prices_{region.value}_{energy_type.value}"


def carbon_key(market_type: CarbonMarketType) -> str:
    return f"carbon_credits_{market_type.value}"


def certification_key(certificate_id: str, issuer: str) -> str:
    return f"cert_{certificate_id}_{issuer}"


class OracleAggregator:
    """Get-or-fetch-or-fallback per domain and the composite market snapshot."""

    def __init__(
        self,
        cache: CacheStore,
        clients: SourceClients,
        *,
        certification_ttl_seconds: float = DEFAULT_CERTIFICATION_TTL_SECONDS,
        reference_coordinate: tuple[float, float] = DEFAULT_REFERENCE_COORDINATE,
    ) -> None:
        """Wire the aggregator to an injected cache and source clients."""
        self.cache = cache
        self.clients = clients
        self.certification_ttl = certification_ttl_seconds
        self.reference_coordinate = reference_coordinate
        self._inflight: Dict[str, asyncio.Task] = {}

    # -- cache plumbing ---------------------------------------------------

    def _store_if_live(self, key: str, snapshot: Any, ttl_seconds: Optional[float]) -> None:
        """Cache live snapshots; fallback data is never pinned for a TTL window."""
        if getattr(snapshot, "source_tag", None) == SourceTag.LIVE:
            self.cache.set(key, snapshot, ttl_seconds)
        else:
            logger.debug("Not caching fallback snapshot", extra={"key": key})

    def _fetch_and_store(self, key: str, fetch: Callable[[], T], ttl_seconds: Optional[float]) -> T:
        """Blocking fetch on a worker thread; stores the result if it is live."""
        snapshot = fetch()
        self._store_if_live(key, snapshot, ttl_seconds)
        return snapshot

    async def _shared_fetch(self, key: str, fetch: Callable[[], T], ttl_seconds: Optional[float]) -> T:
        """Run one fetch per key at a time; concurrent callers await the same task.

        The task is shielded so a cancelled waiter does not cancel the fetch
        the other waiters depend on.
        """
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(asyncio.to_thread(self._fetch_and_store, key, fetch, ttl_seconds))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight fetch", extra={"key": key})
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _get_or_fetch(self, key: str, fetch: Callable[[], T], ttl_seconds: Optional[float] = None) -> T:
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Served from cache", extra={"key": key})
            return cached
        return await self._shared_fetch(key, fetch, ttl_seconds)

    async def refresh(self, key: str, fetch: Callable[[], T], ttl_seconds: Optional[float] = None) -> T:
        """Fetch regardless of cache freshness and overwrite the entry if live.

        A fetch already in flight for `key` is joined rather than duplicated.
        """
        return await self._shared_fetch(key, fetch, ttl_seconds)

    # -- single-domain getters --------------------------------------------

    async def get_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Current weather for a coordinate (5 minute cache)."""
        return await self._get_or_fetch(
            weather_key(latitude, longitude),
            lambda: self.clients.weather.fetch(latitude, longitude),
        )

    async def get_energy_prices(
        self,
        region: Region = Region.BR,
        energy_type: EnergyType = EnergyType.RENEWABLE,
    ) -> EnergyPriceSnapshot:
        """Spot price for a region and generation mix (5 minute cache)."""
        return await self._get_or_fetch(
            energy_key(region, energy_type),
            lambda: self.clients.energy.fetch(region, energy_type),
        )

    async def get_carbon_credits(
        self,
        market_type: CarbonMarketType = CarbonMarketType.VOLUNTARY,
    ) -> CarbonCreditSnapshot:
        """Carbon-credit quote for a market segment (5 minute cache)."""
        return await self._get_or_fetch(
            carbon_key(market_type),
            lambda: self.clients.carbon.fetch(market_type),
        )

    async def verify_certification(self, certificate_id: str, issuer: str) -> CertificationRecord:
        """Certificate status (1 hour cache; registry data changes slowly)."""
        return await self._get_or_fetch(
            certification_key(certificate_id, issuer),
            lambda: self.clients.certification.fetch(certificate_id, issuer),
            self.certification_ttl,
        )

    # -- composite --------------------------------------------------------

    async def get_market_snapshot(self, region: Region = Region.GLOBAL) -> MarketSnapshot:
        """Fan out to weather, energy and carbon concurrently and blend the results.

        Raises AggregationError if a snapshot cannot be blended. Upstream
        outages never raise here; they surface as Mock-tagged inputs.
        """
        latitude, longitude = self.reference_coordinate
        weather, energy, carbon = await asyncio.gather(
            self.get_weather(latitude, longitude),
            self.get_energy_prices(region, EnergyType.RENEWABLE),
            self.get_carbon_credits(CarbonMarketType.VOLUNTARY),
        )

        try:
            snapshot = MarketSnapshot(
                region=region,
                weather=WeatherSummary(
                    temperature=weather.temperature,
                    condition=weather.condition,
                    wind_speed=weather.wind_speed,
                    cloud_cover=weather.cloud_cover,
                ),
                energy=PriceSummary(
                    price=energy.current_price,
                    currency=energy.currency,
                    change_24h=energy.price_change_percent,
                ),
                carbon=PriceSummary(
                    price=carbon.current_price,
                    currency=carbon.currency,
                    change_24h=carbon.price_change_24h,
                ),
                indicators=compute_indicators(weather, energy, carbon),
                timestamp=datetime.now(timezone.utc),
            )
        except AggregationError as exc:
            logger.error("Failed to blend market data", extra={"region": region.value, "error": exc.message})
            raise
        except (ValidationError, AttributeError, TypeError) as exc:
            logger.error("Failed to blend market data", extra={"region": region.value, "error": str(exc)})
            raise AggregationError(f"Failed to build market snapshot: {exc}") from exc

        logger.info(
            "Market snapshot computed",
            extra={
                "region": region.value,
                "renewable_index": snapshot.indicators.renewable_index,
                "sustainability_score": snapshot.indicators.sustainability_score,
            },
        )
        return snapshot

    # -- maintenance ------------------------------------------------------

    def clear_cache(self) -> None:
        """Invalidate every cached snapshot."""
        self.cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        """Size and keys of the live cache entries."""
        entries = self.cache.keys()
        return {"size": len(entries), "entries": entries}
