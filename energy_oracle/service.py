"""Process-level wiring: one cache, four clients, the aggregator and the refresher.

Build one `OracleService` at startup and close it at shutdown. Tests build
their own isolated instances with fake clients and clocks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from energy_oracle import config
from energy_oracle.aggregator import OracleAggregator
from energy_oracle.cache_store import CacheStore, InMemoryCacheStore
from energy_oracle.data_sources import SourceClients, build_source_clients
from energy_oracle.refresh import RefreshCoordinator
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")

SERVICE_NAME = "Energy Oracle"
SERVICE_VERSION = "1.0.0"


@dataclass
class OracleService:
    """Owns the lifecycle of the oracle components."""
    settings: config.Settings
    cache: CacheStore
    clients: SourceClients
    aggregator: OracleAggregator
    refresher: RefreshCoordinator
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def status(self) -> dict[str, Any]:
        """Operational summary: cache contents and which upstream APIs are configured."""
        return {
            "service": SERVICE_NAME,
            "status": "operational",
            "version": SERVICE_VERSION,
            "cache": self.aggregator.cache_stats(),
            "apis": {
                "openWeather": self.clients.weather.configured,
                "energyMarket": self.clients.energy.configured,
                "carbonMarket": self.clients.carbon.configured,
                "renewableCerts": self.clients.certification.configured,
            },
            "startedAt": self.started_at.isoformat(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def close(self) -> None:
        """Drop cached data and release HTTP sessions."""
        self.cache.clear()
        self.clients.close()
        logger.info("Oracle service closed")


def build_oracle_service(
    settings: config.Settings | None = None,
    *,
    cache: CacheStore | None = None,
    clients: SourceClients | None = None,
) -> OracleService:
    """Construct an OracleService, defaulting each part from settings."""
    settings = settings or config.settings
    if cache is None:
        cache = InMemoryCacheStore(default_ttl_seconds=settings.cache_ttl_seconds)
    if clients is None:
        clients = build_source_clients(settings)
    aggregator = OracleAggregator(
        cache,
        clients,
        certification_ttl_seconds=settings.certification_cache_ttl_seconds,
        reference_coordinate=(settings.reference_latitude, settings.reference_longitude),
    )
    refresher = RefreshCoordinator(aggregator, region=settings.default_region)
    logger.info(
        "Oracle service ready",
        extra={"cache_ttl_seconds": settings.cache_ttl_seconds, "apis": settings.configured_apis()},
    )
    return OracleService(
        settings=settings,
        cache=cache,
        clients=clients,
        aggregator=aggregator,
        refresher=refresher,
    )
