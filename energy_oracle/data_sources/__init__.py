"""Upstream source clients and their fallback generators."""

from .base import FetchResult, HttpSourceClient, UpstreamPayload
from .carbon_market_client import CarbonMarketClient
from .certification_client import CertificationClient
from .energy_market_client import EnergyMarketClient
from .factory import SourceClients, build_source_clients
from .weather_client import WeatherClient

__all__ = [
    "build_source_clients",
    "SourceClients",
    "FetchResult",
    "HttpSourceClient",
    "UpstreamPayload",
    "WeatherClient",
    "EnergyMarketClient",
    "CarbonMarketClient",
    "CertificationClient",
]
