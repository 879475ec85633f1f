"""Factory helpers for wiring the upstream source clients at startup."""

from __future__ import annotations

import random
from dataclasses import dataclass

from energy_oracle import config
from energy_oracle.data_sources.carbon_market_client import CarbonMarketClient
from energy_oracle.data_sources.certification_client import CertificationClient
from energy_oracle.data_sources.energy_market_client import EnergyMarketClient
from energy_oracle.data_sources.weather_client import WeatherClient
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/factory")


@dataclass
class SourceClients:
    """One client per upstream domain."""
    weather: WeatherClient
    energy: EnergyMarketClient
    carbon: CarbonMarketClient
    certification: CertificationClient

    def all(self):
        """Return the clients in a fixed order."""
        return (self.weather, self.energy, self.carbon, self.certification)

    def close(self) -> None:
        """Close every client's HTTP session."""
        for client in self.all():
            client.close()


def build_source_clients(
    settings: config.Settings | None = None,
    *,
    rng: random.Random | None = None,
) -> SourceClients:
    """Instantiate the four source clients from configuration."""
    settings = settings or config.settings
    timeout = settings.request_timeout_seconds

    clients = SourceClients(
        weather=WeatherClient(
            api_key=settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout_seconds=timeout,
            rng=rng,
        ),
        energy=EnergyMarketClient(
            api_key=settings.energy_market_api_key,
            base_url=settings.energy_market_base_url,
            timeout_seconds=timeout,
            rng=rng,
        ),
        carbon=CarbonMarketClient(
            api_key=settings.carbon_market_api_key,
            base_url=settings.carbon_market_base_url,
            timeout_seconds=timeout,
            rng=rng,
        ),
        certification=CertificationClient(
            api_key=settings.renewable_certs_api_key,
            base_url=settings.renewable_certs_base_url,
            timeout_seconds=timeout,
            rng=rng,
        ),
    )

    for client in clients.all():
        if client.configured:
            logger.info(f"Using live {client.name} source", extra={"base_url": mask_url(client.base_url)})
        else:
            logger.warning(f"No API key for {client.name}; serving fallback data")
    return clients
