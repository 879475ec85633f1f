"""Forced, partial-failure-tolerant refresh of the market data sources."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from energy_oracle.aggregator import OracleAggregator, carbon_key, energy_key, weather_key
from energy_oracle.domain import CarbonMarketType, EnergyType, RefreshResult, Region
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="refresh")


def _describe(domain: str, exc: BaseException) -> str:
    """Render a failed refresh as one error line."""
    detail = str(exc) or type(exc).__name__
    return f"{domain}: {detail}"


class RefreshCoordinator:
    """Re-fetch weather, energy and carbon data concurrently, bypassing the cache."""

    def __init__(
        self,
        aggregator: OracleAggregator,
        *,
        region: Region = Region.BR,
        energy_type: EnergyType = EnergyType.RENEWABLE,
        market_type: CarbonMarketType = CarbonMarketType.VOLUNTARY,
    ) -> None:
        """Refresh targets default to the reference coordinate, BR renewable and voluntary credits."""
        self.aggregator = aggregator
        self.region = region
        self.energy_type = energy_type
        self.market_type = market_type

    async def update_all(self) -> RefreshResult:
        """Refresh every domain; one failure never prevents the others from landing.

        Each None field in the result has exactly one matching entry in `errors`.
        """
        logger.info("Starting forced refresh")
        clients = self.aggregator.clients
        latitude, longitude = self.aggregator.reference_coordinate

        outcomes = await asyncio.gather(
            self.aggregator.refresh(
                weather_key(latitude, longitude),
                lambda: clients.weather.fetch(latitude, longitude),
            ),
            self.aggregator.refresh(
                energy_key(self.region, self.energy_type),
                lambda: clients.energy.fetch(self.region, self.energy_type),
            ),
            self.aggregator.refresh(
                carbon_key(self.market_type),
                lambda: clients.carbon.fetch(self.market_type),
            ),
            return_exceptions=True,
        )

        values: dict[str, Optional[Any]] = {}
        errors: list[str] = []
        for domain, outcome in zip(("weather", "energy", "carbon"), outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Refresh failed", extra={"domain": domain, "error": repr(outcome)})
                values[domain] = None
                errors.append(_describe(domain, outcome))
            elif outcome is None:
                values[domain] = None
                errors.append(f"{domain}: no data returned")
            else:
                values[domain] = outcome

        result = RefreshResult(
            weather=values["weather"],
            energy=values["energy"],
            carbon=values["carbon"],
            errors=errors,
            timestamp=datetime.now(timezone.utc),
        )
        logger.info(
            "Forced refresh finished",
            extra={"success_count": result.update_count, "error_count": len(errors)},
        )
        return result
