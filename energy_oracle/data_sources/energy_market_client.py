"""Client for the energy-market spot price API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from energy_oracle.data_sources.base import FetchResult, HttpSourceClient, UpstreamPayload
from energy_oracle.data_sources.fallback import mock_energy_prices
from energy_oracle.domain import EnergyPriceSnapshot, EnergyType, Region, SourceTag

DEFAULT_PRICE_PER_KWH = 0.15


class EnergyMarketPayload(UpstreamPayload):
    """Subset of the /prices response the oracle reads; every field is optional."""
    current_price: Optional[float] = None
    currency: Optional[str] = None
    change_24h: Optional[float] = None
    change_percent: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None

    def to_snapshot(self, region: Region, energy_type: EnergyType) -> EnergyPriceSnapshot:
        """Translate the payload, filling defaults for missing fields."""
        return EnergyPriceSnapshot(
            region=region,
            energy_type=energy_type,
            current_price=self.current_price if self.current_price is not None else DEFAULT_PRICE_PER_KWH,
            currency=self.currency or "USD",
            price_change_24h=self.change_24h or 0,
            price_change_percent=self.change_percent or 0,
            market_cap=self.market_cap or 0,
            volume_24h=self.volume_24h or 0,
            high_24h=self.high_24h or 0,
            low_24h=self.low_24h or 0,
            timestamp=datetime.now(timezone.utc),
            source_tag=SourceTag.LIVE,
        )


class EnergyMarketClient(HttpSourceClient):
    """Spot energy prices per region and generation mix."""

    name = "energy_market"

    def fetch_live(self, region: Region, energy_type: EnergyType) -> FetchResult[EnergyPriceSnapshot]:
        """Call /prices and shape the response; never raises."""
        params = {"region": region.value, "type": energy_type.value}
        return (
            self._get_json("prices", params)
            .then(lambda body: self._validate(EnergyMarketPayload, body))
            .then(lambda payload: self._build(lambda: payload.to_snapshot(region, energy_type)))
        )

    def fetch(self, region: Region, energy_type: EnergyType) -> EnergyPriceSnapshot:
        """Return live prices, or mock prices if the live call fails."""
        return self._resolve(
            self.fetch_live(region, energy_type),
            lambda: mock_energy_prices(region, energy_type, rng=self.rng),
            region=region.value,
            energy_type=energy_type.value,
        )
