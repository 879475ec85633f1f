"""Client for the carbon-credit market API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field

from energy_oracle.data_sources.base import FetchResult, HttpSourceClient, UpstreamPayload
from energy_oracle.data_sources.fallback import mock_carbon_credits
from energy_oracle.domain import CarbonCreditSnapshot, CarbonMarketType, SourceTag

DEFAULT_PRICE_PER_TONNE = 25.50


class CarbonMarketPayload(UpstreamPayload):
    """Subset of the /credits response the oracle reads; every field is optional."""
    price: Optional[float] = None
    currency: Optional[str] = None
    change_24h: Optional[float] = None
    volume: Optional[float] = None
    market_cap: Optional[float] = None
    available: Optional[float] = None
    retired: Optional[float] = None
    avg_vintage: Optional[int] = None
    top_projects: List[str] = Field(default_factory=list)

    def to_snapshot(self, market_type: CarbonMarketType) -> CarbonCreditSnapshot:
        """Translate the payload, filling defaults for missing fields."""
        now = datetime.now(timezone.utc)
        return CarbonCreditSnapshot(
            market_type=market_type,
            current_price=self.price if self.price is not None else DEFAULT_PRICE_PER_TONNE,
            currency=self.currency or "USD",
            price_change_24h=self.change_24h or 0,
            volume=self.volume or 0,
            market_cap=self.market_cap or 0,
            available_credits=self.available or 0,
            retired_credits=self.retired or 0,
            average_vintage=self.avg_vintage or now.year,
            top_projects=list(self.top_projects),
            timestamp=now,
            source_tag=SourceTag.LIVE,
        )


class CarbonMarketClient(HttpSourceClient):
    """Carbon-credit quotes per market segment."""

    name = "carbon_market"

    def fetch_live(self, market_type: CarbonMarketType) -> FetchResult[CarbonCreditSnapshot]:
        """Call /credits and shape the response; never raises."""
        return (
            self._get_json("credits", {"market": market_type.value})
            .then(lambda body: self._validate(CarbonMarketPayload, body))
            .then(lambda payload: self._build(lambda: payload.to_snapshot(market_type)))
        )

    def fetch(self, market_type: CarbonMarketType) -> CarbonCreditSnapshot:
        """Return live quotes, or mock quotes if the live call fails."""
        return self._resolve(
            self.fetch_live(market_type),
            lambda: mock_carbon_credits(market_type, rng=self.rng),
            market_type=market_type.value,
        )
