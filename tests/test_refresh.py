import unittest
from datetime import datetime, timezone

from energy_oracle.aggregator import OracleAggregator
from energy_oracle.cache_store.memory import InMemoryCacheStore
from energy_oracle.data_sources.factory import SourceClients
from energy_oracle.domain import (
    CarbonCreditSnapshot,
    CarbonMarketType,
    EnergyPriceSnapshot,
    EnergyType,
    Region,
    SourceTag,
    WeatherCondition,
    WeatherSnapshot,
)
from energy_oracle.refresh import RefreshCoordinator

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _weather():
    return WeatherSnapshot(
        temperature=18.0, humidity=70.0, pressure=1008.0, wind_speed=3.0, wind_direction=90.0,
        cloud_cover=60.0, visibility=9000.0, uv_index=2.0, condition=WeatherCondition.CLOUDS,
        description="broken clouds", sunrise=NOW, sunset=NOW, timestamp=NOW, source_tag=SourceTag.LIVE,
    )


def _energy(region, energy_type):
    return EnergyPriceSnapshot(
        region=region, energy_type=energy_type, current_price=0.13, currency="USD",
        price_change_24h=0.0, price_change_percent=0.5, market_cap=0.0, volume_24h=0.0,
        high_24h=0.14, low_24h=0.12, timestamp=NOW, source_tag=SourceTag.LIVE,
    )


def _carbon(market_type):
    return CarbonCreditSnapshot(
        market_type=market_type, current_price=26.0, currency="USD", price_change_24h=0.1,
        volume=0.0, market_cap=0.0, available_credits=0.0, retired_credits=0.0,
        average_vintage=2022, timestamp=NOW, source_tag=SourceTag.LIVE,
    )


class StubClient:
    def __init__(self, produce):
        self.produce = produce
        self.calls = 0
        self.configured = True

    def fetch(self, *args):
        self.calls += 1
        return self.produce(*args)

    def close(self):
        pass


def _boom(*args):
    raise RuntimeError("energy upstream exploded")


def _aggregator(energy_produce=_energy, weather_produce=lambda lat, lon: _weather()):
    clients = SourceClients(
        weather=StubClient(weather_produce),
        energy=StubClient(energy_produce),
        carbon=StubClient(_carbon),
        certification=StubClient(lambda cid, issuer: None),
    )
    cache = InMemoryCacheStore(clock=lambda: 0.0)
    return OracleAggregator(cache, clients, reference_coordinate=(1.5, 2.5))


class TestRefreshCoordinator(unittest.IsolatedAsyncioTestCase):
    async def test_all_domains_refreshed(self):
        aggregator = _aggregator()
        result = await RefreshCoordinator(aggregator).update_all()

        self.assertEqual(result.errors, [])
        self.assertEqual(result.update_count, 3)
        self.assertEqual(result.energy.region, Region.BR)
        self.assertEqual(result.energy.energy_type, EnergyType.RENEWABLE)
        self.assertEqual(result.carbon.market_type, CarbonMarketType.VOLUNTARY)
        self.assertEqual(
            sorted(aggregator.cache.keys()),
            ["carbon_credits_voluntary", "energy_prices_BR_renewable", "weather_1.5_2.5"],
        )

    async def test_one_failure_does_not_block_others(self):
        aggregator = _aggregator(energy_produce=_boom)
        result = await RefreshCoordinator(aggregator).update_all()

        self.assertIsNotNone(result.weather)
        self.assertIsNotNone(result.carbon)
        self.assertIsNone(result.energy)
        self.assertEqual(result.errors, ["energy: energy upstream exploded"])
        self.assertEqual(result.update_count, 2)

    async def test_empty_outcome_is_reported(self):
        aggregator = _aggregator(weather_produce=lambda lat, lon: None)
        result = await RefreshCoordinator(aggregator).update_all()

        self.assertIsNone(result.weather)
        self.assertEqual(result.errors, ["weather: no data returned"])

    async def test_bypasses_fresh_cache(self):
        aggregator = _aggregator()
        await aggregator.get_carbon_credits()
        await RefreshCoordinator(aggregator).update_all()
        self.assertEqual(aggregator.clients.carbon.calls, 2)

    async def test_uses_configured_targets(self):
        aggregator = _aggregator()
        coordinator = RefreshCoordinator(
            aggregator,
            region=Region.EU,
            energy_type=EnergyType.MIXED,
            market_type=CarbonMarketType.COMPLIANCE,
        )
        result = await coordinator.update_all()
        self.assertEqual((result.energy.region, result.energy.energy_type), (Region.EU, EnergyType.MIXED))
        self.assertEqual(result.carbon.market_type, CarbonMarketType.COMPLIANCE)


if __name__ == "__main__":
    unittest.main()
