import random
import unittest

from energy_oracle.config import Settings
from energy_oracle.data_sources import (
    CarbonMarketClient,
    CertificationClient,
    EnergyMarketClient,
    WeatherClient,
    build_source_clients,
)


def _settings(**overrides):
    values = dict(
        openweather_api_key=None,
        energy_market_api_key=None,
        carbon_market_api_key=None,
        renewable_certs_api_key=None,
    )
    values.update(overrides)
    return Settings(**values)


class TestDataSourceFactory(unittest.TestCase):
    def test_builds_one_client_per_domain(self):
        clients = build_source_clients(_settings())
        self.assertIsInstance(clients.weather, WeatherClient)
        self.assertIsInstance(clients.energy, EnergyMarketClient)
        self.assertIsInstance(clients.carbon, CarbonMarketClient)
        self.assertIsInstance(clients.certification, CertificationClient)
        self.assertEqual(len(clients.all()), 4)

    def test_keys_and_urls_come_from_settings(self):
        settings = _settings(
            openweather_api_key="w-key",
            energy_market_base_url="https://energy.test/v1/",
            request_timeout_seconds=3,
        )
        clients = build_source_clients(settings)
        self.assertTrue(clients.weather.configured)
        self.assertEqual(clients.weather.api_key, "w-key")
        self.assertFalse(clients.energy.configured)
        self.assertEqual(clients.energy.base_url, "https://energy.test/v1")
        self.assertEqual(clients.carbon.timeout, 3)

    def test_rng_is_shared_with_clients(self):
        rng = random.Random(1)
        clients = build_source_clients(_settings(), rng=rng)
        self.assertTrue(all(client.rng is rng for client in clients.all()))

    def test_close_closes_every_session(self):
        clients = build_source_clients(_settings())
        closed = []
        for client in clients.all():
            client.session = type("S", (), {"close": lambda self, name=client.name: closed.append(name)})()
        clients.close()
        self.assertEqual(closed, ["openweather", "energy_market", "carbon_market", "renewable_certs"])


if __name__ == "__main__":
    unittest.main()
