import types
import unittest
from datetime import datetime, timezone

from energy_oracle import indicators
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
from energy_oracle.errors import AggregationError

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _weather(condition=WeatherCondition.CLEAR, wind_speed=10.0, cloud_cover=10.0):
    return WeatherSnapshot(
        temperature=25.0,
        humidity=50.0,
        pressure=1013.0,
        wind_speed=wind_speed,
        wind_direction=180.0,
        cloud_cover=cloud_cover,
        visibility=10000.0,
        uv_index=5.0,
        condition=condition,
        description=condition.value.lower(),
        sunrise=NOW,
        sunset=NOW,
        timestamp=NOW,
        source_tag=SourceTag.LIVE,
    )


def _energy(price=0.10, change_percent=-1.0):
    return EnergyPriceSnapshot(
        region=Region.BR,
        energy_type=EnergyType.RENEWABLE,
        current_price=price,
        currency="USD",
        price_change_24h=0.0,
        price_change_percent=change_percent,
        market_cap=0.0,
        volume_24h=0.0,
        high_24h=0.0,
        low_24h=0.0,
        timestamp=NOW,
        source_tag=SourceTag.LIVE,
    )


def _carbon(price=25.0):
    return CarbonCreditSnapshot(
        market_type=CarbonMarketType.VOLUNTARY,
        current_price=price,
        currency="USD",
        price_change_24h=0.0,
        volume=0.0,
        market_cap=0.0,
        available_credits=0.0,
        retired_credits=0.0,
        average_vintage=2023,
        timestamp=NOW,
        source_tag=SourceTag.LIVE,
    )


class TestRenewableIndex(unittest.TestCase):
    def test_all_favourable_conditions_cap_at_100(self):
        # 50 + 20 + 15 + 10 + 15 + 10 = 120, clamped
        self.assertEqual(indicators.renewable_index(_weather(), _energy()), 100)

    def test_unfavourable_conditions_stay_at_base(self):
        w = _weather(condition=WeatherCondition.RAIN, wind_speed=5.0, cloud_cover=30.0)
        e = _energy(price=0.15, change_percent=0.0)
        self.assertEqual(indicators.renewable_index(w, e), 50)

    def test_individual_contributions(self):
        w = _weather(condition=WeatherCondition.CLOUDS, wind_speed=6.0, cloud_cover=80.0)
        e = _energy(price=0.20, change_percent=1.0)
        self.assertEqual(indicators.renewable_index(w, e), 65)


class TestCarbonIntensity(unittest.TestCase):
    def test_reference_prices_give_base(self):
        self.assertEqual(indicators.carbon_intensity(_energy(price=0.15), _carbon(price=25.0)), 500)

    def test_cheaper_energy_raises_intensity(self):
        self.assertEqual(indicators.carbon_intensity(_energy(price=0.10), _carbon(price=25.0)), 550)

    def test_never_negative(self):
        self.assertEqual(indicators.carbon_intensity(_energy(price=1.0), _carbon(price=0.0)), 0)


class TestSustainabilityScore(unittest.TestCase):
    def test_blend(self):
        # 100 * 0.6 + (1000 - 550) / 10 * 0.4 = 78
        self.assertEqual(indicators.sustainability_score(_weather(), _energy(), _carbon()), 78)

    def test_clamped_at_zero_for_extreme_intensity(self):
        w = _weather(condition=WeatherCondition.RAIN, wind_speed=0.0, cloud_cover=100.0)
        score = indicators.sustainability_score(w, _energy(price=0.0, change_percent=1.0), _carbon(price=200.0))
        self.assertEqual(score, 0)

    def test_compute_indicators_bundles_all_three(self):
        result = indicators.compute_indicators(_weather(), _energy(), _carbon())
        self.assertEqual(result.renewable_index, 100)
        self.assertEqual(result.carbon_intensity, 550)
        self.assertEqual(result.sustainability_score, 78)


class TestRounding(unittest.TestCase):
    def test_half_rounds_up(self):
        self.assertEqual(indicators._round_half_up(500.5), 501)
        self.assertEqual(indicators._round_half_up(2.5), 3)
        self.assertEqual(indicators._round_half_up(2.49), 2)
        self.assertEqual(indicators._round_half_up(-0.5), 0)


class TestMalformedInput(unittest.TestCase):
    def test_missing_field_raises_aggregation_error(self):
        weather = types.SimpleNamespace(condition=WeatherCondition.CLEAR, cloud_cover=10.0)
        with self.assertRaises(AggregationError) as ctx:
            indicators.renewable_index(weather, _energy())
        self.assertIn("wind_speed", ctx.exception.message)

    def test_non_numeric_field_raises_aggregation_error(self):
        energy = types.SimpleNamespace(current_price="cheap", price_change_percent=0.0)
        with self.assertRaises(AggregationError):
            indicators.carbon_intensity(energy, _carbon())

    def test_nan_raises_aggregation_error(self):
        carbon = types.SimpleNamespace(current_price=float("nan"))
        with self.assertRaises(AggregationError):
            indicators.carbon_intensity(_energy(), carbon)


if __name__ == "__main__":
    unittest.main()
