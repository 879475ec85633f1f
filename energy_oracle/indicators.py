"""Composite market indicators blended from weather, energy and carbon snapshots.

The coefficients are a tunable heuristic, not a physical model, and are kept
exactly as existing consumers expect them. Results are rounded half-up to
integers before clamping.
"""

from __future__ import annotations

import math
from typing import Any

from energy_oracle.domain import (
    CarbonCreditSnapshot,
    EnergyPriceSnapshot,
    MarketIndicators,
    WeatherCondition,
    WeatherSnapshot,
)
from energy_oracle.errors import AggregationError

BASE_RENEWABLE_INDEX = 50
BASE_CARBON_INTENSITY = 500  # gCO2/kWh
REFERENCE_ENERGY_PRICE = 0.15
REFERENCE_CARBON_PRICE = 25
RENEWABLE_WEIGHT = 0.6
INTENSITY_WEIGHT = 0.4


def _round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return min(high, max(low, value))


def _number(snapshot: Any, field: str) -> float:
    """Read a numeric field, raising AggregationError if it is absent or not a number."""
    value = getattr(snapshot, field, None)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise AggregationError(
            f"{type(snapshot).__name__} has no usable numeric '{field}' (got {value!r})"
        )
    return float(value)


def renewable_index(weather: WeatherSnapshot, energy: EnergyPriceSnapshot) -> int:
    """Favourability of current conditions for renewable generation, 0-100."""
    index = BASE_RENEWABLE_INDEX
    if getattr(weather, "condition", None) == WeatherCondition.CLEAR:
        index += 20
    if _number(weather, "wind_speed") > 5:
        index += 15
    if _number(weather, "cloud_cover") < 30:
        index += 10
    if _number(energy, "current_price") < REFERENCE_ENERGY_PRICE:
        index += 15
    if _number(energy, "price_change_percent") < 0:
        index += 10
    return _clamp(_round_half_up(index))


def carbon_intensity(energy: EnergyPriceSnapshot, carbon: CarbonCreditSnapshot) -> int:
    """Estimated grid carbon intensity in gCO2/kWh, never negative."""
    energy_factor = (REFERENCE_ENERGY_PRICE - _number(energy, "current_price")) * 1000
    carbon_factor = (_number(carbon, "current_price") - REFERENCE_CARBON_PRICE) * 10
    return max(0, _round_half_up(BASE_CARBON_INTENSITY + energy_factor + carbon_factor))


def sustainability_score(
    weather: WeatherSnapshot,
    energy: EnergyPriceSnapshot,
    carbon: CarbonCreditSnapshot,
) -> int:
    """Weighted blend of the renewable index and inverted carbon intensity, 0-100."""
    index = renewable_index(weather, energy)
    intensity = carbon_intensity(energy, carbon)
    score = index * RENEWABLE_WEIGHT + ((1000 - intensity) / 1000 * 100) * INTENSITY_WEIGHT
    return _clamp(_round_half_up(score))


def compute_indicators(
    weather: WeatherSnapshot,
    energy: EnergyPriceSnapshot,
    carbon: CarbonCreditSnapshot,
) -> MarketIndicators:
    """Compute all three indicators in one pass."""
    return MarketIndicators(
        renewable_index=renewable_index(weather, energy),
        carbon_intensity=carbon_intensity(energy, carbon),
        sustainability_score=sustainability_score(weather, energy, carbon),
    )
