"""Client for the OpenWeatherMap current-weather API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field

from energy_oracle.data_sources.base import FetchResult, HttpSourceClient, UpstreamPayload
from energy_oracle.data_sources.fallback import mock_weather
from energy_oracle.domain import SourceTag, WeatherCondition, WeatherSnapshot

DEFAULT_VISIBILITY_M = 10000

# OpenWeatherMap "main" groups folded into the conditions the oracle scores on.
CONDITION_SYNONYMS = {
    "clear": WeatherCondition.CLEAR,
    "clouds": WeatherCondition.CLOUDS,
    "rain": WeatherCondition.RAIN,
    "drizzle": WeatherCondition.RAIN,
    "thunderstorm": WeatherCondition.RAIN,
    "snow": WeatherCondition.SNOW,
    "mist": WeatherCondition.MIST,
    "fog": WeatherCondition.MIST,
    "haze": WeatherCondition.MIST,
    "smoke": WeatherCondition.MIST,
    "dust": WeatherCondition.MIST,
    "sand": WeatherCondition.MIST,
    "ash": WeatherCondition.MIST,
    "squall": WeatherCondition.MIST,
    "tornado": WeatherCondition.MIST,
}


def normalize_condition(value: Optional[str]) -> WeatherCondition:
    """Map an OpenWeatherMap condition group onto WeatherCondition (default Clear)."""
    if not value:
        return WeatherCondition.CLEAR
    return CONDITION_SYNONYMS.get(value.strip().lower(), WeatherCondition.CLEAR)


class _Main(UpstreamPayload):
    temp: float
    humidity: float
    pressure: float


class _Wind(UpstreamPayload):
    speed: Optional[float] = None
    deg: Optional[float] = None


class _Clouds(UpstreamPayload):
    all: Optional[float] = None


class _Sky(UpstreamPayload):
    main: Optional[str] = None
    description: Optional[str] = None


class _Sys(UpstreamPayload):
    sunrise: int
    sunset: int


class OpenWeatherPayload(UpstreamPayload):
    """Subset of the /weather response the oracle reads."""
    main: _Main
    sys: _Sys
    wind: _Wind = Field(default_factory=_Wind)
    clouds: _Clouds = Field(default_factory=_Clouds)
    weather: List[_Sky] = Field(default_factory=list)
    visibility: Optional[float] = None
    uvi: Optional[float] = None

    def to_snapshot(self) -> WeatherSnapshot:
        """Translate the payload, filling defaults for missing optional fields."""
        sky = self.weather[0] if self.weather else _Sky()
        return WeatherSnapshot(
            temperature=self.main.temp,
            humidity=self.main.humidity,
            pressure=self.main.pressure,
            wind_speed=self.wind.speed or 0,
            wind_direction=self.wind.deg or 0,
            cloud_cover=self.clouds.all or 0,
            visibility=self.visibility or DEFAULT_VISIBILITY_M,
            uv_index=self.uvi or 0,
            condition=normalize_condition(sky.main),
            description=sky.description or "clear sky",
            sunrise=datetime.fromtimestamp(self.sys.sunrise, tz=timezone.utc),
            sunset=datetime.fromtimestamp(self.sys.sunset, tz=timezone.utc),
            timestamp=datetime.now(timezone.utc),
            source_tag=SourceTag.LIVE,
        )


class WeatherClient(HttpSourceClient):
    """Current weather for a coordinate, in metric units."""

    name = "openweather"
    api_key_param = "appid"

    def fetch_live(self, latitude: float, longitude: float) -> FetchResult[WeatherSnapshot]:
        """Call /weather and shape the response; never raises."""
        params = {"lat": latitude, "lon": longitude, "units": "metric"}
        return (
            self._get_json("weather", params)
            .then(lambda body: self._validate(OpenWeatherPayload, body))
            .then(lambda payload: self._build(payload.to_snapshot))
        )

    def fetch(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Return live weather, or mock weather if the live call fails."""
        return self._resolve(
            self.fetch_live(latitude, longitude),
            lambda: mock_weather(latitude, longitude, rng=self.rng),
            latitude=latitude,
            longitude=longitude,
        )
