"""Oracle configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from energy_oracle.domain import Region
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the energy oracle.

    A missing API key routes that domain permanently through fallback data.
    """
    model_config = SettingsConfigDict(env_prefix="ORACLE_", extra="ignore")

    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    energy_market_api_key: str | None = None
    energy_market_base_url: str = "https://api.energymarket.com/v1"
    carbon_market_api_key: str | None = None
    carbon_market_base_url: str = "https://api.carbonmarket.org/v2"
    renewable_certs_api_key: str | None = None
    renewable_certs_base_url: str = "https://api.renewablecerts.org/v1"

    cache_ttl_seconds: float = 300
    certification_cache_ttl_seconds: float = 3600
    request_timeout_seconds: float = 10

    # Sao Paulo, used by the market snapshot and the refresh job.
    reference_latitude: float = -23.5505
    reference_longitude: float = -46.6333
    default_region: Region = Region.BR

    log_level: str = "INFO"

    @field_validator(
        "openweather_base_url",
        "energy_market_base_url",
        "carbon_market_base_url",
        "renewable_certs_base_url",
        mode="after",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator(
        "openweather_api_key",
        "energy_market_api_key",
        "carbon_market_api_key",
        "renewable_certs_api_key",
        mode="after",
    )
    @classmethod
    def blank_key_is_unset(cls, v: str | None) -> str | None:
        """Treat an empty or whitespace-only key as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def configured_apis(self) -> dict[str, bool]:
        """Report which upstream APIs have credentials."""
        return {
            "openWeather": self.openweather_api_key is not None,
            "energyMarket": self.energy_market_api_key is not None,
            "carbonMarket": self.carbon_market_api_key is not None,
            "renewableCerts": self.renewable_certs_api_key is not None,
        }


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
