"""Engine configuration pulled from environment variables via pydantic."""
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from commute_timely.domain import Coordinates, DelayConfig
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the commute timing engine."""
    model_config = SettingsConfigDict(env_prefix="COMMUTE_", extra="ignore")

    timezone: str = "UTC"
    log_level: str = "INFO"

    # No device location yet; the original app defaulted to San Francisco.
    origin_latitude: float = 37.7749
    origin_longitude: float = -122.4194

    mapbox_access_token: str | None = None
    weatherbit_api_key: str | None = None
    http_timeout_seconds: float = 10.0

    fetch_timeout_seconds: float = 20.0
    buffer_seconds: int = 300
    pacing_seconds: float = 1.0
    recalculation_interval_seconds: float = 6 * 60 * 60

    delay_rain_minutes: int = 5
    delay_snow_minutes: int = 15
    delay_storm_minutes: int = 20
    delay_fog_minutes: int = 10
    delay_heavy_rain_minutes: int = 10
    delay_wind_surcharge_minutes: int = 5

    state_redis_url: str | None = None
    state_redis_key: str = "commute_timely:recalculation"
    results_database_url: str | None = None
    destinations_file: str | None = None

    @field_validator("timezone", mode="after")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{v}'") from exc
        return v

    @field_validator("buffer_seconds", mode="after")
    @classmethod
    def non_negative_buffer(cls, v: int) -> int:
        """The safety buffer may be zero but never negative."""
        if v < 0:
            raise ValueError("buffer_seconds must be >= 0")
        return v

    def origin(self) -> Coordinates:
        """Return the fixed commute origin."""
        return Coordinates(latitude=self.origin_latitude, longitude=self.origin_longitude)

    def tzinfo(self) -> ZoneInfo:
        """Return the configured local timezone."""
        return ZoneInfo(self.timezone)

    def delay_config(self) -> DelayConfig:
        """Build the weather delay configuration from the delay_* fields."""
        return DelayConfig(
            rain=self.delay_rain_minutes,
            snow=self.delay_snow_minutes,
            storm=self.delay_storm_minutes,
            fog=self.delay_fog_minutes,
            heavy_rain=self.delay_heavy_rain_minutes,
            wind_surcharge=self.delay_wind_surcharge_minutes,
        )


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'mapbox_access_token', 'weatherbit_api_key'})}")
