"""Weather-to-delay model.

Maps a WeatherSnapshot onto extra travel time. Precipitation categories only
count once the chance of precipitation clears `precipitation_threshold`; the
largest matching category wins. Fog/mist raises the delay to at least the fog
value and strong wind adds a surcharge on top of everything else.
"""

from __future__ import annotations

from typing import List, Tuple

from commute_timely.domain import DEFAULT_DELAY_CONFIG, DelayConfig, WeatherSnapshot
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="delay_model")

SNOW_KEYWORDS = ("snow", "blizzard")
STORM_KEYWORDS = ("storm", "thunder")
HEAVY_RAIN_KEYWORDS = ("heavy rain",)
RAIN_KEYWORDS = ("rain", "drizzle")
VISIBILITY_KEYWORDS = ("fog", "mist")


def _mentions(description: str, keywords: Tuple[str, ...]) -> bool:
    return any(word in description for word in keywords)


def precipitation_delay_minutes(weather: WeatherSnapshot, config: DelayConfig = DEFAULT_DELAY_CONFIG) -> int:
    """Largest precipitation-category delay that applies, in minutes."""
    if weather.precipitation_probability <= config.precipitation_threshold:
        return 0

    condition = weather.description.lower()
    candidates: List[int] = [0]
    if _mentions(condition, SNOW_KEYWORDS):
        candidates.append(config.snow)
    if _mentions(condition, STORM_KEYWORDS):
        candidates.append(config.storm)
    if (
        weather.precipitation_probability > config.heavy_precipitation_threshold
        or _mentions(condition, HEAVY_RAIN_KEYWORDS)
    ):
        candidates.append(config.heavy_rain)
    if _mentions(condition, RAIN_KEYWORDS):
        candidates.append(config.rain)
    return max(candidates)


def estimate_delay(weather: WeatherSnapshot, config: DelayConfig = DEFAULT_DELAY_CONFIG) -> int:
    """Return the weather delay in seconds for a snapshot. Pure."""
    condition = weather.description.lower()
    delay_minutes = precipitation_delay_minutes(weather, config)

    if _mentions(condition, VISIBILITY_KEYWORDS):
        delay_minutes = max(delay_minutes, config.fog)

    if weather.wind_speed is not None and weather.wind_speed > config.wind_speed_threshold:
        delay_minutes += config.wind_surcharge

    logger.debug(
        "Estimated weather delay",
        extra={"condition": condition, "delay_minutes": delay_minutes},
    )
    return delay_minutes * 60
