"""Weatherbit client for current conditions at a destination."""
from __future__ import annotations

from commute_timely.config import settings
from commute_timely.data_sources.http import session
from commute_timely.domain import Coordinates, WeatherSnapshot
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weatherbit_client")

WEATHERBIT_CURRENT_URL = "https://api.weatherbit.io/v2.0/current"


def _precipitation_probability(observation: dict) -> float:
    """Prefer `pop`; plans without it only report the `precip` rate, used as-is."""
    raw = observation.get("pop")
    if raw is None:
        raw = observation.get("precip")
    try:
        value = float(raw or 0.0)
    except (TypeError, ValueError):
        logger.debug("Unparseable precipitation value; treating as 0", extra={"raw": raw})
        return 0.0
    return min(100.0, max(0.0, value))


def fetch_weather_by_latlng(
    coordinates: Coordinates,
    *,
    api_key: str | None = None,
    timeout: float | None = None,
) -> WeatherSnapshot:
    """Fetch the latest observation for a coordinate pair."""
    key = api_key or settings.weatherbit_api_key
    if not key:
        raise ValueError("weatherbit_api_key must be set to fetch weather")

    params = {
        "lat": coordinates.latitude,
        "lon": coordinates.longitude,
        "key": key,
    }
    resp = session.get(WEATHERBIT_CURRENT_URL, params=params, timeout=timeout or settings.http_timeout_seconds)
    resp.raise_for_status()
    data = resp.json()

    observations = data.get("data") or []
    if not observations:
        raise ValueError("Weatherbit returned no observations")
    current = observations[0]

    snapshot = WeatherSnapshot(
        description=(current.get("weather") or {}).get("description") or "Unknown",
        precipitation_probability=_precipitation_probability(current),
        wind_speed=current.get("wind_spd"),
        temperature_c=current.get("temp"),
    )
    logger.debug(
        "Fetched weather snapshot",
        extra={"description": snapshot.description, "precipitation_probability": snapshot.precipitation_probability},
    )
    return snapshot
