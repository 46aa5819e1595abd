"""Factory helpers for wiring the live routing and weather clients."""

from __future__ import annotations

from functools import partial

from commute_timely import config
from commute_timely.data_sources.base import CallableCommuteDataSource
from commute_timely.data_sources.mapbox_client import fetch_driving_eta
from commute_timely.data_sources.weatherbit_client import fetch_weather_by_latlng
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_data_source(settings: config.Settings | None = None) -> CallableCommuteDataSource:
    """Build the Mapbox + Weatherbit data source from settings."""
    settings = settings or config.settings

    if not settings.mapbox_access_token:
        raise ValueError("mapbox_access_token must be set for the live data source")
    if not settings.weatherbit_api_key:
        raise ValueError("weatherbit_api_key must be set for the live data source")

    logger.info("Using Mapbox directions and Weatherbit current conditions")
    return CallableCommuteDataSource(
        travel=partial(
            fetch_driving_eta,
            access_token=settings.mapbox_access_token,
            timeout=settings.http_timeout_seconds,
        ),
        weather=partial(
            fetch_weather_by_latlng,
            api_key=settings.weatherbit_api_key,
            timeout=settings.http_timeout_seconds,
        ),
    )
