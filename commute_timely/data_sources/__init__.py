"""Travel-time and weather collaborators."""

from .base import CallableCommuteDataSource, TravelEstimateSource, WeatherSource
from .factory import build_data_source
from .mapbox_client import fetch_driving_eta
from .weatherbit_client import fetch_weather_by_latlng

__all__ = [
    "build_data_source",
    "CallableCommuteDataSource",
    "TravelEstimateSource",
    "WeatherSource",
    "fetch_driving_eta",
    "fetch_weather_by_latlng",
]
