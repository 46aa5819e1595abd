"""Mapbox Directions client returning traffic-aware driving estimates."""
from __future__ import annotations

from commute_timely.config import settings
from commute_timely.data_sources.http import session
from commute_timely.domain import Coordinates, TravelEstimate
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="mapbox_client")

MAPBOX_DIRECTIONS_URL = "https://api.mapbox.com/directions/v5/mapbox/driving-traffic"


def _coordinate_pair(origin: Coordinates, destination: Coordinates) -> str:
    """Mapbox wants `lon,lat;lon,lat`."""
    return f"{origin.longitude},{origin.latitude};{destination.longitude},{destination.latitude}"


def fetch_driving_eta(
    origin: Coordinates,
    destination: Coordinates,
    *,
    access_token: str | None = None,
    timeout: float | None = None,
) -> TravelEstimate:
    """Fetch the fastest current driving route between two points."""
    token = access_token or settings.mapbox_access_token
    if not token:
        raise ValueError("mapbox_access_token must be set to fetch travel estimates")

    params = {
        "alternatives": "false",
        "geometries": "geojson",
        "overview": "false",
        "steps": "false",
        "access_token": token,
    }
    url = f"{MAPBOX_DIRECTIONS_URL}/{_coordinate_pair(origin, destination)}"
    resp = session.get(url, params=params, timeout=timeout or settings.http_timeout_seconds)
    resp.raise_for_status()
    data = resp.json()

    routes = data.get("routes") or []
    if not routes:
        raise ValueError(f"Mapbox returned no route (code={data.get('code')})")
    route = routes[0]

    estimate = TravelEstimate(
        duration_seconds=round(route.get("duration") or 0),
        distance_meters=round(route.get("distance") or 0),
    )
    logger.debug(
        "Fetched driving estimate",
        extra={"duration_seconds": estimate.duration_seconds, "distance_meters": estimate.distance_meters},
    )
    return estimate
