"""Display helpers for alarm text and commute summaries."""

from __future__ import annotations

from typing import Tuple

from commute_timely.domain import CommuteResult, Destination

_WEATHER_ICONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("sun", "clear"), "☀️"),
    (("cloud",), "☁️"),
    (("rain", "drizzle"), "🌧️"),
    (("snow",), "❄️"),
    (("storm", "thunder"), "⛈️"),
    (("fog", "mist"), "🌫️"),
)
DEFAULT_WEATHER_ICON = "🌤️"


def weather_icon(condition: str) -> str:
    """Pick an emoji for a free-text weather condition."""
    lowered = (condition or "").lower()
    for keywords, icon in _WEATHER_ICONS:
        if any(word in lowered for word in keywords):
            return icon
    return DEFAULT_WEATHER_ICON


def alarm_title(destination: Destination) -> str:
    return f"Time to leave for {destination.name}!"


def alarm_message(result: CommuteResult) -> str:
    """Body text, e.g. `ETA: 25 mins (🌧️ light rain)`."""
    minutes = round(result.duration_seconds / 60)
    icon = weather_icon(result.weather_condition)
    return f"ETA: {minutes} mins ({icon} {result.weather_condition})"
