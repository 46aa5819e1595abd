"""Interfaces and adapters for the travel-time and weather collaborators."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from commute_timely.domain import Coordinates, TravelEstimate, WeatherSnapshot


class TravelEstimateSource(Protocol):
    """Anything that can estimate a driving duration between two points."""

    async def fetch_travel_estimate(self, origin: Coordinates, destination: Coordinates) -> TravelEstimate:
        """Return the current travel estimate; may raise."""
        ...


class WeatherSource(Protocol):
    """Anything that can report current conditions at a point."""

    async def fetch_weather(self, coordinates: Coordinates) -> WeatherSnapshot:
        """Return a weather snapshot; may raise."""
        ...


async def _call(fn: Callable[..., Any], *args) -> Any:
    """Await coroutine functions; push blocking callables onto a worker thread."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    return await asyncio.to_thread(fn, *args)


@dataclass
class CallableCommuteDataSource(TravelEstimateSource, WeatherSource):
    """Wrap two callables so HTTP clients, fakes or caches can be swapped in."""

    travel: Callable[..., TravelEstimate]
    weather: Callable[..., WeatherSnapshot]

    async def fetch_travel_estimate(self, origin: Coordinates, destination: Coordinates) -> TravelEstimate:
        """Delegate to the configured travel callable."""
        return await _call(self.travel, origin, destination)

    async def fetch_weather(self, coordinates: Coordinates) -> WeatherSnapshot:
        """Delegate to the configured weather callable."""
        return await _call(self.weather, coordinates)
