"""Per-destination commute pipeline: travel estimate, weather, delay, leave time, persist."""
from __future__ import annotations

import asyncio
import datetime as dt
from typing import Awaitable, Callable, Dict, Iterable, Optional, TypeVar

from commute_timely.data_sources.base import TravelEstimateSource, WeatherSource
from commute_timely.delay_model import estimate_delay
from commute_timely.domain import DEFAULT_DELAY_CONFIG, CommuteResult, Coordinates, DelayConfig, Destination
from commute_timely.exceptions import CommuteCalculationFailed, EstimateFetchFailed
from commute_timely.leave_time import DEFAULT_BUFFER_SECONDS, compute_leave_time
from commute_timely.storage.base import CommuteResultStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="orchestrator")

T = TypeVar("T")

DEFAULT_FETCH_TIMEOUT_SECONDS = 20.0


class CommuteOrchestrator:
    """Compute and persist today's leave-by time for a destination."""

    def __init__(
        self,
        origin: Coordinates,
        travel_source: TravelEstimateSource,
        weather_source: WeatherSource,
        result_store: CommuteResultStore,
        *,
        clock: Callable[[], dt.datetime],
        delay_config: DelayConfig = DEFAULT_DELAY_CONFIG,
        buffer_seconds: int = DEFAULT_BUFFER_SECONDS,
        fetch_timeout_seconds: Optional[float] = DEFAULT_FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self.origin = origin
        self.travel_source = travel_source
        self.weather_source = weather_source
        self.result_store = result_store
        self.clock = clock
        self.delay_config = delay_config
        self.buffer_seconds = buffer_seconds
        self.fetch_timeout_seconds = fetch_timeout_seconds

    def update_origin(self, origin: Coordinates) -> None:
        self.origin = origin

    def update_delay_config(self, **changes) -> DelayConfig:
        """Override some delay minutes/thresholds, keeping the rest."""
        self.delay_config = self.delay_config.updated(**changes)
        return self.delay_config

    async def _fetch(self, destination_id: str, source: str, call: Awaitable[T]) -> T:
        """Await a collaborator call under the fetch timeout; any failure becomes EstimateFetchFailed."""
        try:
            return await asyncio.wait_for(call, timeout=self.fetch_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise EstimateFetchFailed(destination_id, TimeoutError(str(exc) or "timed out"), source=source) from exc
        except Exception as exc:
            raise EstimateFetchFailed(destination_id, exc, source=source) from exc

    async def calculate_commute(self, destination: Destination) -> CommuteResult:
        """
        Run the full pipeline for one destination.

        Raises EstimateFetchFailed if the travel or weather collaborator fails
        or exceeds `fetch_timeout_seconds`, and CommuteCalculationFailed if the
        result cannot be computed or stored.
        """
        logger.info("Calculating commute", extra={"destination_id": destination.id})

        travel = await self._fetch(
            destination.id,
            "travel",
            self.travel_source.fetch_travel_estimate(self.origin, destination.coordinates),
        )
        weather = await self._fetch(
            destination.id,
            "weather",
            self.weather_source.fetch_weather(destination.coordinates),
        )

        now = self.clock()
        try:
            delay_seconds = estimate_delay(weather, self.delay_config)
            leave_time = compute_leave_time(
                destination.arrival_time,
                travel.duration_seconds,
                delay_seconds,
                self.buffer_seconds,
                now=now,
            )
            result = CommuteResult(
                leave_time=leave_time,
                duration_seconds=travel.duration_seconds,
                weather_condition=weather.description,
                weather_delay_seconds=delay_seconds,
                arrival_time=destination.arrival_time,
            )
        except ValueError as exc:
            raise CommuteCalculationFailed(destination.id, exc) from exc

        try:
            self.result_store.save_result(destination.id, now.date(), result)
        except Exception as exc:
            raise CommuteCalculationFailed(destination.id, exc, "could not persist result") from exc

        logger.info(
            "Leave by %s for %s (travel %ss, weather delay %ss)",
            result.leave_time, destination.id, result.duration_seconds, result.weather_delay_seconds,
        )
        return result

    async def calculate_all(self, destinations: Iterable[Destination]) -> Dict[str, CommuteResult]:
        """Calculate sequentially; a failing destination is logged and left out."""
        results: Dict[str, CommuteResult] = {}
        for destination in destinations:
            try:
                results[destination.id] = await self.calculate_commute(destination)
            except CommuteCalculationFailed as exc:
                logger.error("%s", exc, extra={"destination_id": destination.id})
        return results
