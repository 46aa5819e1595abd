"""Wire the commute engine from settings and run it on an asyncio loop."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
from pathlib import Path
from typing import Callable, List, Optional

from commute_timely import config
from commute_timely.alarms import (
    AlarmPlatform,
    AlarmScheduler,
    BestEffortAlarmTier,
    ExactAlarmTier,
    InProcessAlarmPlatform,
)
from commute_timely.alarms.tiers import PermissionProbe
from commute_timely.data_sources import CallableCommuteDataSource, build_data_source
from commute_timely.domain import Destination
from commute_timely.orchestrator import CommuteOrchestrator
from commute_timely.recalculation import DailyRecalculationService
from commute_timely.storage import (
    CommuteResultStore,
    DestinationRepository,
    InMemoryDestinationRepository,
    RecalculationStateStore,
    build_result_store,
    build_state_store,
)
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="main")


def make_clock(settings: config.Settings) -> Callable[[], dt.datetime]:
    """Return a clock reading aware local time in the configured timezone."""
    tzinfo = settings.tzinfo()
    return lambda: dt.datetime.now(tzinfo)


def load_destinations(path: str | Path) -> List[Destination]:
    """Read a JSON list of destinations."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of destinations")
    return [Destination.model_validate(item) for item in raw]


def build_service(
    settings: Optional[config.Settings] = None,
    *,
    destinations: Optional[DestinationRepository] = None,
    data_source: Optional[CallableCommuteDataSource] = None,
    result_store: Optional[CommuteResultStore] = None,
    state_store: Optional[RecalculationStateStore] = None,
    exact_platform: Optional[AlarmPlatform] = None,
    exact_permission_probe: Optional[PermissionProbe] = None,
    best_effort_platform: Optional[AlarmPlatform] = None,
    clock: Optional[Callable[[], dt.datetime]] = None,
) -> DailyRecalculationService:
    """
    Assemble a DailyRecalculationService.

    Anything not passed in is built from settings: live Mapbox/Weatherbit
    clients, Redis or in-memory state, SQL or in-memory results, and an
    in-process best-effort alarm platform. Hosts with a native exact-alarm
    primitive pass it as `exact_platform`.
    """
    settings = settings or config.settings
    clock = clock or make_clock(settings)

    if destinations is None:
        repo = InMemoryDestinationRepository()
        if settings.destinations_file:
            for destination in load_destinations(settings.destinations_file):
                repo.upsert(destination)
        destinations = repo

    source = data_source or build_data_source(settings)
    orchestrator = CommuteOrchestrator(
        settings.origin(),
        source,
        source,
        result_store or build_result_store(settings),
        clock=clock,
        delay_config=settings.delay_config(),
        buffer_seconds=settings.buffer_seconds,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )

    in_process = None
    if best_effort_platform is None:
        in_process = best_effort_platform = InProcessAlarmPlatform(clock)
    scheduler = AlarmScheduler(
        [
            ExactAlarmTier(exact_platform, exact_permission_probe),
            BestEffortAlarmTier(best_effort_platform, clock),
        ],
        clock,
    )
    if in_process is not None:
        in_process.on_fire = scheduler.mark_fired

    return DailyRecalculationService(
        destinations,
        orchestrator,
        scheduler,
        state_store or build_state_store(settings),
        clock=clock,
        pacing_seconds=settings.pacing_seconds,
        interval_seconds=settings.recalculation_interval_seconds,
    )


async def run(settings: Optional[config.Settings] = None) -> None:
    """Start the service and keep the loop alive until cancelled."""
    settings = settings or config.settings
    service = build_service(settings)
    await service.start()
    try:
        await asyncio.Event().wait()
    finally:
        await service.stop()
        service.scheduler.cancel_all()


def main() -> None:
    setup_logging(level=config.settings.log_level, job_name="commute_timely")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")


if __name__ == "__main__":
    main()
