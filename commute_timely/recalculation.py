"""Daily recalculation service.

Runs the orchestrator + alarm scheduler over every active destination at most
once per calendar day. Triggers are process start, app foreground and a
coarse periodic timer; `force_recalculation()` bypasses the daily guard.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import threading
from typing import Callable, Dict, Optional

from commute_timely.alarms.scheduler import AlarmScheduler
from commute_timely.domain import RecalculationRecord, SweepStatus, TaskInfo
from commute_timely.exceptions import CommuteCalculationFailed, NoViableAlarmTier, SweepAlreadyRunning
from commute_timely.orchestrator import CommuteOrchestrator
from commute_timely.storage.base import DestinationRepository, RecalculationStateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="recalculation")

DEFAULT_PACING_SECONDS = 1.0
DEFAULT_INTERVAL_SECONDS = 6 * 60 * 60


class SweepGuard:
    """Non-reentrant "a sweep is running" flag with an atomic check-and-set."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def try_begin(self) -> bool:
        """Claim the guard; False if a sweep already holds it."""
        with self._lock:
            if self._running:
                return False
            self._running = True
            return True

    def end(self) -> None:
        with self._lock:
            self._running = False


class DailyRecalculationService:
    """Process-wide controller for the once-a-day commute sweep."""

    def __init__(
        self,
        destinations: DestinationRepository,
        orchestrator: CommuteOrchestrator,
        scheduler: AlarmScheduler,
        state_store: RecalculationStateStore,
        *,
        clock: Callable[[], dt.datetime],
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.destinations = destinations
        self.orchestrator = orchestrator
        self.scheduler = scheduler
        self.state_store = state_store
        self.clock = clock
        self.pacing_seconds = pacing_seconds
        self.interval_seconds = interval_seconds
        self.guard = SweepGuard()
        self._periodic_task: Optional[asyncio.Task] = None

    # -- triggers -----------------------------------------------------------

    async def start(self) -> Optional[RecalculationRecord]:
        """Process-start trigger; also arms the periodic safety-net timer."""
        logger.info("Starting daily recalculation service")
        if self._periodic_task is None or self._periodic_task.done():
            self._periodic_task = asyncio.create_task(self._periodic_loop(), name="commute-recalculation-timer")
        return await self.check_and_run("startup")

    async def stop(self) -> None:
        """Cancel the periodic timer. A sweep in flight is not interrupted."""
        task, self._periodic_task = self._periodic_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Daily recalculation service stopped")

    async def on_foreground(self) -> Optional[RecalculationRecord]:
        """App moved to the foreground."""
        return await self.check_and_run("foreground")

    async def _periodic_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.check_and_run("timer")
            except Exception as exc:
                logger.error("Periodic recalculation check failed: %s", exc)

    # -- guard ------------------------------------------------------------------

    async def check_and_run(self, trigger: str = "manual") -> Optional[RecalculationRecord]:
        """Run a sweep unless one already completed today. Returns the new record, or None if skipped."""
        today = self.clock().date()
        record = self.state_store.load_record()
        if record is not None and record.last_calculation_date == today:
            logger.debug("Commute already calculated today", extra={"trigger": trigger})
            return None

        logger.info("Running daily commute calculation", extra={"trigger": trigger})
        try:
            return await self.run_sweep()
        except SweepAlreadyRunning:
            logger.debug("Sweep already running; dropping trigger", extra={"trigger": trigger})
            return None

    async def force_recalculation(self) -> Optional[RecalculationRecord]:
        """Clear the date guard and sweep now, even if today's sweep already ran."""
        logger.info("Forcing immediate recalculation")
        try:
            self.state_store.clear_calculation_date()
        except Exception as exc:
            logger.error("Failed to clear last calculation date: %s", exc)
        try:
            return await self.run_sweep()
        except SweepAlreadyRunning:
            logger.debug("Sweep already running; dropping forced recalculation")
            return None

    def get_last_calculation_info(self) -> Optional[RecalculationRecord]:
        return self.state_store.load_record()

    def on_destination_removed(self, destination_id: str) -> None:
        """A destination was deleted or deactivated; drop its alarm."""
        self.scheduler.forget(destination_id)

    # -- sweep ------------------------------------------------------------------

    def _persist(self, record: RecalculationRecord) -> None:
        """Write the record; a failed write is logged and the sweep result still returned."""
        try:
            self.state_store.persist_record(record)
        except Exception as exc:
            logger.error("Failed to persist recalculation record: %s", exc)

    async def run_sweep(self) -> RecalculationRecord:
        """
        Calculate and schedule every active destination, one at a time.

        Raises SweepAlreadyRunning if another sweep holds the guard. Failures
        of individual destinations are recorded in the task info and never
        abort the sweep.
        """
        if not self.guard.try_begin():
            raise SweepAlreadyRunning()

        try:
            started = self.clock()
            previous = self.state_store.load_record()
            try:
                destinations = self.destinations.list_active_destinations()
            except Exception as exc:
                logger.error("Background calculation failed: %s", exc)
                record = RecalculationRecord(
                    last_calculation_date=previous.last_calculation_date if previous else None,
                    last_task_info=TaskInfo(
                        timestamp=self.clock(),
                        status=SweepStatus.FAILED,
                        error=str(exc) or exc.__class__.__name__,
                    ),
                )
                self._persist(record)
                return record

            if not destinations:
                logger.info("No active destinations; nothing to calculate")

            processed = 0
            failures: Dict[str, str] = {}
            for index, destination in enumerate(destinations):
                if index and self.pacing_seconds > 0:
                    await asyncio.sleep(self.pacing_seconds)
                try:
                    result = await self.orchestrator.calculate_commute(destination)
                    await self.scheduler.schedule(destination, result)
                    processed += 1
                except (CommuteCalculationFailed, NoViableAlarmTier) as exc:
                    failures[destination.id] = str(exc)
                    logger.error("%s", exc, extra={"destination_id": destination.id})
                except Exception as exc:
                    failures[destination.id] = str(exc) or exc.__class__.__name__
                    logger.exception("Unexpected failure for destination %s", destination.id)

            record = RecalculationRecord(
                last_calculation_date=started.date(),
                last_task_info=TaskInfo(
                    timestamp=self.clock(),
                    destinations_processed=processed,
                    status=SweepStatus.COMPLETED,
                    failures=failures,
                ),
            )
            self._persist(record)
            logger.info(
                "Background calculation completed for %d of %d destinations", processed, len(destinations),
            )
            return record
        finally:
            self.guard.end()
