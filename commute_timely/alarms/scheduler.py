"""Per-destination alarm scheduling with an ordered exact → best-effort fallback.

The scheduler owns a table keyed by destination id holding at most one
ScheduledAlarm per destination. Scheduling always cancels the previous entry
first, so a destination never has more than one live alarm.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from commute_timely.alarms.base import AlarmTier
from commute_timely.domain import (
    TIER_STATES,
    AlarmState,
    CommuteResult,
    Destination,
    ScheduledAlarm,
    alarm_id_for,
)
from commute_timely.exceptions import NoViableAlarmTier
from commute_timely.formatting import alarm_message, alarm_title
from commute_timely.leave_time import project_daily_time
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="alarms/scheduler")


class AlarmScheduler:
    """Schedule, replace and cancel the leave-by alarm of each destination."""

    def __init__(self, tiers: Sequence[AlarmTier], clock: Callable[[], dt.datetime]) -> None:
        """`tiers` are tried in order; the first that accepts the alarm wins."""
        self.tiers = list(tiers)
        self.clock = clock
        self._alarms: Dict[str, ScheduledAlarm] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, destination_id: str) -> asyncio.Lock:
        lock = self._locks.get(destination_id)
        if lock is None:
            lock = self._locks[destination_id] = asyncio.Lock()
        return lock

    def trigger_time_for(self, leave_time: str) -> dt.datetime:
        """Next occurrence of `leave_time`, tomorrow if today's has passed."""
        return project_daily_time(leave_time, self.clock())

    async def schedule(self, destination: Destination, result: CommuteResult) -> ScheduledAlarm:
        """
        Replace the destination's alarm with one at `result.leave_time`.

        Raises NoViableAlarmTier when every tier is unavailable, refuses, or
        errors; the destination is then left unscheduled.
        """
        async with self._lock_for(destination.id):
            alarm_id = alarm_id_for(destination.id)
            trigger_time = self.trigger_time_for(result.leave_time)
            title = alarm_title(destination)
            message = alarm_message(result)

            self.cancel(destination.id)

            attempts: Dict[str, str] = {}
            for tier in self.tiers:
                name = tier.kind.value
                try:
                    available = await tier.is_available()
                except Exception as exc:
                    attempts[name] = f"availability check failed: {exc}"
                    continue
                if not available:
                    attempts[name] = "unavailable"
                    logger.debug("Alarm tier unavailable", extra={"tier": name, "alarm_id": alarm_id})
                    continue

                try:
                    ok = await tier.schedule(alarm_id, trigger_time, title, message)
                except Exception as exc:
                    attempts[name] = f"error: {exc}"
                    logger.warning(
                        "Alarm tier %s failed for %s: %s", name, destination.id, exc,
                        extra={"tier": name, "alarm_id": alarm_id},
                    )
                    continue
                if not ok:
                    attempts[name] = "rejected"
                    continue

                alarm = ScheduledAlarm(
                    id=alarm_id,
                    destination_id=destination.id,
                    trigger_time=trigger_time,
                    title=title,
                    message=message,
                    tier=tier.kind,
                    state=TIER_STATES[tier.kind],
                )
                self._alarms[destination.id] = alarm
                logger.info(
                    "Scheduled alarm for %s at %s via %s", destination.id, trigger_time.isoformat(), name,
                    extra={"alarm_id": alarm_id},
                )
                return alarm

            logger.error(
                "No alarm tier accepted %s: %s", destination.id, attempts,
                extra={"alarm_id": alarm_id},
            )
            raise NoViableAlarmTier(destination.id, attempts)

    def cancel(self, destination_id: str) -> None:
        """Cancel on every tier and forget the alarm. Safe when none exists."""
        alarm_id = alarm_id_for(destination_id)
        # The tier that holds the registration is not always known (e.g. after a restart).
        for tier in self.tiers:
            try:
                tier.cancel(alarm_id)
            except Exception as exc:
                logger.warning(
                    "Failed to cancel alarm on %s tier: %s", tier.kind.value, exc,
                    extra={"alarm_id": alarm_id},
                )
        if self._alarms.pop(destination_id, None) is not None:
            logger.info("Alarm cancelled", extra={"alarm_id": alarm_id})

    def forget(self, destination_id: str) -> None:
        """Cancel and drop all bookkeeping for a destination that no longer exists."""
        self.cancel(destination_id)
        lock = self._locks.get(destination_id)
        if lock is not None and not lock.locked():
            del self._locks[destination_id]

    def cancel_all(self) -> None:
        for destination_id in list(self._alarms):
            self.cancel(destination_id)

    def mark_fired(self, alarm_id: str) -> Optional[ScheduledAlarm]:
        """Record that the platform delivered an alarm.

        The record is kept as FIRED for inspection, but the destination reports
        UNSCHEDULED until the next sweep schedules it again.
        """
        for destination_id, alarm in self._alarms.items():
            if alarm.id == alarm_id and alarm.is_active:
                fired = alarm.model_copy(update={"state": AlarmState.FIRED, "is_active": False})
                self._alarms[destination_id] = fired
                return fired
        logger.debug("Fired alarm not tracked", extra={"alarm_id": alarm_id})
        return None

    def state_for(self, destination_id: str) -> AlarmState:
        alarm = self._alarms.get(destination_id)
        if alarm is None or not alarm.is_active:
            return AlarmState.UNSCHEDULED
        return alarm.state

    def get_alarm_for_destination(self, destination_id: str) -> Optional[ScheduledAlarm]:
        return self._alarms.get(destination_id)

    def get_scheduled_alarms(self) -> List[ScheduledAlarm]:
        return list(self._alarms.values())

    def active_alarm_ids(self) -> List[str]:
        return [alarm.id for alarm in self._alarms.values() if alarm.is_active]

    async def reschedule_all(
        self,
        destinations: Iterable[Destination],
        results: Mapping[str, CommuteResult],
    ) -> Dict[str, ScheduledAlarm]:
        """Reschedule every destination that has a result; failures are logged and skipped."""
        scheduled: Dict[str, ScheduledAlarm] = {}
        for destination in destinations:
            result = results.get(destination.id)
            if result is None:
                continue
            try:
                scheduled[destination.id] = await self.schedule(destination, result)
            except NoViableAlarmTier as exc:
                logger.error("Reschedule failed: %s", exc)
        return scheduled
