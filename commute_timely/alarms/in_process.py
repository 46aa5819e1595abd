"""Best-effort alarm platform for Python hosts, backed by asyncio timers.

Timers live only as long as the event loop, so alarms are lost if the host
process exits; the next recalculation sweep re-arms them.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Callable, Dict, Optional

from commute_timely.leave_time import seconds_until
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="alarms/in_process")

Notifier = Callable[[str, str, str], None]


def log_notifier(alarm_id: str, title: str, message: str) -> None:
    """Default notifier: emit the reminder through logging."""
    logger.info("%s %s", title, message, extra={"alarm_id": alarm_id})


class InProcessAlarmPlatform:
    """Fire reminders from the running event loop at (roughly) the trigger instant."""

    def __init__(
        self,
        clock: Callable[[], dt.datetime],
        notifier: Notifier = log_notifier,
        on_fire: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.clock = clock
        self.notifier = notifier
        self.on_fire = on_fire
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> bool:
        """Arm a timer; returns False when the instant has already passed."""
        delay = seconds_until(trigger_time, self.clock())
        if delay <= 0:
            return False
        loop = asyncio.get_running_loop()
        self.cancel(alarm_id)
        self._handles[alarm_id] = loop.call_later(delay, self._fire, alarm_id, title, message)
        logger.debug("Armed in-process alarm", extra={"alarm_id": alarm_id, "delay_seconds": delay})
        return True

    def cancel(self, alarm_id: str) -> None:
        handle = self._handles.pop(alarm_id, None)
        if handle is not None:
            handle.cancel()

    def pending(self) -> list[str]:
        return sorted(self._handles)

    def _fire(self, alarm_id: str, title: str, message: str) -> None:
        self._handles.pop(alarm_id, None)
        try:
            self.notifier(alarm_id, title, message)
        except Exception as exc:
            logger.error("Notifier failed: %s", exc, extra={"alarm_id": alarm_id})
        if self.on_fire is not None:
            self.on_fire(alarm_id)
