"""Exact and best-effort alarm tiers."""

from __future__ import annotations

import datetime as dt
from typing import Awaitable, Callable, Optional, Union

from commute_timely.alarms.base import AlarmPlatform, maybe_await
from commute_timely.domain import AlarmTierKind
from commute_timely.leave_time import seconds_until
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="alarms/tiers")

PermissionProbe = Callable[[], Union[bool, Awaitable[bool]]]
Clock = Callable[[], dt.datetime]


class ExactAlarmTier:
    """Platform wake alarm that fires at the exact instant, permission allowing."""

    kind = AlarmTierKind.EXACT

    def __init__(self, platform: Optional[AlarmPlatform], permission_probe: Optional[PermissionProbe] = None) -> None:
        self.platform = platform
        self.permission_probe = permission_probe

    async def is_available(self) -> bool:
        """Available when a platform exists and exact-alarm permission is granted."""
        if self.platform is None:
            return False
        if self.permission_probe is None:
            return True
        try:
            return bool(await maybe_await(self.permission_probe()))
        except Exception as exc:
            logger.warning("Exact alarm permission check failed; treating as denied", extra={"error": str(exc)})
            return False

    async def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> bool:
        if self.platform is None:
            return False
        ok = bool(await maybe_await(self.platform.schedule(alarm_id, trigger_time, title, message)))
        logger.info(
            "Exact alarm %s", "scheduled" if ok else "rejected",
            extra={"alarm_id": alarm_id, "trigger_time": trigger_time.isoformat()},
        )
        return ok

    def cancel(self, alarm_id: str) -> None:
        if self.platform is not None:
            self.platform.cancel(alarm_id)


class BestEffortAlarmTier:
    """Scheduled local notification with no precision guarantee."""

    kind = AlarmTierKind.BEST_EFFORT

    def __init__(self, platform: Optional[AlarmPlatform], clock: Clock) -> None:
        self.platform = platform
        self.clock = clock

    async def is_available(self) -> bool:
        return self.platform is not None

    async def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> bool:
        """Register the notification; refuses trigger times that already passed."""
        if self.platform is None:
            return False
        if seconds_until(trigger_time, self.clock()) <= 0:
            logger.warning(
                "Refusing to schedule notification in the past",
                extra={"alarm_id": alarm_id, "trigger_time": trigger_time.isoformat()},
            )
            return False
        ok = bool(await maybe_await(self.platform.schedule(alarm_id, trigger_time, title, message)))
        logger.info(
            "Best-effort notification %s", "scheduled" if ok else "rejected",
            extra={"alarm_id": alarm_id, "trigger_time": trigger_time.isoformat()},
        )
        return ok

    def cancel(self, alarm_id: str) -> None:
        if self.platform is not None:
            self.platform.cancel(alarm_id)
