"""Protocols for platform alarm capabilities and the tiers built on them."""

from __future__ import annotations

import datetime as dt
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from commute_timely.domain import AlarmTierKind

ScheduleResult = Union[bool, Awaitable[bool]]


class AlarmPlatform(Protocol):
    """A native alarm primitive: exact wake alarms or scheduled local notifications."""

    def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> ScheduleResult:
        """Register an alert; return False (or raise) if the platform refuses."""

    def cancel(self, alarm_id: str) -> None:
        """Remove a registration; must not fail when nothing is registered."""


class AlarmTier(Protocol):
    """One rung of the scheduling fallback ladder."""

    kind: AlarmTierKind

    async def is_available(self) -> bool:
        """Return True if this tier may be used right now."""

    async def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> bool:
        """Try to register the alarm."""

    def cancel(self, alarm_id: str) -> None:
        """Remove any registration under this id."""


async def maybe_await(value: Any) -> Any:
    """Resolve platform results that may be plain values or awaitables."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class CallableAlarmPlatform(AlarmPlatform):
    """Wrap host-provided callables (e.g. native bridge functions) as a platform."""

    schedule_fn: Callable[[str, dt.datetime, str, str], ScheduleResult]
    cancel_fn: Optional[Callable[[str], None]] = None

    def schedule(self, alarm_id: str, trigger_time: dt.datetime, title: str, message: str) -> ScheduleResult:
        """Delegate to the configured schedule callable."""
        return self.schedule_fn(alarm_id, trigger_time, title, message)

    def cancel(self, alarm_id: str) -> None:
        """Delegate to the configured cancel callable, if any."""
        if self.cancel_fn is not None:
            self.cancel_fn(alarm_id)
