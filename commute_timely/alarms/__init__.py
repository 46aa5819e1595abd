"""Alarm tiers and the per-destination scheduler."""

from .base import AlarmPlatform, AlarmTier, CallableAlarmPlatform
from .in_process import InProcessAlarmPlatform
from .scheduler import AlarmScheduler
from .tiers import BestEffortAlarmTier, ExactAlarmTier

__all__ = [
    "AlarmPlatform",
    "AlarmTier",
    "AlarmScheduler",
    "BestEffortAlarmTier",
    "CallableAlarmPlatform",
    "ExactAlarmTier",
    "InProcessAlarmPlatform",
]
