"""Domain vocabulary and strict schemas for commute timing and alarms.

This module defines the types that flow between the delay model, the
leave-time calculator, the orchestrator, the alarm scheduler and the
recalculation service. No interpretation logic lives here beyond field
validation.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


def _validate_hhmm(value: str) -> str:
    if not HHMM_PATTERN.match(value):
        raise ValueError(f"Expected HH:MM time of day, got {value!r}")
    return value


class AlarmTierKind(str, Enum):
    """Platform capability used to deliver an alarm."""
    EXACT = "exact"
    BEST_EFFORT = "best_effort"


class AlarmState(str, Enum):
    """Per-destination alarm lifecycle."""
    UNSCHEDULED = "unscheduled"
    SCHEDULED_EXACT = "scheduled_exact"
    SCHEDULED_INEXACT = "scheduled_inexact"
    FIRED = "fired"


TIER_STATES: Dict[AlarmTierKind, AlarmState] = {
    AlarmTierKind.EXACT: AlarmState.SCHEDULED_EXACT,
    AlarmTierKind.BEST_EFFORT: AlarmState.SCHEDULED_INEXACT,
}


class SweepStatus(str, Enum):
    """Outcome of one recalculation sweep."""
    COMPLETED = "completed"
    FAILED = "failed"


class Coordinates(_StrictBaseModel):
    """WGS84 point."""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class Destination(_StrictBaseModel):
    """A place the user commutes to, arriving at the same wall-clock time every day."""
    id: str
    name: str
    arrival_time: str
    coordinates: Coordinates
    is_active: bool = True

    @field_validator("arrival_time")
    @classmethod
    def check_arrival_time(cls, v: str) -> str:
        """Arrival times are zero-padded 24h HH:MM."""
        return _validate_hhmm(v)


class TravelEstimate(_StrictBaseModel):
    """Routing collaborator output for one origin/destination pair."""
    duration_seconds: int = Field(ge=0)
    distance_meters: int = Field(default=0, ge=0)


class WeatherSnapshot(_StrictBaseModel):
    """Current conditions at a destination."""
    description: str
    precipitation_probability: float = Field(ge=0.0, le=100.0)
    wind_speed: float | None = Field(default=None, ge=0.0)  # m/s
    temperature_c: float | None = None


class DelayConfig(_StrictBaseModel):
    """Per-category weather delays (minutes) and the thresholds that trigger them."""
    rain: int = Field(default=5, ge=0)
    snow: int = Field(default=15, ge=0)
    storm: int = Field(default=20, ge=0)
    fog: int = Field(default=10, ge=0)
    heavy_rain: int = Field(default=10, ge=0)
    wind_surcharge: int = Field(default=5, ge=0)
    precipitation_threshold: float = 70.0
    heavy_precipitation_threshold: float = 90.0
    wind_speed_threshold: float = 15.0

    def updated(self, **changes) -> "DelayConfig":
        """Return a copy with some fields replaced (validated)."""
        return DelayConfig.model_validate({**self.model_dump(), **changes})


DEFAULT_DELAY_CONFIG = DelayConfig()


class CommuteResult(_StrictBaseModel):
    """Leave-by computation for one destination and one run."""
    leave_time: str
    duration_seconds: int = Field(ge=0)
    weather_condition: str
    weather_delay_seconds: int = Field(ge=0)
    arrival_time: str

    @field_validator("leave_time", "arrival_time")
    @classmethod
    def check_times(cls, v: str) -> str:
        return _validate_hhmm(v)


class StoredCommuteResult(_StrictBaseModel):
    """A CommuteResult as persisted, keyed by destination and calendar day."""
    destination_id: str
    calculation_date: date
    result: CommuteResult
    calculated_at: datetime


class ScheduledAlarm(_StrictBaseModel):
    """The single live (or most recently fired) alarm of a destination."""
    id: str
    destination_id: str
    trigger_time: datetime
    title: str
    message: str
    tier: AlarmTierKind
    state: AlarmState
    is_active: bool = True


class TaskInfo(_StrictBaseModel):
    """Observability record of the most recent sweep."""
    timestamp: datetime
    destinations_processed: int = Field(default=0, ge=0)
    status: SweepStatus
    error: str | None = None
    failures: Dict[str, str] = Field(default_factory=dict)


class RecalculationRecord(_StrictBaseModel):
    """Persisted guard state for the daily recalculation service."""
    last_calculation_date: date | None = None
    last_task_info: TaskInfo | None = None


def alarm_id_for(destination_id: str) -> str:
    """Deterministic platform alarm id of a destination."""
    return f"commute_{destination_id}"
