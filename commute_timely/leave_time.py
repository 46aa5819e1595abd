"""Leave-by time arithmetic for recurring daily arrival times."""

from __future__ import annotations

import datetime as dt
from typing import Optional, Tuple

from commute_timely.domain import HHMM_PATTERN

DEFAULT_BUFFER_SECONDS = 300


def parse_hhmm(value: str) -> Tuple[int, int]:
    """Split a zero-padded `HH:MM` string into (hour, minute)."""
    match = HHMM_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Expected HH:MM time of day, got {value!r}")
    return int(match.group(1)), int(match.group(2))


def seconds_until(instant: dt.datetime, now: dt.datetime) -> float:
    """Real seconds from `now` to `instant`, correct across DST changes.

    Aware datetimes sharing one tzinfo subtract as wall-clock times, so both
    sides are moved to UTC first.
    """
    return (instant.astimezone(dt.timezone.utc) - now.astimezone(dt.timezone.utc)).total_seconds()


def format_hhmm(instant: dt.datetime) -> str:
    """Format an instant as local `HH:MM`."""
    return instant.strftime("%H:%M")


def _local_now(now: Optional[dt.datetime]) -> dt.datetime:
    if now is None:
        return dt.datetime.now().astimezone()
    if now.tzinfo is None:
        # Naive input is taken as local wall-clock time.
        return now.astimezone()
    return now


def project_daily_time(hhmm: str, now: Optional[dt.datetime] = None) -> dt.datetime:
    """
    Project a recurring time of day onto its next occurrence.

    The time is placed on `now`'s date in `now`'s timezone; when that instant
    is at or before `now` it moves to the same wall-clock time tomorrow.
    """
    now = _local_now(now)
    hour, minute = parse_hhmm(hhmm)
    projected = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if seconds_until(projected, now) <= 0:
        tomorrow = projected.date() + dt.timedelta(days=1)
        projected = projected.replace(year=tomorrow.year, month=tomorrow.month, day=tomorrow.day)
    return projected


def compute_leave_instant(
    arrival_time: str,
    travel_seconds: int,
    weather_delay_seconds: int,
    buffer_seconds: int = DEFAULT_BUFFER_SECONDS,
    *,
    now: Optional[dt.datetime] = None,
) -> dt.datetime:
    """Return the absolute leave-by instant for the next occurrence of `arrival_time`."""
    for name, value in (
        ("travel_seconds", travel_seconds),
        ("weather_delay_seconds", weather_delay_seconds),
        ("buffer_seconds", buffer_seconds),
    ):
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")

    arrival = project_daily_time(arrival_time, now)
    total = dt.timedelta(seconds=travel_seconds + weather_delay_seconds + buffer_seconds)
    # Subtract on UTC so DST changes between leave and arrival are honoured.
    leave_utc = arrival.astimezone(dt.timezone.utc) - total
    return leave_utc.astimezone(arrival.tzinfo)


def compute_leave_time(
    arrival_time: str,
    travel_seconds: int,
    weather_delay_seconds: int,
    buffer_seconds: int = DEFAULT_BUFFER_SECONDS,
    *,
    now: Optional[dt.datetime] = None,
) -> str:
    """Return the leave-by time as local `HH:MM`."""
    return format_hhmm(
        compute_leave_instant(
            arrival_time,
            travel_seconds,
            weather_delay_seconds,
            buffer_seconds,
            now=now,
        )
    )
