"""Exceptions raised by the commute timing engine."""

from __future__ import annotations

from typing import Dict, Optional


class CommuteTimelyError(Exception):
    """Base class for engine errors."""


class CommuteCalculationFailed(CommuteTimelyError):
    """The orchestration pipeline for one destination did not produce a result."""

    def __init__(self, destination_id: str, cause: Optional[BaseException] = None, message: str = "") -> None:
        self.destination_id = destination_id
        self.cause = cause
        detail = message or (str(cause) if cause else "unknown error")
        super().__init__(f"Failed to calculate commute for destination '{destination_id}': {detail}")


class EstimateFetchFailed(CommuteCalculationFailed):
    """The travel or weather collaborator failed or timed out."""

    def __init__(self, destination_id: str, cause: Optional[BaseException] = None, source: str = "travel") -> None:
        self.source = source
        if isinstance(cause, TimeoutError):
            message = f"{source} fetch timed out"
        else:
            message = f"{source} fetch failed: {cause}" if cause else f"{source} fetch failed"
        super().__init__(destination_id, cause, message)


class NoViableAlarmTier(CommuteTimelyError):
    """Neither exact nor best-effort scheduling accepted the alarm."""

    def __init__(self, destination_id: str, attempts: Optional[Dict[str, str]] = None) -> None:
        self.destination_id = destination_id
        self.attempts = dict(attempts or {})
        tried = ", ".join(f"{tier}: {reason}" for tier, reason in self.attempts.items()) or "no tiers configured"
        super().__init__(f"No alarm tier could schedule destination '{destination_id}' ({tried})")


class SweepAlreadyRunning(CommuteTimelyError):
    """A recalculation sweep is already in progress; the trigger is dropped."""
