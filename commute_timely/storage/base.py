"""Shared protocols for destination, result and recalculation-state storage."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from commute_timely.domain import CommuteResult, Destination, RecalculationRecord, StoredCommuteResult


class DestinationRepository(Protocol):
    """Read path into destination storage."""

    def list_active_destinations(self) -> List[Destination]:
        """Return destinations with `is_active` set."""


class CommuteResultStore(Protocol):
    """Per-day commute results, one row per (destination, date)."""

    def save_result(self, destination_id: str, calculation_date: date, result: CommuteResult) -> None:
        """Insert or replace the result for this destination and day."""

    def get_result(self, destination_id: str, calculation_date: date) -> Optional[StoredCommuteResult]:
        """Return the stored result, or None."""

    def list_results_for_date(self, calculation_date: date) -> List[StoredCommuteResult]:
        """Return all results of a day, newest first."""

    def delete_for_destination(self, destination_id: str) -> None:
        """Drop every stored result of a destination."""


class RecalculationStateStore(Protocol):
    """Persistence for the daily recalculation guard and last sweep status."""

    def load_record(self) -> Optional[RecalculationRecord]:
        """Return the persisted record, or None when absent or unreadable."""

    def persist_record(self, record: RecalculationRecord) -> None:
        """Replace the persisted record."""

    def clear_calculation_date(self) -> None:
        """Forget the last calculation date so the next trigger runs a sweep."""
