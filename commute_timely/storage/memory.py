"""In-memory storage backends, intended for development, tests and single-process hosts."""

from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from commute_timely.domain import CommuteResult, Destination, RecalculationRecord, StoredCommuteResult
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="storage/memory")


class InMemoryDestinationRepository:
    """Thread-safe destination table keyed by id."""

    def __init__(self, destinations: Iterable[Destination] = ()) -> None:
        self._destinations: Dict[str, Destination] = {}
        self._lock = threading.Lock()
        for destination in destinations:
            self.upsert(destination)

    def upsert(self, destination: Destination) -> None:
        with self._lock:
            self._destinations[destination.id] = destination

    def remove(self, destination_id: str) -> None:
        with self._lock:
            self._destinations.pop(destination_id, None)

    def get(self, destination_id: str) -> Optional[Destination]:
        with self._lock:
            return self._destinations.get(destination_id)

    def list_active_destinations(self) -> List[Destination]:
        """Return active destinations in insertion order."""
        with self._lock:
            return [d for d in self._destinations.values() if d.is_active]


class InMemoryCommuteResultStore:
    """Thread-safe result table with (destination_id, date) as the unique key."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryCommuteResultStore")
        self._rows: Dict[Tuple[str, date], StoredCommuteResult] = {}
        self._lock = threading.Lock()

    def save_result(self, destination_id: str, calculation_date: date, result: CommuteResult) -> None:
        """Insert or replace; the last write for a day wins."""
        row = StoredCommuteResult(
            destination_id=destination_id,
            calculation_date=calculation_date,
            result=result,
            calculated_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._rows[(destination_id, calculation_date)] = row

    def get_result(self, destination_id: str, calculation_date: date) -> Optional[StoredCommuteResult]:
        with self._lock:
            return self._rows.get((destination_id, calculation_date))

    def list_results_for_date(self, calculation_date: date) -> List[StoredCommuteResult]:
        with self._lock:
            rows = [row for (_, day), row in self._rows.items() if day == calculation_date]
        return sorted(rows, key=lambda row: row.calculated_at, reverse=True)

    def delete_for_destination(self, destination_id: str) -> None:
        with self._lock:
            for key in [k for k in self._rows if k[0] == destination_id]:
                self._rows.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


class InMemoryRecalculationStateStore:
    """Process-local recalculation record; lost on restart."""

    def __init__(self, record: Optional[RecalculationRecord] = None) -> None:
        self._record = record
        self._lock = threading.Lock()

    def load_record(self) -> Optional[RecalculationRecord]:
        with self._lock:
            return self._record.model_copy(deep=True) if self._record else None

    def persist_record(self, record: RecalculationRecord) -> None:
        with self._lock:
            self._record = record.model_copy(deep=True)

    def clear_calculation_date(self) -> None:
        """Drop the date guard but keep the last sweep status for display."""
        with self._lock:
            if self._record is not None:
                self._record = self._record.model_copy(update={"last_calculation_date": None})
