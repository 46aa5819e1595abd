"""Redis-backed recalculation state so the daily guard survives restarts."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from commute_timely.domain import RecalculationRecord
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="storage/redis_state_store")


class RedisRecalculationStateStore:
    """Store the RecalculationRecord as JSON under a single key."""

    def __init__(self, client, key: str = "commute_timely:recalculation") -> None:
        """Initialize with a Redis client and the key holding the record."""
        logger.debug("Initializing RedisRecalculationStateStore")
        self.client = client
        self.key = key

    def _safe_load(self, raw: bytes | str) -> Optional[RecalculationRecord]:
        """Deserialize JSON into a record, returning None when it is corrupt."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return RecalculationRecord.model_validate_json(raw)
        except (UnicodeDecodeError, ValidationError) as exc:
            logger.error("Failed to deserialize recalculation record: %s", exc)
            return None

    def load_record(self) -> Optional[RecalculationRecord]:
        """Fetch the record, or None if missing, unreadable or Redis is down."""
        try:
            raw = self.client.get(self.key)
        except Exception as exc:
            logger.error("Failed to read recalculation record from Redis: %s", exc)
            return None
        if not raw:
            return None
        return self._safe_load(raw)

    def persist_record(self, record: RecalculationRecord) -> None:
        """Overwrite the stored record."""
        payload = record.model_dump_json().encode("utf-8")
        try:
            self.client.set(self.key, payload)
        except Exception as exc:
            logger.error("Failed to write recalculation record to Redis: %s", exc)
            raise

    def clear_calculation_date(self) -> None:
        """Drop the date guard while keeping the last task info."""
        record = self.load_record()
        if record is None:
            return
        self.persist_record(record.model_copy(update={"last_calculation_date": None}))
