"""SQL-backed commute result store (SQLite locally, Postgres in the cloud).

Rows live in `commute_calculations` with a unique (destination_id,
calculation_date) pair; saving upserts so the latest calculation of a day
replaces the earlier one.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from commute_timely.domain import CommuteResult, StoredCommuteResult
from utils.logging_utils import get_tagged_logger, mask_db_url

logger = get_tagged_logger(__name__, tag="storage/sql_result_store")

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    destination_id TEXT NOT NULL,
    calculation_date TEXT NOT NULL,
    leave_time TEXT NOT NULL,
    arrival_time TEXT NOT NULL,
    duration_seconds INTEGER NOT NULL,
    weather_condition TEXT NOT NULL,
    weather_delay_seconds INTEGER NOT NULL,
    calculated_at TEXT NOT NULL,
    PRIMARY KEY (destination_id, calculation_date)
)
"""

UPSERT_SQL = """
INSERT INTO {table} (
    destination_id, calculation_date, leave_time, arrival_time,
    duration_seconds, weather_condition, weather_delay_seconds, calculated_at
) VALUES (
    :destination_id, :calculation_date, :leave_time, :arrival_time,
    :duration_seconds, :weather_condition, :weather_delay_seconds, :calculated_at
)
ON CONFLICT (destination_id, calculation_date) DO UPDATE SET
    leave_time = excluded.leave_time,
    arrival_time = excluded.arrival_time,
    duration_seconds = excluded.duration_seconds,
    weather_condition = excluded.weather_condition,
    weather_delay_seconds = excluded.weather_delay_seconds,
    calculated_at = excluded.calculated_at
"""

SELECT_COLUMNS = (
    "destination_id, calculation_date, leave_time, arrival_time, duration_seconds, "
    "weather_condition, weather_delay_seconds, calculated_at"
)


class SqlCommuteResultStore:
    """Persist commute results through a SQLAlchemy engine."""

    DEFAULT_TABLE = "commute_calculations"

    def __init__(self, engine: Engine, *, table: str = DEFAULT_TABLE, create_schema: bool = True) -> None:
        """Bind to an engine and create the results table when asked."""
        self.engine = engine
        self.table = table
        if create_schema:
            self.create_schema()

    @classmethod
    def from_url(cls, database_url: str, **kwargs) -> "SqlCommuteResultStore":
        """Create an engine from a URL and build the store."""
        logger.info("Connecting result store", extra={"db_url": mask_db_url(database_url)})
        engine = create_engine(database_url, future=True)
        return cls(engine, **kwargs)

    def create_schema(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(CREATE_TABLE_SQL.format(table=self.table)))

    @staticmethod
    def _row_to_stored(row: Mapping) -> StoredCommuteResult:
        """Convert a result row into a StoredCommuteResult."""
        calculated_at = dt.datetime.fromisoformat(row["calculated_at"])
        return StoredCommuteResult(
            destination_id=row["destination_id"],
            calculation_date=dt.date.fromisoformat(row["calculation_date"]),
            calculated_at=calculated_at,
            result=CommuteResult(
                leave_time=row["leave_time"],
                arrival_time=row["arrival_time"],
                duration_seconds=row["duration_seconds"],
                weather_condition=row["weather_condition"],
                weather_delay_seconds=row["weather_delay_seconds"],
            ),
        )

    def save_result(self, destination_id: str, calculation_date: dt.date, result: CommuteResult) -> None:
        """Upsert the day's result for a destination."""
        params = {
            "destination_id": destination_id,
            "calculation_date": calculation_date.isoformat(),
            "leave_time": result.leave_time,
            "arrival_time": result.arrival_time,
            "duration_seconds": result.duration_seconds,
            "weather_condition": result.weather_condition,
            "weather_delay_seconds": result.weather_delay_seconds,
            "calculated_at": dt.datetime.now(dt.timezone.utc).isoformat(),
        }
        try:
            with self.engine.begin() as conn:
                conn.execute(text(UPSERT_SQL.format(table=self.table)), params)
        except Exception as exc:
            logger.error("Failed to save commute result: %s", exc, extra={"destination_id": destination_id})
            raise

    def get_result(self, destination_id: str, calculation_date: dt.date) -> Optional[StoredCommuteResult]:
        sql = text(
            f"SELECT {SELECT_COLUMNS} FROM {self.table} "
            "WHERE destination_id = :destination_id AND calculation_date = :calculation_date"
        )
        with self.engine.connect() as conn:
            row = conn.execute(
                sql,
                {"destination_id": destination_id, "calculation_date": calculation_date.isoformat()},
            ).mappings().first()
        return self._row_to_stored(row) if row else None

    def list_results_for_date(self, calculation_date: dt.date) -> List[StoredCommuteResult]:
        sql = text(
            f"SELECT {SELECT_COLUMNS} FROM {self.table} "
            "WHERE calculation_date = :calculation_date ORDER BY calculated_at DESC"
        )
        with self.engine.connect() as conn:
            rows = conn.execute(sql, {"calculation_date": calculation_date.isoformat()}).mappings().all()
        return [self._row_to_stored(row) for row in rows]

    def delete_for_destination(self, destination_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text(f"DELETE FROM {self.table} WHERE destination_id = :destination_id"),
                {"destination_id": destination_id},
            )
