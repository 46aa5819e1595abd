"""Pick storage backends from configuration at startup."""

from __future__ import annotations

import redis

from commute_timely import config
from commute_timely.storage.base import CommuteResultStore, RecalculationStateStore
from commute_timely.storage.memory import InMemoryCommuteResultStore, InMemoryRecalculationStateStore
from commute_timely.storage.redis import RedisRecalculationStateStore
from commute_timely.storage.sql import SqlCommuteResultStore
from utils.logging_utils import get_tagged_logger, mask_db_url

logger = get_tagged_logger(__name__, tag="storage/factory")


def build_state_store(settings: config.Settings | None = None) -> RecalculationStateStore:
    """Use Redis when configured and reachable, otherwise keep state in memory."""
    settings = settings or config.settings
    if settings.state_redis_url:
        try:
            client = redis.Redis.from_url(settings.state_redis_url)
            client.ping()
            logger.info("Using RedisRecalculationStateStore", extra={"redis_url": mask_db_url(settings.state_redis_url)})
            return RedisRecalculationStateStore(client, key=settings.state_redis_key)
        except redis.RedisError as exc:
            logger.warning(
                "Falling back to InMemoryRecalculationStateStore (Redis unavailable)",
                extra={"error": str(exc)},
            )
    return InMemoryRecalculationStateStore()


def build_result_store(settings: config.Settings | None = None) -> CommuteResultStore:
    """Use the SQL store when a database URL is configured."""
    settings = settings or config.settings
    if settings.results_database_url:
        return SqlCommuteResultStore.from_url(settings.results_database_url)
    logger.info("No results_database_url configured; using InMemoryCommuteResultStore")
    return InMemoryCommuteResultStore()
