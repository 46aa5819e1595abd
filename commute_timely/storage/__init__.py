"""Storage backends for destinations, commute results and recalculation state."""

from .base import CommuteResultStore, DestinationRepository, RecalculationStateStore
from .factory import build_result_store, build_state_store
from .memory import InMemoryCommuteResultStore, InMemoryDestinationRepository, InMemoryRecalculationStateStore
from .redis import RedisRecalculationStateStore
from .sql import SqlCommuteResultStore

__all__ = [
    "CommuteResultStore",
    "DestinationRepository",
    "RecalculationStateStore",
    "build_result_store",
    "build_state_store",
    "InMemoryCommuteResultStore",
    "InMemoryDestinationRepository",
    "InMemoryRecalculationStateStore",
    "RedisRecalculationStateStore",
    "SqlCommuteResultStore",
]
