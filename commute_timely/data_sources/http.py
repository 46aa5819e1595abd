"""Shared HTTP session for the routing and weather clients.

Responses are never cached: every recalculation must see current traffic
and weather.
"""
from __future__ import annotations

import requests
from retry_requests import retry

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/http")


def build_session(retries: int = 5) -> requests.Session:
    """Return a session that retries transient failures with backoff."""
    logger.debug("Built HTTP session", extra={"retries": retries})
    return retry(requests.Session(), retries=retries, backoff_factor=0.2)


session = build_session()
