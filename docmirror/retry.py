"""Retry policy for HTTP collaborators."""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


def is_transient_http_error(exc: BaseException) -> bool:
    """Return True for failures worth retrying: transport errors, 429 and 5xx."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def http_retrying(attempts: int, backoff: float, max_wait: float = 30) -> Retrying:
    """Build a Retrying controller for transient HTTP failures.

    The last exception is re-raised once ``attempts`` are exhausted.
    """
    return Retrying(
        reraise=True,
        retry=retry_if_exception(is_transient_http_error),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=backoff, min=backoff, max=max_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
