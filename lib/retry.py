"""Exponential back-off for idempotent operations.

Independent of the request executor's own 401 handling; wrap calls with it
where transient failures (429, 5xx, network errors) should be ridden out.

Usage:
    members = with_retry(lambda: client.list_members(), max_attempts=5)

    @retrying(max_attempts=4, initial_delay=0.5)
    def fetch():
        return client.get_organization()
"""

import functools
import logging
import time
from typing import Callable, Optional, TypeVar

import requests

from .errors import NON_RETRYABLE_STATUSES

logger = logging.getLogger(__name__)

T = TypeVar("T")


def status_of(exc: BaseException) -> Optional[int]:
    """Best-effort HTTP status for an exception (None when it has none)."""
    status = getattr(exc, "status_code", None)
    if status is None and isinstance(exc, requests.HTTPError) and exc.response is not None:
        status = exc.response.status_code
    return status


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Run operation, retrying with delays initial_delay * 2**n between attempts.

    Failures with status 400/401/403/404 are re-raised immediately. After
    max_attempts the last error is re-raised.
    """
    sleep = sleep or time.sleep
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            return operation()
        except Exception as exc:
            status = status_of(exc)
            if status in NON_RETRYABLE_STATUSES:
                raise
            if attempt == max_attempts - 1:
                logger.warning("Giving up after %d attempts: %s", max_attempts, exc)
                raise
            delay = initial_delay * (2 ** attempt)
            logger.info(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt + 1, max_attempts, status or type(exc).__name__, delay,
            )
            sleep(delay)


def retrying(max_attempts: int = 3, initial_delay: float = 1.0):
    """Decorator form of with_retry."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return with_retry(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
            )

        return wrapper

    return decorator
