"""Shared resilience helpers for transient collaborator failures and payload guards."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

from aiohttp import ClientConnectionError, ClientResponseError, ServerTimeoutError

RETRYABLE_HTTP_STATUSES = {429, 500, 502, 503, 504}
THROTTLE_SHAPE_HINT = "possible rate-limit/throttle response"
MAX_RETRY_DELAY_SECONDS = 30

_T = TypeVar("_T")


def expect_dict(value: object, context: str) -> dict:
    if isinstance(value, dict):
        return value
    value_type = type(value).__name__
    raise ValueError(f"{context} has unexpected type '{value_type}' ({THROTTLE_SHAPE_HINT})")


def optional_str(container: dict, key: str) -> Optional[str]:
    """String field, with blanks and the "N/A" placeholder read as missing."""
    value = container.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.upper() == "N/A":
        return None
    return value


def is_retryable_exception(exc: Exception) -> bool:
    return (
        isinstance(exc, (asyncio.TimeoutError, ClientConnectionError, ServerTimeoutError))
        or (isinstance(exc, ClientResponseError) and exc.status in RETRYABLE_HTTP_STATUSES)
        or (isinstance(exc, ValueError) and THROTTLE_SHAPE_HINT in str(exc).lower())
    )


def retry_delay_seconds(attempt: int, retry_after: str | None = None) -> int:
    if retry_after:
        try:
            value = int(float(retry_after))
        except (TypeError, ValueError):
            value = 0
        if value > 0:
            return min(value, MAX_RETRY_DELAY_SECONDS)
    return min(2 ** attempt, MAX_RETRY_DELAY_SECONDS)


async def run_with_retries(
    operation: Callable[[], Awaitable[_T]],
    *,
    max_attempts: int,
    on_retry: Callable[[int, int, int, Exception], None] | None = None,
) -> _T:
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts or not is_retryable_exception(exc):
                raise
            retry_after = None
            if isinstance(exc, ClientResponseError) and exc.headers:
                retry_after = exc.headers.get("Retry-After")
            delay = retry_delay_seconds(attempt, retry_after)
            if on_retry is not None:
                on_retry(attempt, max_attempts, delay, exc)
            await asyncio.sleep(delay)
    raise RuntimeError("Unreachable retry exit")
