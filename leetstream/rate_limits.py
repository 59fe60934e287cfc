"""Shared per-host request pacing for the torrent index."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from urllib.parse import urlparse

# Minimum interval between calls to the same index host.
INDEX_MIN_INTERVAL_SECONDS = 0.5
INDEX_WAIT_LOG_THRESHOLD_SECONDS = 2.0


@dataclass
class _HostBucket:
    lock: asyncio.Lock
    last_request_started: float = 0.0


_host_buckets: dict[str, _HostBucket] = {}


def _normalize_host_key(base_url: str) -> str:
    parsed = urlparse(base_url.strip())
    host = parsed.netloc or parsed.path
    return host.rstrip("/").lower()


def _get_or_create_bucket(base_url: str) -> _HostBucket:
    key = _normalize_host_key(base_url)
    bucket = _host_buckets.get(key)
    if bucket is None:
        bucket = _HostBucket(lock=asyncio.Lock())
        _host_buckets[key] = bucket
    return bucket


async def enforce_min_interval(
    base_url: str,
    min_interval_seconds: float = INDEX_MIN_INTERVAL_SECONDS,
) -> float:
    """
    Enforce shared per-host spacing.

    Returns the wait time applied (seconds).
    """
    bucket = _get_or_create_bucket(base_url)
    async with bucket.lock:
        now = time.monotonic()
        effective_min_interval = max(0.0, float(min_interval_seconds))
        wait = 0.0
        if bucket.last_request_started:
            wait = max(effective_min_interval - (now - bucket.last_request_started), 0.0)
        if wait > 0:
            await asyncio.sleep(wait)
            now = time.monotonic()
        bucket.last_request_started = now
        return wait


def _reset_rate_limits_for_tests() -> None:
    """Test helper to clear shared limiter state."""
    _host_buckets.clear()
