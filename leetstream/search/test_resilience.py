from __future__ import annotations

import asyncio

import aiohttp
import pytest

from leetstream.search import resilience


def test_expect_dict_and_optional_str() -> None:
    assert resilience.expect_dict({"a": 1}, "payload") == {"a": 1}
    with pytest.raises(ValueError, match="throttle"):
        resilience.expect_dict("<html>", "payload")

    payload = {"Title": "  Up ", "Year": "N/A", "Blank": "", "Count": 3}
    assert resilience.optional_str(payload, "Title") == "Up"
    assert resilience.optional_str(payload, "Year") is None
    assert resilience.optional_str(payload, "Blank") is None
    assert resilience.optional_str(payload, "Count") is None
    assert resilience.optional_str(payload, "Missing") is None


def _response_error(status: int) -> aiohttp.ClientResponseError:
    return aiohttp.ClientResponseError(request_info=None, history=(), status=status, message="x")


def test_is_retryable_exception() -> None:
    assert resilience.is_retryable_exception(asyncio.TimeoutError())
    assert resilience.is_retryable_exception(aiohttp.ClientConnectionError("reset"))
    assert resilience.is_retryable_exception(_response_error(503))
    assert resilience.is_retryable_exception(_response_error(429))
    assert not resilience.is_retryable_exception(_response_error(404))
    assert not resilience.is_retryable_exception(KeyError("x"))


def test_retry_delay_prefers_retry_after() -> None:
    assert resilience.retry_delay_seconds(1) == 2
    assert resilience.retry_delay_seconds(2) == 4
    assert resilience.retry_delay_seconds(1, "7") == 7
    assert resilience.retry_delay_seconds(1, "soon") == 2


@pytest.mark.asyncio
async def test_run_with_retries_retries_transient_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []
    retries: list[tuple[int, int, int]] = []

    async def _fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    attempts = {"count": 0}

    async def _operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise aiohttp.ClientConnectionError("reset")
        return "ok"

    result = await resilience.run_with_retries(
        _operation,
        max_attempts=3,
        on_retry=lambda attempt, max_attempts, delay, exc: retries.append((attempt, max_attempts, delay)),
    )

    assert result == "ok"
    assert sleeps == [2, 4]
    assert retries == [(1, 3, 2), (2, 3, 4)]


@pytest.mark.asyncio
async def test_run_with_retries_raises_non_retryable_immediately(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)

    async def _operation() -> str:
        raise _response_error(404)

    with pytest.raises(aiohttp.ClientResponseError):
        await resilience.run_with_retries(_operation, max_attempts=3)
    assert sleeps == []


@pytest.mark.asyncio
async def test_run_with_retries_gives_up_after_max_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_sleep(delay: float) -> None:
        return None

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    attempts = {"count": 0}

    async def _operation() -> str:
        attempts["count"] += 1
        raise asyncio.TimeoutError()

    with pytest.raises(asyncio.TimeoutError):
        await resilience.run_with_retries(_operation, max_attempts=2)
    assert attempts["count"] == 2


def test_retry_delay_is_capped() -> None:
    assert resilience.retry_delay_seconds(1, "3600") == resilience.MAX_RETRY_DELAY_SECONDS
    assert resilience.retry_delay_seconds(10) == resilience.MAX_RETRY_DELAY_SECONDS
