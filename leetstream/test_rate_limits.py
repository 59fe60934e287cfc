from __future__ import annotations

import pytest

from leetstream import rate_limits


def _install_fake_clock(monkeypatch: pytest.MonkeyPatch, start: float) -> list[float]:
    clock = {"now": start}
    waits: list[float] = []

    monkeypatch.setattr(rate_limits.time, "monotonic", lambda: clock["now"])

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)
        clock["now"] += delay

    monkeypatch.setattr(rate_limits.asyncio, "sleep", _fake_sleep)
    return waits


@pytest.mark.asyncio
async def test_index_rate_limit_waits_for_same_host(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 100.0)

    first_wait = await rate_limits.enforce_min_interval("https://1337x.to/")
    second_wait = await rate_limits.enforce_min_interval("https://1337X.to")

    assert first_wait == 0.0
    assert second_wait == pytest.approx(rate_limits.INDEX_MIN_INTERVAL_SECONDS)
    assert waits == [pytest.approx(rate_limits.INDEX_MIN_INTERVAL_SECONDS)]


@pytest.mark.asyncio
async def test_index_rate_limit_does_not_cross_throttle_hosts(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 200.0)

    index_wait = await rate_limits.enforce_min_interval("https://1337x.to")
    mirror_wait = await rate_limits.enforce_min_interval("https://1337x.st")

    assert index_wait == 0.0
    assert mirror_wait == 0.0
    assert waits == []


@pytest.mark.asyncio
async def test_index_rate_limit_honours_custom_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 300.0)

    await rate_limits.enforce_min_interval("https://1337x.to", min_interval_seconds=2.0)
    second_wait = await rate_limits.enforce_min_interval("https://1337x.to", min_interval_seconds=2.0)
    disabled_wait = await rate_limits.enforce_min_interval("https://1337x.to", min_interval_seconds=0.0)

    assert second_wait == pytest.approx(2.0)
    assert disabled_wait == 0.0
    assert waits == [pytest.approx(2.0)]
