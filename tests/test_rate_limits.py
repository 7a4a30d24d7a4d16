import logging
import time

import httpx
import pytest

from bannerpost.http import WAIT_SECONDS_EXTENSION, _seconds_until_reset, handle_rate_limits


@pytest.mark.asyncio
async def test_rate_limit_429_records_wait(caplog) -> None:
    now = int(time.time())
    response = httpx.Response(
        429,
        request=httpx.Request("POST", "https://api.x.com/2/tweets"),
        headers={"x-rate-limit-remaining": "0", "x-rate-limit-reset": str(now + 45)},
        json={"title": "Too Many Requests"},
    )

    with caplog.at_level(logging.WARNING, logger="bannerpost.x_api"):
        await handle_rate_limits(response)

    assert 40 <= response.extensions[WAIT_SECONDS_EXTENSION] <= 45
    assert "Rate limit warning" in caplog.text


@pytest.mark.asyncio
async def test_rate_limit_remaining_zero() -> None:
    response = httpx.Response(
        200,
        request=httpx.Request("POST", "https://api.x.com/2/tweets"),
        headers={
            "x-rate-limit-remaining": "0",
            "x-rate-limit-reset": str(int(time.time()) + 30),
        },
        json={"ok": True},
    )

    await handle_rate_limits(response)

    assert WAIT_SECONDS_EXTENSION not in response.extensions


@pytest.mark.asyncio
async def test_rate_limit_missing_headers() -> None:
    response = httpx.Response(200, request=httpx.Request("GET", "https://api.x.com/2/users/me"))

    await handle_rate_limits(response)

    assert response.status_code == 200


def test_seconds_until_reset() -> None:
    assert _seconds_until_reset("1060", now=1000) == 60
    assert _seconds_until_reset("900", now=1000) == 0
    assert _seconds_until_reset("soon", now=1000) is None
    assert _seconds_until_reset(None) is None
