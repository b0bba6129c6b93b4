from unittest.mock import patch

import pytest

from main import app
from services import quota


@pytest.mark.asyncio
async def test_local_counter_enforces_limit_per_name():
    assert await quota.allow("test:a", limit=2, window_seconds=60)
    assert await quota.allow("test:a", limit=2, window_seconds=60)
    assert not await quota.allow("test:a", limit=2, window_seconds=60)
    assert await quota.allow("test:b", limit=2, window_seconds=60)


@pytest.mark.asyncio
async def test_local_counter_resets_after_window(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr("services.quota.time.time", lambda: clock["now"])

    assert await quota.hit("test:window", window_seconds=10) == 1
    assert await quota.hit("test:window", window_seconds=10) == 2
    clock["now"] += 10
    assert await quota.hit("test:window", window_seconds=10) == 1


@pytest.mark.asyncio
async def test_login_endpoint_is_throttled(api_client):
    app.state.disable_rate_limits = False
    payload = {"login": "nobody", "password": "irrelevant"}

    statuses = [(await api_client.post("/auth/login", json=payload)).status_code for _ in range(21)]

    assert statuses[:20] == [401] * 20
    assert statuses[20] == 429


@pytest.mark.asyncio
async def test_login_throttle_ignores_spoofed_forwarded_for(api_client):
    app.state.disable_rate_limits = False
    payload = {"login": "nobody", "password": "irrelevant"}

    statuses = [
        (
            await api_client.post(
                "/auth/login", json=payload, headers={"X-Forwarded-For": f"10.0.0.{i}"}
            )
        ).status_code
        for i in range(21)
    ]

    assert statuses[:20] == [401] * 20
    assert statuses[20] == 429


@pytest.mark.asyncio
async def test_forwarded_for_is_used_behind_trusted_proxy(api_client):
    app.state.disable_rate_limits = False
    payload = {"login": "nobody", "password": "irrelevant"}

    with patch("routers.rate_limit.settings.TRUSTED_PROXIES", ["127.0.0.1"]):
        statuses = [
            (
                await api_client.post(
                    "/auth/login", json=payload, headers={"X-Forwarded-For": f"10.0.0.{i}, 127.0.0.1"}
                )
            ).status_code
            for i in range(21)
        ]

    assert 429 not in statuses


@pytest.mark.asyncio
async def test_expired_local_windows_are_dropped(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr("services.quota.time.time", lambda: clock["now"])

    for i in range(5):
        await quota.hit(f"test:client-{i}", window_seconds=10)
    clock["now"] += 10
    await quota.hit("test:fresh", window_seconds=10)

    assert list(quota._local_counters) == ["trwl:test:fresh"]
