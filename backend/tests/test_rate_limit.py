"""Tests for app.core.rate_limit: in-memory sliding window."""

from types import SimpleNamespace

import pytest
from starlette.requests import Request

from app.core.errors import RateLimited
from app.core.rate_limit import MemoryWindow, client_key, create_rate_limiter


def make_request(headers=None, client=("10.0.0.1", 5000)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestMemoryWindow:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        window = MemoryWindow()
        results = [await window.hit("k", 3, 60) for _ in range(4)]
        assert results == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        window = MemoryWindow()
        assert await window.hit("a", 1, 60)
        assert await window.hit("b", 1, 60)
        assert not await window.hit("a", 1, 60)

    @pytest.mark.asyncio
    async def test_old_hits_slide_out(self, monkeypatch):
        clock = iter([100.0, 100.5, 161.0])
        monkeypatch.setattr("app.core.rate_limit.time", SimpleNamespace(monotonic=lambda: next(clock)))
        window = MemoryWindow()
        assert await window.hit("k", 1, 60)
        assert not await window.hit("k", 1, 60)
        assert await window.hit("k", 1, 60)

    @pytest.mark.asyncio
    async def test_reset(self):
        window = MemoryWindow()
        await window.hit("k", 1, 60)
        window.reset()
        assert await window.hit("k", 1, 60)

    @pytest.mark.asyncio
    async def test_idle_keys_are_dropped(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("app.core.rate_limit.time", SimpleNamespace(monotonic=lambda: now[0]))
        window = MemoryWindow()
        for n in range(500):
            assert await window.hit(f"client-{n}", 5, 60)
        assert len(window._hits) == 500

        now[0] += 3600
        assert await window.hit("fresh", 5, 60)
        assert list(window._hits) == ["fresh"]

    @pytest.mark.asyncio
    async def test_active_keys_survive_sweep(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("app.core.rate_limit.time", SimpleNamespace(monotonic=lambda: now[0]))
        window = MemoryWindow()
        assert await window.hit("busy", 1, 3600)
        now[0] += 120
        assert not await window.hit("busy", 1, 3600)
        assert "busy" in window._hits


class TestClientKey:
    def test_forwarded_for_first_hop(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert client_key(request) == "203.0.113.7"

    def test_peer_address(self):
        assert client_key(make_request()) == "10.0.0.1"

    def test_no_client(self):
        assert client_key(make_request(client=None)) == "unknown"


class TestRateLimiterDependency:
    @pytest.mark.asyncio
    async def test_raises_when_exceeded(self, monkeypatch):
        window = MemoryWindow()
        monkeypatch.setattr("app.core.rate_limit.get_window", lambda: window)
        limiter = create_rate_limiter(limit=2, window_seconds=60, key_prefix="unit")
        request = make_request()
        await limiter(request)
        await limiter(request)
        with pytest.raises(RateLimited):
            await limiter(request)
