"""Tests for the memoizing construction primitives."""

import asyncio
import contextvars
import logging

import pytest

from actionreg.registry import Registry, get_registry, registry_scope
from actionreg.registry.memo import ProviderCache, memoize_async

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "_request_id", default=None
)


class TestProviderCache:
    @pytest.mark.asyncio
    async def test_slot_filled_before_first_suspension(self):
        """task_for stores the task synchronously, so a second caller finds it."""
        cache = ProviderCache("test")
        calls = 0

        async def factory():
            nonlocal calls
            calls += 1
            return "value"

        first = cache.task_for("key", factory)
        assert "key" in cache
        second = cache.task_for("key", factory)

        assert first is second
        assert await first == "value"
        assert calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_abort_construction(self):
        cache = ProviderCache("test")
        started = asyncio.Event()
        release = asyncio.Event()
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            started.set()
            await release.wait()
            return "built"

        waiter = asyncio.create_task(cache.get("key", slow))
        await started.wait()
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        release.set()

        assert await cache.get("key", slow) == "built"
        assert calls == 1

    @pytest.mark.asyncio
    async def test_failure_evicts_slot(self):
        cache = ProviderCache("test")

        async def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.get("key", broken)

        assert "key" not in cache
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_sync_factory_result_is_accepted(self):
        cache = ProviderCache("test")

        assert await cache.get("key", lambda: 42) == 42

    @pytest.mark.asyncio
    async def test_invalidate_forgets_completed_value(self):
        cache = ProviderCache("test")
        values = iter(["first", "second"])

        async def factory():
            return next(values)

        assert await cache.get("key", factory) == "first"
        cache.invalidate("key")
        assert await cache.get("key", factory) == "second"

    @pytest.mark.asyncio
    async def test_logs_construction_and_eviction_by_kind(self, caplog):
        cache = ProviderCache("trace store")

        async def broken():
            raise ConnectionError("collector down")

        with caplog.at_level(logging.DEBUG, logger="actionreg.registry"):
            with pytest.raises(ConnectionError):
                await cache.get("dev", broken)
            await asyncio.sleep(0)

        messages = [record.message for record in caplog.records]
        assert any("Constructing trace store 'dev'" in m for m in messages)
        assert any("Evicted failed trace store 'dev'" in m for m in messages)


class TestMemoizeAsync:
    @pytest.mark.asyncio
    async def test_runs_once(self):
        calls = 0

        async def init():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return calls

        memoized = memoize_async(init)

        results = await asyncio.gather(memoized(), memoized(), memoized())

        assert results == [1, 1, 1]
        assert await memoized() == 1
        assert calls == 1

    @pytest.mark.asyncio
    async def test_failure_allows_retry(self):
        calls = 0

        async def init():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("first attempt fails")
            return "ok"

        memoized = memoize_async(init)

        with pytest.raises(RuntimeError):
            await memoized()
        assert await memoized() == "ok"
        assert calls == 2

    def test_preserves_wrapped_name(self):
        async def init_vertex():
            return None

        assert memoize_async(init_vertex).__name__ == "init_vertex"

    @pytest.mark.asyncio
    async def test_runs_in_first_callers_context(self):
        """The initializer sees the first caller's binding; its own context changes stay inside."""
        node = Registry()

        async def init():
            _request_id.set("set-by-init")
            return get_registry()

        memoized = memoize_async(init)

        with registry_scope(node):
            seen = await memoized()

        assert seen is node
        assert _request_id.get() is None
        assert await memoized() is node
