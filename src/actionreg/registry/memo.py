"""Lazy construction cache for asynchronous providers.

A construction is started as an :class:`asyncio.Task` and stored in the
cache slot before the caller ever suspends, so concurrent callers asking
for the same key all await one task and the provider runs once.

Awaiters go through :func:`asyncio.shield`: a caller that is cancelled
while waiting abandons its wait without cancelling the construction.

A construction that fails (or is cancelled) is evicted from its slot once
it completes. Every caller already awaiting it sees the same exception;
the next access starts a fresh construction.

A construction task copies the context of the caller that started it.
It sees that caller's registry binding (and any other context variables),
but context variables it sets stay inside the task and never reach any
awaiter.
"""

import asyncio
import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from actionreg.utils.logger import get_logger

logger = get_logger("registry")


async def _construct(factory: Callable[[], Any]) -> Any:
    result = factory()
    if inspect.isawaitable(result):
        result = await result
    return result


def _failed(task: asyncio.Task) -> bool:
    return task.cancelled() or task.exception() is not None


class ProviderCache:
    """Per-node cache of in-flight or completed constructions keyed by name."""

    def __init__(self, kind: str):
        self.kind = kind
        self._tasks: dict[str, asyncio.Task] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def task_for(self, key: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Return the construction task for ``key``, starting it on first access.

        Must stay free of ``await``: the slot is filled before control can
        return to the event loop.
        """
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(_construct(factory))
            self._tasks[key] = task
            logger.debug(f"Constructing {self.kind} '{key}'")
            task.add_done_callback(functools.partial(self._evict_if_failed, key))
        return task

    async def get(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        return await asyncio.shield(self.task_for(key, factory))

    def invalidate(self, key: str) -> None:
        """Forget the cached construction for ``key`` (a running task keeps running)."""
        self._tasks.pop(key, None)

    def _evict_if_failed(self, key: str, task: asyncio.Task) -> None:
        if _failed(task) and self._tasks.get(key) is task:
            del self._tasks[key]
            logger.debug(f"Evicted failed {self.kind} '{key}'; next lookup retries")


def memoize_async(fn: Callable[[], Awaitable[Any]]) -> Callable[[], Awaitable[Any]]:
    """Wrap a zero-argument async callable so it runs at most once.

    The first call starts ``fn`` as a task; later calls await that same
    task. A failed run is forgotten so the next call retries.

    The task runs in a copy of the first caller's context, so ``fn``
    registers against the registry that caller had bound. Context
    variables ``fn`` sets are not visible to any caller.
    """
    task: asyncio.Task | None = None

    def reset_on_failure(done: asyncio.Task) -> None:
        nonlocal task
        if _failed(done) and task is done:
            task = None

    @functools.wraps(fn)
    def wrapper() -> Awaitable[Any]:
        nonlocal task
        if task is None:
            task = asyncio.ensure_future(_construct(fn))
            task.add_done_callback(reset_on_failure)
        return asyncio.shield(task)

    return wrapper
