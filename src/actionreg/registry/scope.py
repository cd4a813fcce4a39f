"""Scope manager: which registry is "current" for the running code.

The current registry is held in a :class:`contextvars.ContextVar`. That
gives the binding the same extent as a call chain:

- it survives every ``await`` inside the bound call, because a coroutine
  keeps running in its task's context;
- tasks spawned inside the bound call inherit it, because new tasks copy
  the context they are created in;
- two concurrent chains bound to different registries never see each
  other's binding, because each task owns its own context.

When nothing is bound, :func:`get_registry` falls back to the process-wide
default registry, created once at import time. Only
:func:`hard_reset_registry_for_testing` replaces it.

Examples:
    Overlay registrations for one operation::

        >>> async def check(registry):
        ...     register_action(ActionType.TOOL, fake_search)
        ...     return await run_flow()
        >>> await run_in_temp_registry(check)   # fake_search is gone afterwards

    Fully isolated registry::

        >>> run_in_isolated_registry(lambda registry: registry.lookup_schema("Doc"))
"""

import asyncio
import contextvars
import inspect
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from actionreg.utils.logger import get_logger

from .node import Registry

logger = get_logger("registry")

O = TypeVar("O")

_current_registry: contextvars.ContextVar[Registry | None] = contextvars.ContextVar(
    "_current_registry", default=None
)

# Process-wide default registry
_default_registry: Registry = Registry()

# Callbacks waiting for the first running event loop to resolve a registry
_loop_callbacks: list[Callable[[], None]] = []


def call_when_loop_running(callback: Callable[[], None]) -> None:
    """Run ``callback`` on the event loop that uses the registry.

    Called from a running loop, ``callback`` runs immediately. Otherwise it
    runs once, from inside the first :func:`get_registry` call made while
    an event loop is running, so that it can schedule work on the loop
    that owns the registry's lazy constructions.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        if callback not in _loop_callbacks:
            _loop_callbacks.append(callback)
        return
    callback()


def cancel_loop_callback(callback: Callable[[], None]) -> None:
    """Drop a callback registered with :func:`call_when_loop_running` that has not run yet."""
    if callback in _loop_callbacks:
        _loop_callbacks.remove(callback)


def _run_loop_callbacks() -> None:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return
    while _loop_callbacks:
        _loop_callbacks.pop(0)()


def get_registry() -> Registry:
    """Return the registry bound to the current scope, else the process default."""
    if _loop_callbacks:
        _run_loop_callbacks()
    registry = _current_registry.get()
    if registry is None:
        return _default_registry
    return registry


def get_default_registry() -> Registry:
    return _default_registry


def hard_reset_registry_for_testing() -> Registry:
    """Discard the process default registry and install a fresh one.

    .. warning::
       Test-only. Anything registered on the old default is lost.
    """
    global _default_registry
    _default_registry = Registry()
    logger.debug("Process default registry reset")
    return _default_registry


@contextmanager
def registry_scope(registry: Registry) -> Iterator[Registry]:
    """Bind ``registry`` as current for the body of a ``with`` block."""
    token = _current_registry.set(registry)
    try:
        yield registry
    finally:
        _current_registry.reset(token)


async def _await_bound(registry: Registry, awaitable: Awaitable[Any]) -> Any:
    with registry_scope(registry):
        return await awaitable


def run_in_registry(registry: Registry, fn: Callable[[Registry], O]) -> O:
    """Call ``fn(registry)`` with ``registry`` bound as current.

    Synchronous callables run inside a copied context, so the binding
    ends when ``fn`` returns. If ``fn`` returns an awaitable (e.g. ``fn``
    is an ``async def``), a coroutine is returned instead; awaiting it
    runs the awaitable with the binding active across all of its
    suspension points, and restores the caller's binding afterwards.
    """
    context = contextvars.copy_context()

    def call_bound() -> O:
        _current_registry.set(registry)
        return fn(registry)

    result = context.run(call_bound)
    if inspect.isawaitable(result):
        return _await_bound(registry, result)
    return result


def run_in_isolated_registry(fn: Callable[[Registry], O]) -> O:
    """Run ``fn`` in a fresh registry with no parent and no view of the default."""
    return run_in_registry(Registry(), fn)


def run_in_temp_registry(fn: Callable[[Registry], O]) -> O:
    """Run ``fn`` in a throwaway child of the current registry.

    Registrations made by ``fn`` land on the child and disappear with it;
    the current registry is never modified.
    """
    return run_in_registry(Registry.with_current(), fn)
