"""Module-level registry functions.

Every function here resolves the current registry through
:func:`~actionreg.registry.scope.get_registry` and dispatches to it, so
code running inside :func:`run_in_registry` (or a temp/isolated scope)
transparently targets the scoped registry without being handed it.
"""

from typing import Any

from pydantic import BaseModel

from .base import (
    Action,
    ActionType,
    AsyncProvider,
    FlowStateStore,
    PluginProvider,
    SchemaEntry,
    TraceStore,
)
from .scope import get_registry


async def lookup_action(key: str) -> Action | None:
    """Look up an action by registry key (``/<type>/<name>``)."""
    return await get_registry().lookup_action(key)


def register_action(action_type: ActionType | str, action: Action) -> None:
    """Register an action in the current registry."""
    get_registry().register_action(action_type, action)


async def list_actions() -> dict[str, Action]:
    """Return all actions visible from the current registry."""
    return await get_registry().list_actions()


def register_trace_store(env: str, provider: AsyncProvider[TraceStore]) -> None:
    """Register a trace store provider for the given environment."""
    get_registry().register_trace_store(env, provider)


async def lookup_trace_store(env: str) -> TraceStore | None:
    """Look up the trace store for the given environment."""
    return await get_registry().lookup_trace_store(env)


def register_flow_state_store(env: str, provider: AsyncProvider[FlowStateStore]) -> None:
    """Register a flow state store provider for the given environment."""
    get_registry().register_flow_state_store(env, provider)


async def lookup_flow_state_store(env: str) -> FlowStateStore | None:
    """Look up the flow state store for the given environment."""
    return await get_registry().lookup_flow_state_store(env)


def register_plugin_provider(name: str, provider: PluginProvider) -> None:
    """Register a plugin provider; its initializer runs on first use."""
    get_registry().register_plugin_provider(name, provider)


def lookup_plugin(name: str) -> PluginProvider | None:
    return get_registry().lookup_plugin(name)


async def initialize_plugin(name: str) -> Any:
    """Initialize a plugin registered on the current registry."""
    return await get_registry().initialize_plugin(name)


def register_schema(
    name: str,
    schema: type[BaseModel] | None = None,
    json_schema: dict[str, Any] | None = None,
) -> None:
    get_registry().register_schema(name, schema=schema, json_schema=json_schema)


def lookup_schema(name: str) -> SchemaEntry | None:
    return get_registry().lookup_schema(name)
