"""Hierarchical, context-scoped registry for pluggable runtime resources.

The registry indexes named actions, trace-store and flow-state-store
providers, schemas and lazily initialized plugins. Registries form a
singly-linked chain: lookups fall through to the parent, registrations
stay local.

Key Components:
    - **Registry**: One node of the chain (local tables, lazy caches)
    - **Scope functions**: ``run_in_registry``, ``run_in_temp_registry``,
      ``run_in_isolated_registry`` bind a node to a call's dynamic extent
    - **Module-level functions**: ``register_action``, ``lookup_action``,
      ``list_actions`` and friends act on the current registry

Lazy Initialization:
    Store providers run on first lookup and are memoized per node.
    Plugin initializers run when a namespaced action key
    (``/<type>/<plugin>/<name>``) misses, or when actions are listed, and
    are memoized once per registration. Failed constructions are not
    cached.

Examples:
    Register and resolve an action::

        >>> from actionreg.registry import Action, ActionMetadata, ActionType
        >>> from actionreg.registry import lookup_action, register_action
        >>>
        >>> register_action(ActionType.MODEL, Action(echo, ActionMetadata(name="echo")))
        >>> action = await lookup_action("/model/echo")

    Plugin-contributed actions::

        >>> async def init_myplugin():
        ...     register_action(ActionType.MODEL, Action(gpt, ActionMetadata(name="myplugin/gpt")))
        >>>
        >>> register_plugin_provider("myplugin", PluginProvider("myplugin", init_myplugin))
        >>> await lookup_action("/model/myplugin/gpt")   # runs init_myplugin once

.. note::
   When the runtime environment is ``dev`` (``ACTIONREG_ENV=dev`` or
   ``runtime.environment: dev`` in config.yml), importing this package
   schedules the reflection API on the application's event loop (at
   once if a loop is running, else on the first running loop that
   resolves the registry).
"""

from .base import (
    Action,
    ActionMetadata,
    ActionType,
    AsyncProvider,
    PluginProvider,
    SchemaEntry,
    action_key,
    parse_plugin_name,
)
from .helpers import (
    initialize_plugin,
    list_actions,
    lookup_action,
    lookup_flow_state_store,
    lookup_plugin,
    lookup_schema,
    lookup_trace_store,
    register_action,
    register_flow_state_store,
    register_plugin_provider,
    register_schema,
    register_trace_store,
)
from .node import Registry
from .scope import (
    get_default_registry,
    get_registry,
    hard_reset_registry_for_testing,
    registry_scope,
    run_in_isolated_registry,
    run_in_registry,
    run_in_temp_registry,
)

__all__ = [
    # Registry node and scoping
    "Registry",
    "get_registry",
    "get_default_registry",
    "hard_reset_registry_for_testing",
    "registry_scope",
    "run_in_registry",
    "run_in_isolated_registry",
    "run_in_temp_registry",
    # Definitions
    "Action",
    "ActionMetadata",
    "ActionType",
    "AsyncProvider",
    "PluginProvider",
    "SchemaEntry",
    "action_key",
    "parse_plugin_name",
    # Module-level functions
    "lookup_action",
    "register_action",
    "list_actions",
    "register_trace_store",
    "lookup_trace_store",
    "register_flow_state_store",
    "lookup_flow_state_store",
    "register_plugin_provider",
    "lookup_plugin",
    "initialize_plugin",
    "register_schema",
    "lookup_schema",
]


def _start_dev_reflection_api() -> None:
    from actionreg.interfaces.reflection.server import maybe_start_reflection_api

    maybe_start_reflection_api()


_start_dev_reflection_api()
