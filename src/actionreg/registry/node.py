"""Registry node: local resource tables plus an optional parent.

A :class:`Registry` owns five tables (actions, trace-store providers,
flow-state-store providers, plugin providers, schemas) and points at most
at one parent. The nodes form a singly-linked chain: lookups walk towards
the root, registrations only ever touch the node they are called on, and
a node never learns about its children.

Lookup rules:
    - A key in the local table shadows the same key in every ancestor.
    - Trace and flow-state stores are constructed lazily through the
      node's :class:`~actionreg.registry.memo.ProviderCache`; whether the
      node has a local *binding* decides local-vs-parent, regardless of
      what the parent has already cached.
    - A miss on a four-segment action key (``/<type>/<plugin>/<name>``)
      initializes that plugin on this node, then re-checks the table.
    - Plugin initialization is local-only; it never walks to the parent.

.. note::
   All mutation is synchronous. The async methods only suspend while
   awaiting a provider, a plugin initializer or a parent delegation.
"""

from typing import Any

from pydantic import BaseModel

from actionreg.base.errors import RegistryError, SchemaDefinitionError
from actionreg.utils.logger import get_logger

from .base import (
    Action,
    ActionType,
    AsyncProvider,
    FlowStateStore,
    PluginProvider,
    SchemaEntry,
    TraceStore,
    action_key,
    parse_plugin_name,
)
from .memo import ProviderCache, memoize_async

logger = get_logger("registry")


class Registry:
    """A single node in the registry chain.

    :param parent: Registry to delegate misses to, or None for a root node
    :type parent: Registry, optional
    """

    def __init__(self, parent: "Registry | None" = None):
        self._parent = parent

        self._actions_by_id: dict[str, Action] = {}
        self._trace_stores_by_env: dict[str, AsyncProvider[TraceStore]] = {}
        self._flow_state_stores_by_env: dict[str, AsyncProvider[FlowStateStore]] = {}
        self._plugins_by_name: dict[str, PluginProvider] = {}
        self._schemas_by_name: dict[str, SchemaEntry] = {}

        self._trace_store_cache = ProviderCache("trace store")
        self._flow_state_store_cache = ProviderCache("flow state store")

    @property
    def parent(self) -> "Registry | None":
        return self._parent

    @classmethod
    def with_current(cls) -> "Registry":
        """Create a child of the registry current in this scope."""
        from .scope import get_registry

        return cls(get_registry())

    @classmethod
    def with_parent(cls, parent: "Registry") -> "Registry":
        return cls(parent)

    def __repr__(self) -> str:
        return (
            f"Registry(actions={len(self._actions_by_id)}, "
            f"plugins={len(self._plugins_by_name)}, has_parent={self._parent is not None})"
        )

    def get_stats(self) -> dict[str, Any]:
        """Summarize this node's local tables (ancestors are not included).

        :return: Counts and names per table, plus the chain depth
        :rtype: dict[str, Any]
        """
        depth = 0
        node = self._parent
        while node is not None:
            depth += 1
            node = node._parent

        return {
            "actions": len(self._actions_by_id),
            "trace_stores": len(self._trace_stores_by_env),
            "flow_state_stores": len(self._flow_state_stores_by_env),
            "plugins": len(self._plugins_by_name),
            "schemas": len(self._schemas_by_name),
            "action_keys": sorted(self._actions_by_id),
            "trace_store_envs": sorted(self._trace_stores_by_env),
            "flow_state_store_envs": sorted(self._flow_state_stores_by_env),
            "plugin_names": list(self._plugins_by_name),
            "schema_names": sorted(self._schemas_by_name),
            "depth": depth,
        }

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def register_action(self, action_type: ActionType | str, action: Action) -> None:
        """Register ``action`` under ``/<type>/<name>`` on this node.

        An existing entry under the same key is overwritten with a warning.

        :raises RegistryError: If ``action_type`` is not a known action type
            or the action has no name
        """
        try:
            action_type = ActionType(action_type)
        except ValueError as e:
            valid = ", ".join(t.value for t in ActionType)
            raise RegistryError(f"Unknown action type {action_type!r}. Valid types: {valid}") from e

        name = getattr(action, "name", None)
        if not name:
            raise RegistryError(f"Cannot register {action!r}: action has no name")

        logger.info(f"Registering {action_type.value}: {name}")
        key = action_key(action_type, name)
        if key in self._actions_by_id:
            logger.warning(f"WARNING: {key} already has an entry in the registry. Overwriting.")
        self._actions_by_id[key] = action

    async def lookup_action(self, key: str) -> Action | None:
        """Resolve ``key`` locally, via its plugin, or through the parent chain."""
        action = self._actions_by_id.get(key)
        if action is not None:
            return action

        plugin_name = parse_plugin_name(key)
        if plugin_name is not None:
            await self.initialize_plugin(plugin_name)
            action = self._actions_by_id.get(key)
            if action is not None:
                return action

        if self._parent is None:
            return None
        return await self._parent.lookup_action(key)

    async def list_actions(self) -> dict[str, Action]:
        """Return every visible action, local entries shadowing the parent's.

        Every locally registered plugin is initialized first so that
        plugin-contributed actions are included.
        """
        for plugin_name in list(self._plugins_by_name):
            await self.initialize_plugin(plugin_name)

        actions: dict[str, Action] = {}
        if self._parent is not None:
            actions.update(await self._parent.list_actions())
        actions.update(self._actions_by_id)
        return actions

    # ------------------------------------------------------------------
    # Trace stores and flow state stores
    # ------------------------------------------------------------------

    def register_trace_store(self, env: str, provider: AsyncProvider[TraceStore]) -> None:
        """Bind a trace store provider for ``env``; the provider is not called."""
        self._trace_stores_by_env[env] = provider
        self._trace_store_cache.invalidate(env)
        logger.debug(f"Registered trace store provider for env '{env}'")

    async def lookup_trace_store(self, env: str) -> TraceStore | None:
        if env in self._trace_stores_by_env:
            return await self._trace_store_cache.get(env, self._trace_stores_by_env[env])
        if self._parent is None:
            return None
        return await self._parent.lookup_trace_store(env)

    def register_flow_state_store(self, env: str, provider: AsyncProvider[FlowStateStore]) -> None:
        """Bind a flow state store provider for ``env``; the provider is not called."""
        self._flow_state_stores_by_env[env] = provider
        self._flow_state_store_cache.invalidate(env)
        logger.debug(f"Registered flow state store provider for env '{env}'")

    async def lookup_flow_state_store(self, env: str) -> FlowStateStore | None:
        if env in self._flow_state_stores_by_env:
            return await self._flow_state_store_cache.get(env, self._flow_state_stores_by_env[env])
        if self._parent is None:
            return None
        return await self._parent.lookup_flow_state_store(env)

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def register_plugin_provider(self, name: str, provider: PluginProvider) -> None:
        """Store ``provider`` with its initializer wrapped to run at most once."""
        self._plugins_by_name[name] = PluginProvider(
            name=provider.name,
            initializer=memoize_async(provider.initializer),
        )
        logger.debug(f"Registered plugin provider '{name}'")

    def lookup_plugin(self, name: str) -> PluginProvider | None:
        plugin = self._plugins_by_name.get(name)
        if plugin is not None:
            return plugin
        if self._parent is None:
            return None
        return self._parent.lookup_plugin(name)

    async def initialize_plugin(self, name: str) -> Any:
        """Run this node's plugin initializer for ``name`` (once) and return its result.

        Returns None when the plugin is not registered on this node; the
        parent chain is not consulted.
        """
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            return None
        return await plugin.initializer()

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def register_schema(
        self,
        name: str,
        schema: type[BaseModel] | None = None,
        json_schema: dict[str, Any] | None = None,
    ) -> None:
        """Register a schema by pydantic model class and/or raw JSON schema.

        :raises SchemaDefinitionError: If neither payload is given
        """
        if schema is None and json_schema is None:
            raise SchemaDefinitionError(
                f"Schema '{name}' needs a pydantic model or a JSON schema document"
            )
        self._schemas_by_name[name] = SchemaEntry(schema=schema, json_schema=json_schema)

    def lookup_schema(self, name: str) -> SchemaEntry | None:
        entry = self._schemas_by_name.get(name)
        if entry is not None:
            return entry
        if self._parent is None:
            return None
        return self._parent.lookup_schema(name)
