"""Registry Definitions: action types, actions, plugin providers and schema entries.

This module defines the value types stored in a registry node. None of
them know about registries: an :class:`Action` is an opaque async
callable carrying :class:`ActionMetadata`, a :class:`PluginProvider` is a
name plus a deferred async initializer, and a :class:`SchemaEntry` holds
a pydantic model class and/or a raw JSON-Schema document.

Actions are keyed in the registry as ``/<type>/<name>``, where ``type``
comes from the closed :class:`ActionType` set. Plugin-contributed actions
conventionally use ``<plugin>/<name>`` as their name, giving four-segment
keys such as ``/model/myplugin/gpt`` from which the owning plugin can be
inferred.

Examples:
    Defining an action::

        >>> async def echo(text: str) -> str:
        ...     return text
        >>> action = Action(echo, ActionMetadata(name="echo", description="Echo input"))
        >>> action.name
        'echo'

    Defining a plugin::

        >>> async def init_myplugin():
        ...     register_action(ActionType.MODEL, Action(gpt, ActionMetadata(name="myplugin/gpt")))
        >>> provider = PluginProvider(name="myplugin", initializer=init_myplugin)
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# Zero-argument asynchronous factory producing a resource on demand
AsyncProvider = Callable[[], Awaitable[T]]

# Collaborator resources are opaque to the registry
TraceStore = Any
FlowStateStore = Any


class ActionType(str, Enum):
    """Closed set of action categories."""

    CUSTOM = "custom"
    RETRIEVER = "retriever"
    INDEXER = "indexer"
    EMBEDDER = "embedder"
    EVALUATOR = "evaluator"
    FLOW = "flow"
    MODEL = "model"
    PROMPT = "prompt"
    TOOL = "tool"


@dataclass
class ActionMetadata:
    """Descriptive metadata for an action.

    :param name: Action name, unique within its type
    :type name: str
    :param description: Human-readable description
    :type description: str | None
    :param input_schema: Pydantic model class describing the input
    :param output_schema: Pydantic model class describing the output
    :param metadata: Free-form extra metadata
    :type metadata: dict[str, Any]
    """

    name: str
    description: str | None = None
    input_schema: type[BaseModel] | None = None
    output_schema: type[BaseModel] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class Action:
    """An opaque async callable identified by its metadata name.

    Invocation semantics belong to the caller; the registry only stores
    and returns actions.
    """

    def __init__(self, fn: Callable[..., Awaitable[Any]], metadata: ActionMetadata):
        self.fn = fn
        self.metadata = metadata

    @property
    def name(self) -> str:
        return self.metadata.name

    async def __call__(self, *args, **kwargs) -> Any:
        return await self.fn(*args, **kwargs)

    def __repr__(self) -> str:
        return f"Action(name={self.name!r})"


@dataclass
class PluginProvider:
    """A named plugin with a deferred zero-argument async initializer.

    The initializer is expected to register actions (and possibly stores
    or schemas) against the currently scoped registry.
    """

    name: str
    initializer: Callable[[], Awaitable[Any]]


@dataclass
class SchemaEntry:
    """A named schema: pydantic model class and/or raw JSON-Schema document.

    When both payloads are present the pydantic ``schema`` is authoritative
    and ``json_schema`` is its advertised rendering.
    """

    schema: type[BaseModel] | None = None
    json_schema: dict[str, Any] | None = None

    def to_json_schema(self) -> dict[str, Any] | None:
        """Return the JSON-Schema rendering of this entry."""
        if self.json_schema is not None:
            return self.json_schema
        if self.schema is not None:
            return self.schema.model_json_schema()
        return None


def action_key(action_type: ActionType | str, name: str) -> str:
    """Build the registry key ``/<type>/<name>``."""
    return f"/{ActionType(action_type).value}/{name}"


def parse_plugin_name(registry_key: str) -> str | None:
    """Infer the owning plugin from a registry key.

    Only keys splitting into exactly four ``/``-separated segments
    (``/<type>/<plugin>/<rest>``) name a plugin; the plugin is the third
    segment. Every other shape yields ``None``.
    """
    tokens = registry_key.split("/")
    if len(tokens) == 4 and tokens[2]:
        return tokens[2]
    return None
