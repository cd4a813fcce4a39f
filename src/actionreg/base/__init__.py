"""Shared base definitions for actionreg."""

from .errors import ConfigurationError, FrameworkError, RegistryError, SchemaDefinitionError

__all__ = [
    "FrameworkError",
    "RegistryError",
    "SchemaDefinitionError",
    "ConfigurationError",
]
