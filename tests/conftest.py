"""
Pytest configuration and shared test utilities.

This module provides shared fixtures and factories for all actionreg tests.
"""

import pytest
from pydantic import BaseModel

from actionreg.interfaces.reflection.server import stop_reflection_api
from actionreg.registry import Action, ActionMetadata, hard_reset_registry_for_testing
from actionreg.utils.config import reset_config_cache

# ===================================================================
# Test Factories
# ===================================================================


class EchoInput(BaseModel):
    text: str


class EchoOutput(BaseModel):
    text: str


def make_action(name: str, description: str | None = None, **metadata) -> Action:
    """Create an echo action with the given name.

    Examples:
        Plain action::

            action = make_action("echo")

        Plugin-namespaced action with schemas and metadata::

            action = make_action("myplugin/gpt", description="GPT model", family="gpt")
    """

    async def echo(text: str) -> str:
        return text

    return Action(
        echo,
        ActionMetadata(
            name=name,
            description=description,
            input_schema=EchoInput,
            output_schema=EchoOutput,
            metadata=metadata,
        ),
    )


# ===================================================================
# Global State Isolation
# ===================================================================


@pytest.fixture(autouse=True)
def clean_registry_state(monkeypatch):
    """Give every test a fresh default registry and config cache, and no reflection server."""
    monkeypatch.delenv("ACTIONREG_ENV", raising=False)
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    stop_reflection_api()
    reset_config_cache()
    registry = hard_reset_registry_for_testing()
    yield registry
    stop_reflection_api()
    hard_reset_registry_for_testing()
    reset_config_cache()
