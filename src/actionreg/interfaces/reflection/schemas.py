"""Pydantic schemas for the reflection API."""

from typing import Any

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"


class ActionResponse(BaseModel):
    """A registered action as exposed to tooling."""

    key: str
    name: str
    action_type: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None
    metadata: dict[str, Any] = {}


class SchemaResponse(BaseModel):
    """A registered schema rendered as JSON schema."""

    name: str
    json_schema: dict[str, Any] | None = None
    has_model: bool = False
