"""Reflection API routes.

Read-only endpoints listing the contents of the current registry. Listing
goes through ``list_actions``, so plugin-contributed actions show up even
if nothing has looked them up yet.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from actionreg.interfaces.reflection.schemas import ActionResponse, HealthResponse, SchemaResponse
from actionreg.registry import Action, list_actions, lookup_action, lookup_schema

router = APIRouter(prefix="/api")


def _action_to_response(key: str, action: Action) -> ActionResponse:
    """Convert a registered action to its API response model."""
    metadata = getattr(action, "metadata", None)
    action_type = key.split("/")[1] if key.count("/") >= 2 else ""

    if metadata is None:
        return ActionResponse(key=key, name=action.name, action_type=action_type)

    return ActionResponse(
        key=key,
        name=metadata.name,
        action_type=action_type,
        description=metadata.description,
        input_schema=metadata.input_schema.model_json_schema() if metadata.input_schema else None,
        output_schema=(
            metadata.output_schema.model_json_schema() if metadata.output_schema else None
        ),
        metadata=metadata.metadata,
    )


@router.get("/__health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/actions", response_model=dict[str, ActionResponse])
async def get_actions() -> dict[str, ActionResponse]:
    """List every action visible from the current registry, keyed by registry key."""
    actions = await list_actions()
    return {key: _action_to_response(key, action) for key, action in actions.items()}


@router.get("/actions/{key:path}", response_model=ActionResponse)
async def get_action(key: str) -> ActionResponse:
    """Look up a single action by registry key (leading slash optional)."""
    registry_key = key if key.startswith("/") else f"/{key}"
    action = await lookup_action(registry_key)
    if action is None:
        raise HTTPException(status_code=404, detail=f"Action '{registry_key}' not found")
    return _action_to_response(registry_key, action)


@router.get("/schemas/{name}", response_model=SchemaResponse)
async def get_schema(name: str) -> SchemaResponse:
    entry = lookup_schema(name)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Schema '{name}' not found")
    return SchemaResponse(
        name=name,
        json_schema=entry.to_json_schema(),
        has_model=entry.schema is not None,
    )
