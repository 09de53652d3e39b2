"""Contexts router -- lookup, filtering and registration of context descriptors."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from mcp_server.contexts.descriptor import DescriptorError, parse_descriptor
from mcp_server.contexts.registry import ContextRegistry
from mcp_server.web.dependencies import get_registry
from mcp_server.web.models.api import (
    ContextResponse,
    PermissionResponse,
    RegisterContextRequest,
    RegisterContextResponse,
)

router = APIRouter(prefix="/api/contexts", tags=["contexts"])


def _responses(definitions) -> list[ContextResponse]:
    return [ContextResponse.from_definition(d) for d in definitions]


@router.get("", response_model=list[ContextResponse], summary="List all contexts")
async def list_contexts(registry: ContextRegistry = Depends(get_registry)):
    return _responses(registry.list_all())


@router.get(
    "/type/{context_type}",
    response_model=list[ContextResponse],
    summary="List contexts of one type",
)
async def list_contexts_by_type(
    context_type: str,
    registry: ContextRegistry = Depends(get_registry),
):
    contexts = registry.list_by_type(context_type)
    if contexts is None:
        raise HTTPException(status_code=400, detail="Invalid context type")
    return _responses(contexts)


@router.get(
    "/search",
    response_model=list[ContextResponse],
    summary="Find contexts offering every listed capability",
)
async def search_contexts(
    capabilities: Optional[str] = Query(None, description="Comma-separated capabilities"),
    registry: ContextRegistry = Depends(get_registry),
):
    required = [c.strip() for c in capabilities.split(",") if c.strip()] if capabilities else []
    return _responses(registry.find_by_capabilities(required))


@router.post(
    "/register",
    response_model=RegisterContextResponse,
    summary="Register a context",
)
async def register_context(
    request: RegisterContextRequest,
    registry: ContextRegistry = Depends(get_registry),
):
    try:
        definition = parse_descriptor(request.context)
    except DescriptorError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid context definition: {exc}")

    account = registry.register(definition, request.authority)
    if account is None:
        raise HTTPException(status_code=500, detail="Failed to register context")

    return RegisterContextResponse(success=True, context_id=account, id=definition.id)


@router.get(
    "/{context_id}",
    response_model=ContextResponse,
    summary="Get a context by id",
)
async def get_context(context_id: str, registry: ContextRegistry = Depends(get_registry)):
    definition = registry.get(context_id)
    if definition is None:
        raise HTTPException(status_code=404, detail="Context not found")
    return ContextResponse.from_definition(definition)


@router.get(
    "/{context_id}/permissions/{agent_id}",
    response_model=PermissionResponse,
    summary="Check whether an agent may use a context",
)
async def check_permission(
    context_id: str,
    agent_id: str,
    registry: ContextRegistry = Depends(get_registry),
):
    if registry.get(context_id) is None:
        raise HTTPException(status_code=404, detail="Context not found")
    return PermissionResponse(
        context_id=context_id,
        agent_id=agent_id,
        allowed=registry.check_permission(agent_id, context_id),
    )
