"""Pydantic models for API request/response serialization.

These models mirror the mcp_server dataclasses and provide JSON
serialization with the wire field names (``authRequired``, ``agentId`` ...)
for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from mcp_server.contexts.descriptor import definition_to_dict
from mcp_server.contexts.models import ContextDefinition


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Context models
# ---------------------------------------------------------------------------


class ContextResponse(_WireModel):
    """Mirrors mcp_server.contexts.models.ContextDefinition."""

    id: str
    name: str
    description: str = ""
    type: str
    capabilities: list[str] = Field(default_factory=list)
    endpoint: Optional[str] = None
    pubkey: Optional[str] = None
    auth_required: bool = Field(False, alias="authRequired")
    schema_: Optional[dict[str, Any]] = Field(None, alias="schema")

    @classmethod
    def from_definition(cls, definition: ContextDefinition) -> ContextResponse:
        return cls.model_validate(definition_to_dict(definition))


class RegisterContextRequest(BaseModel):
    context: dict[str, Any]
    authority: Optional[str] = None


class RegisterContextResponse(_WireModel):
    success: bool = True
    context_id: str = Field(alias="contextId")
    id: str


class PermissionResponse(_WireModel):
    context_id: str = Field(alias="contextId")
    agent_id: str = Field(alias="agentId")
    allowed: bool


# ---------------------------------------------------------------------------
# Agent models
# ---------------------------------------------------------------------------


class RegisterAgentRequest(BaseModel):
    """All fields optional so that missing ones surface as a 400, not a 422."""

    name: Optional[str] = None
    type: Optional[str] = None
    authority: Optional[str] = None


class RegisterAgentResponse(_WireModel):
    success: bool = True
    agent_id: str = Field(alias="agentId")
    name: str
    type: str


class ProcessInstructionRequest(_WireModel):
    instruction: Optional[str] = None
    wallet_address: Optional[str] = Field(None, alias="walletAddress")


class InstructionResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Wallet models
# ---------------------------------------------------------------------------


class LocalWalletResponse(_WireModel):
    success: bool = True
    public_key: str = Field(alias="publicKey")


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    timestamp: str
