"""Agents router -- agent registration and instruction processing."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from mcp_server.agents.manager import AGENT_TYPES, AgentManager
from mcp_server.wallets import WalletManager
from mcp_server.web.dependencies import get_agent_manager, get_wallet_manager, parse_public_key
from mcp_server.web.models.api import (
    InstructionResponse,
    ProcessInstructionRequest,
    RegisterAgentRequest,
    RegisterAgentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.post("/register", response_model=RegisterAgentResponse, summary="Register an agent")
async def register_agent(
    request: RegisterAgentRequest,
    agents: AgentManager = Depends(get_agent_manager),
):
    if not request.name or not request.type or not request.authority:
        raise HTTPException(status_code=400, detail="Missing required fields")
    if request.type not in AGENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown agent type '{request.type}', expected one of {list(AGENT_TYPES)}",
        )

    authority = parse_public_key(request.authority, "authority")
    agent_id = agents.register_agent(request.name, request.type, authority)
    if agent_id is None:
        raise HTTPException(status_code=500, detail="Failed to register agent")

    return RegisterAgentResponse(success=True, agent_id=agent_id, name=request.name, type=request.type)


@router.post(
    "/{agent_id}/process",
    response_model=InstructionResponse,
    summary="Process an instruction with an agent",
)
async def process_instruction(
    agent_id: str,
    request: ProcessInstructionRequest,
    agents: AgentManager = Depends(get_agent_manager),
    wallets: WalletManager = Depends(get_wallet_manager),
):
    if not request.instruction:
        raise HTTPException(status_code=400, detail="Missing instruction")

    parse_public_key(agent_id, "agent id")
    agent = agents.get_agent(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Agent not found")

    if request.wallet_address:
        parse_public_key(request.wallet_address, "wallet address")
        await wallets.setup_agent_for_wallet(agent, request.wallet_address)

    try:
        result = await agent.process_instruction(request.instruction)
    except Exception as exc:
        logger.exception("Error processing instruction for agent %s", agent_id)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to process instruction", "details": str(exc)},
        )

    return InstructionResponse(**result.to_dict())
