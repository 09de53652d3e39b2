"""Agents that consume context descriptors to carry out instructions."""

from mcp_server.agents.base import Agent, InstructionResult
from mcp_server.agents.manager import AGENT_TYPES, AgentManager

__all__ = ["AGENT_TYPES", "Agent", "AgentManager", "InstructionResult"]
