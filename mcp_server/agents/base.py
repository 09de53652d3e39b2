"""Agent base class and instruction results."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mcp_server.contexts.models import ContextDefinition
from mcp_server.contexts.registry import ContextRegistry

if TYPE_CHECKING:
    from mcp_server.wallets import WalletProvider


@dataclass
class InstructionResult:
    """Outcome of processing one natural-language instruction."""

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "data": self.data}


class Agent(ABC):
    """An actor that turns instructions into plans against registered contexts.

    Parameters
    ----------
    agent_id : str
        Base58 address identifying the agent.
    name : str
        Display name.
    registry : ContextRegistry
        Source of the contexts the agent may use.
    """

    agent_type: str = ""
    capabilities: tuple[str, ...] = ()

    def __init__(self, agent_id: str, name: str, registry: ContextRegistry) -> None:
        self.agent_id = agent_id
        self.name = name
        self.registry = registry
        self.wallet: WalletProvider | None = None

    def get_name(self) -> str:
        return self.name

    def get_capabilities(self) -> list[str]:
        return list(self.capabilities)

    def attach_wallet(self, wallet: WalletProvider) -> None:
        """Use *wallet* for signing from now on."""
        self.wallet = wallet

    @property
    def wallet_address(self) -> str | None:
        return str(self.wallet.public_key) if self.wallet is not None else None

    def resolve_contexts(self, required: list[str]) -> list[ContextDefinition]:
        """Contexts offering *required* that this agent is permitted to use."""
        return [
            ctx
            for ctx in self.registry.find_by_capabilities(required)
            if self.registry.check_permission(self.agent_id, ctx.id)
        ]

    @abstractmethod
    async def process_instruction(self, instruction: str) -> InstructionResult:
        """Interpret *instruction* and return a result describing the plan."""
