"""Registration and lazy construction of agents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from solders.keypair import Keypair

from mcp_server.agents.base import Agent
from mcp_server.agents.builtin import NFTMarketAgent, SolanaDeFiAgent
from mcp_server.contexts.registry import ContextRegistry

logger = logging.getLogger(__name__)

AGENT_TYPES = ("defi", "nft")


@dataclass
class AgentRecord:
    """What the registry remembers about a registered agent."""

    agent_id: str
    name: str
    agent_type: str
    authority: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class AgentManager:
    """Creates, caches and looks up agents.

    Agents are built on first access from their registration record and
    reused afterwards. Unknown ids are not guessed at; they yield None.
    """

    def __init__(self, registry: ContextRegistry) -> None:
        self.registry = registry
        self._records: dict[str, AgentRecord] = {}
        self._agents: dict[str, Agent] = {}

    def register_agent(self, name: str, agent_type: str, authority: object = None) -> str | None:
        """Record a new agent and return its generated address.

        Returns None for an unsupported *agent_type*.
        """
        if agent_type not in AGENT_TYPES:
            logger.warning("Unknown agent type: %s", agent_type)
            return None

        try:
            agent_id = str(Keypair().pubkey())
            self._records[agent_id] = AgentRecord(
                agent_id=agent_id,
                name=name,
                agent_type=agent_type,
                authority=str(authority) if authority is not None else "",
            )
        except Exception:
            logger.exception("Error registering agent %s", name)
            return None

        logger.info("Registered new agent: %s (%s) with ID %s", name, agent_type, agent_id)
        return agent_id

    def get_record(self, agent_id: str) -> AgentRecord | None:
        return self._records.get(agent_id)

    def list_records(self) -> list[AgentRecord]:
        return list(self._records.values())

    def get_agent(self, agent_id: str) -> Agent | None:
        """Return the agent for *agent_id*, building it on first use."""
        agent_id = str(agent_id)
        if agent_id in self._agents:
            return self._agents[agent_id]

        record = self._records.get(agent_id)
        if record is None:
            logger.warning("Agent %s not found in registry", agent_id)
            return None

        agent = self._create_agent(record)
        if agent is not None:
            self._agents[agent_id] = agent
        return agent

    def _create_agent(self, record: AgentRecord) -> Agent | None:
        try:
            if record.agent_type == "defi":
                return SolanaDeFiAgent(
                    record.agent_id,
                    record.name,
                    self.registry,
                    supported_dexes=["Jupiter", "Raydium"],
                    default_slippage_bps=50,
                )
            if record.agent_type == "nft":
                return NFTMarketAgent(
                    record.agent_id,
                    record.name,
                    self.registry,
                    supported_marketplaces=["Magic Eden", "Tensor"],
                    default_royalty_bps=500,
                )
        except Exception:
            logger.exception("Error creating agent of type %s", record.agent_type)
            return None

        logger.warning("Unknown agent type: %s", record.agent_type)
        return None
