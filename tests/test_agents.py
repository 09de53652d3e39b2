"""Tests for the built-in agents and the agent manager."""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mcp_server.agents.builtin import NFTMarketAgent, SolanaDeFiAgent
from mcp_server.agents.manager import AgentManager
from mcp_server.contexts.models import ContextDefinition, ContextType
from mcp_server.contexts.permissions import PermissionPolicy
from mcp_server.contexts.registry import ContextRegistry
from mcp_server.wallets import LocalWalletProvider


def _registry(**kwargs) -> ContextRegistry:
    reg = ContextRegistry(**kwargs)
    reg.register(
        ContextDefinition(
            id="jupiter-dex-v4",
            name="Jupiter Aggregator",
            type=ContextType.DEX,
            capabilities=["token_swaps", "route_optimization"],
        )
    )
    reg.register(
        ContextDefinition(
            id="coingecko-market-data",
            name="CoinGecko Market Data",
            type=ContextType.ORACLE,
            capabilities=["coin_price"],
        )
    )
    reg.register(
        ContextDefinition(
            id="magiceden-v2",
            name="Magic Eden NFT Marketplace",
            type=ContextType.NFT_MARKETPLACE,
            capabilities=["nft_listing", "nft_buying"],
        )
    )
    return reg


# --- DeFi agent ---


@pytest.mark.asyncio
async def test_defi_swap_plan():
    agent = SolanaDeFiAgent("agent-1", "Trader", _registry())
    result = await agent.process_instruction("Please swap 1.5 sol for usdc")

    assert result.success
    assert result.data["action"] == "swap"
    assert result.data["amount"] == 1.5
    assert result.data["inputToken"] == "SOL"
    assert result.data["outputToken"] == "USDC"
    assert result.data["slippageBps"] == 50
    assert result.data["contexts"] == ["jupiter-dex-v4"]
    assert result.data["wallet"] is None
    assert "Jupiter Aggregator" in result.message


@pytest.mark.asyncio
async def test_defi_price_lookup():
    agent = SolanaDeFiAgent("agent-1", "Trader", _registry())
    result = await agent.process_instruction("what is the price of BONK?")

    assert result.success
    assert result.data == {"action": "price", "token": "BONK", "contexts": ["coingecko-market-data"]}


@pytest.mark.asyncio
async def test_defi_without_swap_context():
    agent = SolanaDeFiAgent("agent-1", "Trader", ContextRegistry())
    result = await agent.process_instruction("swap 2 SOL to USDC")

    assert not result.success
    assert "token_swaps" in result.message


@pytest.mark.asyncio
async def test_defi_unsupported_instruction():
    agent = SolanaDeFiAgent("agent-1", "Trader", _registry())
    result = await agent.process_instruction("stake everything")

    assert not result.success
    assert result.data == {"supported": ["token_swaps", "coin_price"]}


@pytest.mark.asyncio
async def test_defi_respects_permission_policy():
    class DenyAll(PermissionPolicy):
        def is_allowed(self, agent_id, context_id):
            return False

    agent = SolanaDeFiAgent("agent-1", "Trader", _registry(permission_policy=DenyAll()))
    result = await agent.process_instruction("swap 1 SOL for USDC")

    assert not result.success


def test_defi_defaults():
    agent = SolanaDeFiAgent("agent-1", "Trader", ContextRegistry())
    assert agent.supported_dexes == ["Jupiter", "Raydium"]
    assert agent.get_name() == "Trader"
    assert agent.get_capabilities() == ["token_swaps", "coin_price"]


# --- NFT agent ---


@pytest.mark.asyncio
async def test_nft_listing_plan():
    agent = NFTMarketAgent("agent-2", "Collector", _registry())
    result = await agent.process_instruction("list Mint111 for 2.5 SOL")

    assert result.success
    assert result.data["action"] == "list"
    assert result.data["mint"] == "Mint111"
    assert result.data["price"] == 2.5
    assert result.data["royaltyBps"] == 500
    assert result.data["contexts"] == ["magiceden-v2"]


@pytest.mark.asyncio
async def test_nft_buy_plan():
    agent = NFTMarketAgent("agent-2", "Collector", _registry())
    result = await agent.process_instruction("buy Mint222")

    assert result.success
    assert result.data["action"] == "buy"
    assert result.data["mint"] == "Mint222"


@pytest.mark.asyncio
async def test_nft_unsupported_instruction():
    agent = NFTMarketAgent("agent-2", "Collector", _registry())
    result = await agent.process_instruction("swap 1 SOL for USDC")

    assert not result.success
    assert result.data["supported"] == ["nft_listing", "nft_buying"]


@pytest.mark.asyncio
async def test_plan_includes_attached_wallet():
    provider = LocalWalletProvider(Keypair())
    agent = NFTMarketAgent("agent-2", "Collector", _registry())
    agent.attach_wallet(provider)

    result = await agent.process_instruction("buy Mint222")
    assert result.data["wallet"] == str(provider.public_key)


# --- Manager ---


def test_register_agent_returns_valid_address():
    manager = AgentManager(_registry())
    agent_id = manager.register_agent("Trader", "defi", "authority")

    assert agent_id is not None
    Pubkey.from_string(agent_id)
    record = manager.get_record(agent_id)
    assert record.name == "Trader"
    assert record.agent_type == "defi"
    assert record.authority == "authority"
    assert manager.list_records() == [record]


def test_register_unknown_agent_type():
    manager = AgentManager(_registry())
    assert manager.register_agent("Bot", "lending") is None
    assert manager.list_records() == []


def test_get_agent_builds_by_type_and_caches():
    manager = AgentManager(_registry())
    defi_id = manager.register_agent("Trader", "defi")
    nft_id = manager.register_agent("Collector", "nft")

    defi = manager.get_agent(defi_id)
    nft = manager.get_agent(nft_id)

    assert isinstance(defi, SolanaDeFiAgent)
    assert isinstance(nft, NFTMarketAgent)
    assert defi.name == "Trader"
    assert manager.get_agent(defi_id) is defi


def test_get_unknown_agent_returns_none():
    manager = AgentManager(_registry())
    assert manager.get_agent(str(Keypair().pubkey())) is None
