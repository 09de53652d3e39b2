"""Tests for wallet providers and the wallet manager."""

from unittest.mock import MagicMock

import pytest
from solders.keypair import Keypair

from mcp_server.agents.builtin import SolanaDeFiAgent
from mcp_server.contexts.registry import ContextRegistry
from mcp_server.wallets import LocalWalletProvider, WalletManager


@pytest.mark.asyncio
async def test_local_wallet_signs_with_recent_blockhash():
    keypair = Keypair()
    provider = LocalWalletProvider(keypair)
    tx = MagicMock()

    signed = await provider.sign_transaction(tx)

    assert signed is tx
    tx.partial_sign.assert_called_once_with([keypair], tx.message.recent_blockhash)


@pytest.mark.asyncio
async def test_sign_all_transactions():
    provider = LocalWalletProvider(Keypair())
    txs = [MagicMock(), MagicMock()]

    signed = await provider.sign_all_transactions(txs)

    assert signed == txs
    for tx in txs:
        tx.partial_sign.assert_called_once()


@pytest.mark.asyncio
async def test_connect_returns_public_key():
    keypair = Keypair()
    provider = LocalWalletProvider(keypair)
    assert await provider.connect() == keypair.pubkey()


def test_register_get_remove():
    manager = WalletManager()
    provider = LocalWalletProvider(Keypair())

    manager.register_wallet(provider.public_key, provider)
    assert manager.get_wallet(str(provider.public_key)) is provider
    assert manager.get_wallet(provider.public_key) is provider

    manager.remove_wallet(provider.public_key)
    assert manager.get_wallet(provider.public_key) is None


def test_create_local_wallet_registers_it():
    manager = WalletManager()
    public_key, provider = manager.create_local_wallet()

    assert public_key == str(provider.public_key)
    assert manager.get_wallet(public_key) is provider


@pytest.mark.asyncio
async def test_setup_agent_for_wallet():
    manager = WalletManager()
    public_key, provider = manager.create_local_wallet()
    agent = SolanaDeFiAgent("agent-1", "Trader", ContextRegistry())

    assert await manager.setup_agent_for_wallet(agent, public_key) is True
    assert agent.wallet is provider
    assert agent.wallet_address == public_key


@pytest.mark.asyncio
async def test_setup_agent_for_unknown_wallet():
    manager = WalletManager()
    agent = SolanaDeFiAgent("agent-1", "Trader", ContextRegistry())

    assert await manager.setup_agent_for_wallet(agent, str(Keypair().pubkey())) is False
    assert agent.wallet is None
