"""Wallet providers that sign transactions for agents."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

if TYPE_CHECKING:
    from mcp_server.agents.base import Agent

logger = logging.getLogger(__name__)


class WalletProvider(ABC):
    """Something that holds a key and can sign transactions with it."""

    @property
    @abstractmethod
    def public_key(self) -> Pubkey: ...

    @abstractmethod
    async def sign_transaction(self, transaction: Transaction) -> Transaction: ...

    async def sign_all_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        return [await self.sign_transaction(tx) for tx in transactions]

    async def connect(self) -> Pubkey:
        return self.public_key

    async def disconnect(self) -> None:
        return None


class LocalWalletProvider(WalletProvider):
    """Signs with an in-process keypair. Development use only."""

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        transaction.partial_sign([self._keypair], transaction.message.recent_blockhash)
        return transaction


class WalletManager:
    """Keeps wallet providers keyed by their public key string."""

    def __init__(self) -> None:
        self._wallets: dict[str, WalletProvider] = {}

    def register_wallet(self, public_key: Pubkey | str, provider: WalletProvider) -> None:
        key = str(public_key)
        self._wallets[key] = provider
        logger.info("Wallet registered: %s", key)

    def get_wallet(self, public_key: Pubkey | str) -> WalletProvider | None:
        return self._wallets.get(str(public_key))

    def remove_wallet(self, public_key: Pubkey | str) -> None:
        key = str(public_key)
        self._wallets.pop(key, None)
        logger.info("Wallet removed: %s", key)

    async def setup_agent_for_wallet(self, agent: Agent, wallet_key: Pubkey | str) -> bool:
        """Attach the wallet registered under *wallet_key* to *agent*.

        Returns False if no such wallet is registered.
        """
        wallet = self.get_wallet(wallet_key)
        if wallet is None:
            logger.warning("Wallet %s not found", wallet_key)
            return False

        try:
            await wallet.connect()
            agent.attach_wallet(wallet)
        except Exception:
            logger.exception("Error setting up agent %s with wallet %s", agent.get_name(), wallet_key)
            return False

        logger.info("Agent %s set up with wallet %s", agent.get_name(), wallet_key)
        return True

    def create_local_wallet(self) -> tuple[str, LocalWalletProvider]:
        """Generate a keypair-backed wallet, register it, and return it."""
        provider = LocalWalletProvider(Keypair())
        public_key = str(provider.public_key)
        self.register_wallet(public_key, provider)
        return public_key, provider
