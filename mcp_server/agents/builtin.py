"""Built-in agents for token swaps and NFT trading.

Both agents only plan: they match an instruction against a handful of
patterns, pick the contexts able to serve it, and report what would be
executed. Nothing is signed or sent.
"""

from __future__ import annotations

import re

from mcp_server.agents.base import Agent, InstructionResult
from mcp_server.contexts.registry import ContextRegistry

_SWAP_RE = re.compile(
    r"\bswap\s+(?P<amount>\d+(?:\.\d+)?)\s+(?P<input>[A-Za-z0-9]+)\s+(?:for|to|into)\s+(?P<output>[A-Za-z0-9]+)",
    re.IGNORECASE,
)
_PRICE_RE = re.compile(r"\bprice\s+(?:of\s+)?(?P<token>[A-Za-z0-9]+)", re.IGNORECASE)
_LIST_RE = re.compile(
    r"\blist\s+(?P<mint>\S+)\s+(?:for|at)\s+(?P<price>\d+(?:\.\d+)?)\s*(?:sol)?",
    re.IGNORECASE,
)
_BUY_RE = re.compile(r"\bbuy\s+(?P<mint>\S+)", re.IGNORECASE)


def _unsupported(agent: Agent, instruction: str) -> InstructionResult:
    return InstructionResult(
        success=False,
        message=f"{agent.name} cannot handle instruction: {instruction!r}",
        data={"supported": agent.get_capabilities()},
    )


def _no_context(capability: str) -> InstructionResult:
    return InstructionResult(
        success=False,
        message=f"No registered context offers '{capability}'",
    )


class SolanaDeFiAgent(Agent):
    """Plans token swaps and price lookups."""

    agent_type = "defi"
    capabilities = ("token_swaps", "coin_price")

    def __init__(
        self,
        agent_id: str,
        name: str,
        registry: ContextRegistry,
        supported_dexes: list[str] | None = None,
        default_slippage_bps: int = 50,
    ) -> None:
        super().__init__(agent_id, name, registry)
        self.supported_dexes = supported_dexes or ["Jupiter", "Raydium"]
        self.default_slippage_bps = default_slippage_bps

    async def process_instruction(self, instruction: str) -> InstructionResult:
        swap = _SWAP_RE.search(instruction)
        if swap:
            contexts = self.resolve_contexts(["token_swaps"])
            if not contexts:
                return _no_context("token_swaps")
            return InstructionResult(
                success=True,
                message=(
                    f"Swap {swap['amount']} {swap['input'].upper()} for "
                    f"{swap['output'].upper()} via {contexts[0].name}"
                ),
                data={
                    "action": "swap",
                    "amount": float(swap["amount"]),
                    "inputToken": swap["input"].upper(),
                    "outputToken": swap["output"].upper(),
                    "slippageBps": self.default_slippage_bps,
                    "contexts": [c.id for c in contexts],
                    "wallet": self.wallet_address,
                },
            )

        price = _PRICE_RE.search(instruction)
        if price:
            contexts = self.resolve_contexts(["coin_price"])
            if not contexts:
                return _no_context("coin_price")
            return InstructionResult(
                success=True,
                message=f"Look up the price of {price['token'].upper()} via {contexts[0].name}",
                data={
                    "action": "price",
                    "token": price["token"].upper(),
                    "contexts": [c.id for c in contexts],
                },
            )

        return _unsupported(self, instruction)


class NFTMarketAgent(Agent):
    """Plans NFT listings and purchases."""

    agent_type = "nft"
    capabilities = ("nft_listing", "nft_buying")

    def __init__(
        self,
        agent_id: str,
        name: str,
        registry: ContextRegistry,
        supported_marketplaces: list[str] | None = None,
        default_royalty_bps: int = 500,
    ) -> None:
        super().__init__(agent_id, name, registry)
        self.supported_marketplaces = supported_marketplaces or ["Magic Eden", "Tensor"]
        self.default_royalty_bps = default_royalty_bps

    async def process_instruction(self, instruction: str) -> InstructionResult:
        listing = _LIST_RE.search(instruction)
        if listing:
            contexts = self.resolve_contexts(["nft_listing"])
            if not contexts:
                return _no_context("nft_listing")
            return InstructionResult(
                success=True,
                message=f"List {listing['mint']} for {listing['price']} SOL on {contexts[0].name}",
                data={
                    "action": "list",
                    "mint": listing["mint"],
                    "price": float(listing["price"]),
                    "royaltyBps": self.default_royalty_bps,
                    "contexts": [c.id for c in contexts],
                    "wallet": self.wallet_address,
                },
            )

        purchase = _BUY_RE.search(instruction)
        if purchase:
            contexts = self.resolve_contexts(["nft_buying"])
            if not contexts:
                return _no_context("nft_buying")
            return InstructionResult(
                success=True,
                message=f"Buy {purchase['mint']} on {contexts[0].name}",
                data={
                    "action": "buy",
                    "mint": purchase["mint"],
                    "contexts": [c.id for c in contexts],
                    "wallet": self.wallet_address,
                },
            )

        return _unsupported(self, instruction)
