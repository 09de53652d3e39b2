"""Context data models: descriptor records and their categories."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ContextType(str, Enum):
    """Category of an external service."""

    DEX = "dex"
    NFT_MARKETPLACE = "nft_marketplace"
    ORACLE = "oracle"
    GOVERNANCE = "governance"
    SOCIAL = "social"
    IDENTITY = "identity"
    STORAGE = "storage"

    @classmethod
    def parse(cls, value: ContextType | str) -> ContextType | None:
        """Return the member for *value*, or None if it is not a known type."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass
class ContextDefinition:
    """A single externally reachable service descriptor."""

    # Identity
    id: str
    name: str
    type: ContextType
    description: str = ""

    # Classification
    capabilities: list[str] = field(default_factory=list)

    # Access
    endpoint: str | None = None
    pubkey: str | None = None  # On-chain address, when known
    auth_required: bool = False

    # Call parameters, opaque to the registry
    schema: dict[str, Any] | None = None

    def has_capabilities(self, required: list[str]) -> bool:
        """True if every capability in *required* is offered (case-insensitive)."""
        offered = {c.lower() for c in self.capabilities if isinstance(c, str)}
        return all(isinstance(cap, str) and cap.lower() in offered for cap in required)
