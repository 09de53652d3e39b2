"""Permission policies deciding whether an agent may use a context.

Only a pass-through policy ships here. Access control proper belongs to
an external authority system; plug it in by implementing
:class:`PermissionPolicy` and handing it to the registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class PermissionPolicy(ABC):
    """Decides whether an agent may access a context."""

    @abstractmethod
    def is_allowed(self, agent_id: str, context_id: str) -> bool:
        """Return True if *agent_id* may use *context_id*."""


class AllowAllPolicy(PermissionPolicy):
    """Grants every request.

    This is a placeholder, not a security control.
    """

    def is_allowed(self, agent_id: str, context_id: str) -> bool:
        return True
