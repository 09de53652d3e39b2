"""In-memory context registry.

Descriptors are scanned once from a directory when the registry is
constructed; later registrations go straight into the in-memory mapping.
Nothing is persisted. Every public method returns a value, an empty
result, or None; none of them raise.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from solders.keypair import Keypair

from mcp_server.contexts.descriptor import (
    DescriptorError,
    is_descriptor_file,
    load_descriptor_file,
    parse_descriptor,
)
from mcp_server.contexts.models import ContextDefinition, ContextType
from mcp_server.contexts.permissions import AllowAllPolicy, PermissionPolicy

logger = logging.getLogger(__name__)


def _checked(definition: ContextDefinition) -> ContextDefinition:
    """Return *definition* with its type coerced to :class:`ContextType`.

    Raises :class:`DescriptorError` if the id is empty or the type unknown.
    """
    if not isinstance(definition, ContextDefinition):
        raise DescriptorError(f"expected a ContextDefinition, got {type(definition).__name__}")
    if not isinstance(definition.id, str) or not definition.id:
        raise DescriptorError("context id must be a non-empty string")
    context_type = ContextType.parse(definition.type)
    if context_type is None:
        raise DescriptorError(f"unknown context type {definition.type!r}")
    if context_type is not definition.type:
        definition = replace(definition, type=context_type)
    return definition


class ContextRegistry:
    """Holds context definitions keyed by id and answers queries over them.

    Overwriting an existing id keeps its original position in
    :meth:`list_all` (plain ``dict`` reassignment does not reorder).
    """

    def __init__(
        self,
        context_dir: str | Path | None = None,
        permission_policy: PermissionPolicy | None = None,
    ):
        self._contexts: dict[str, ContextDefinition] = {}
        self.permission_policy = permission_policy or AllowAllPolicy()
        self.context_dir = Path(context_dir) if context_dir is not None else None
        self.loaded_count = 0
        self.skipped: list[Path] = []

        if self.context_dir is not None:
            self.load(self.context_dir)

    def load(self, directory: str | Path) -> int:
        """Load every descriptor file found directly under *directory*.

        Returns the number of files parsed. A missing directory is logged
        and leaves the registry untouched. Files with other extensions
        are ignored; files that fail to parse are logged and skipped.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning("Context path %s does not exist", directory)
            return 0

        loaded = 0
        for path in sorted(directory.iterdir()):
            if not is_descriptor_file(path):
                continue
            try:
                definition = load_descriptor_file(path)
            except DescriptorError as exc:
                logger.warning("Skipping context descriptor %s", exc)
                self.skipped.append(path)
                continue
            self._contexts[definition.id] = definition
            loaded += 1

        self.loaded_count += loaded
        logger.info("Loaded %d context definitions from %s", loaded, directory)
        return loaded

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, context_id: str) -> ContextDefinition | None:
        """Get a context by id, or None if absent."""
        return self._contexts.get(context_id)

    def list_all(self) -> list[ContextDefinition]:
        return list(self._contexts.values())

    def list_by_type(self, context_type: ContextType | str) -> list[ContextDefinition] | None:
        """Return contexts of the given type.

        Returns None if *context_type* is not a known :class:`ContextType`
        value, and an empty list if it is known but nothing matches.
        """
        wanted = ContextType.parse(context_type)
        if wanted is None:
            return None
        return [c for c in self._contexts.values() if c.type == wanted]

    def find_by_capabilities(self, capabilities: list[str]) -> list[ContextDefinition]:
        """Return contexts offering all of *capabilities*.

        Matching ignores case. An empty list matches every context; a
        list holding anything other than strings matches none.
        """
        if isinstance(capabilities, str):
            capabilities = [capabilities]
        try:
            required = list(capabilities or [])
        except TypeError:
            required = [capabilities]
        if not all(isinstance(cap, str) for cap in required):
            logger.warning("Ignoring capability query with non-string entries: %r", required)
            return []
        return [c for c in self._contexts.values() if c.has_capabilities(required)]

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, context_id: object) -> bool:
        return context_id in self._contexts

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register(
        self,
        definition: ContextDefinition | dict[str, Any],
        authority: Any = None,
    ) -> str | None:
        """Insert or overwrite a context and return its new account address.

        The address stands in for the on-chain account a registry program
        would create. *authority* is accepted as an opaque token and not
        verified. Returns None if the definition is invalid or the insert
        fails.
        """
        try:
            if isinstance(definition, dict):
                definition = parse_descriptor(definition)
            definition = _checked(definition)
            account = str(Keypair().pubkey())
            self._contexts[definition.id] = definition
            logger.info(
                "Registered new context: %s (%s) with ID %s, authority %s",
                definition.name,
                definition.type.value,
                account,
                authority,
            )
        except DescriptorError as exc:
            logger.warning("Rejected context registration: %s", exc)
            return None
        except Exception:
            logger.exception("Error registering context %r", getattr(definition, "name", definition))
            return None

        return account

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    def check_permission(self, agent_id: Any, context_id: str) -> bool:
        """Ask the configured policy whether *agent_id* may use *context_id*."""
        try:
            return self.permission_policy.is_allowed(str(agent_id), context_id)
        except Exception:
            logger.exception("Permission check failed for %s on %s", agent_id, context_id)
            return False
