"""Context registry — descriptors for externally reachable services.

The registry provides:
- Loading: descriptor files (YAML or JSON) scanned from a directory
- Lookup: by identifier, by type, by required capabilities
- Registration: runtime inserts, last write wins
- Permissions: a pluggable policy hook (allow-all by default)
"""

from mcp_server.contexts.models import ContextDefinition, ContextType
from mcp_server.contexts.registry import ContextRegistry

__all__ = ["ContextDefinition", "ContextRegistry", "ContextType"]
