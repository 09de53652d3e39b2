"""Descriptor files — schema-validated loading of context definitions.

A descriptor file holds exactly one context definition, serialized as
YAML (``.yaml``/``.yml``) or JSON (``.json``). Every file passes through
the :class:`ContextDescriptor` schema before it becomes a
:class:`ContextDefinition`; anything that does not validate raises
:class:`DescriptorError` and never reaches the registry.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcp_server.contexts.models import ContextDefinition, ContextType

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}
SUPPORTED_SUFFIXES = YAML_SUFFIXES | JSON_SUFFIXES


class DescriptorError(ValueError):
    """A descriptor could not be read, decoded, or validated."""


class ContextDescriptor(BaseModel):
    """Wire schema of a descriptor file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    type: ContextType
    capabilities: list[str] = Field(default_factory=list)
    endpoint: Optional[str] = None
    pubkey: Optional[str] = None
    auth_required: bool = Field(False, alias="authRequired")
    schema_: Optional[dict[str, Any]] = Field(None, alias="schema")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("capabilities", mode="before")
    @classmethod
    def _none_capabilities(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_definition(self) -> ContextDefinition:
        return ContextDefinition(
            id=self.id,
            name=self.name,
            type=self.type,
            description=self.description,
            capabilities=list(self.capabilities),
            endpoint=self.endpoint,
            pubkey=self.pubkey,
            auth_required=self.auth_required,
            schema=self.schema_,
        )


def is_descriptor_file(path: Path) -> bool:
    """Return True if *path* has a recognized descriptor extension."""
    return path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES


def parse_descriptor(data: Any) -> ContextDefinition:
    """Validate a decoded descriptor mapping and return a typed definition.

    Raises:
        DescriptorError: if *data* is not a mapping or fails validation.
    """
    if not isinstance(data, dict):
        raise DescriptorError(
            f"descriptor must be a mapping, got {type(data).__name__}"
        )
    try:
        return ContextDescriptor.model_validate(data).to_definition()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '/'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DescriptorError(problems) from exc


def load_descriptor_file(path: str | Path) -> ContextDefinition:
    """Read and validate a single descriptor file.

    The suffix selects the decoder. Raises :class:`DescriptorError` for
    unsupported suffixes, unreadable files, decode errors, and schema
    violations alike.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DescriptorError(f"{path.name}: unsupported descriptor format '{suffix}'")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DescriptorError(f"{path.name}: cannot read file: {exc}") from exc

    try:
        if suffix in JSON_SUFFIXES:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DescriptorError(f"{path.name}: cannot decode: {exc}") from exc

    try:
        return parse_descriptor(data)
    except DescriptorError as exc:
        raise DescriptorError(f"{path.name}: {exc}") from exc


def definition_to_dict(definition: ContextDefinition) -> dict[str, Any]:
    """Serialize a definition using the descriptor wire keys."""
    data: dict[str, Any] = {
        "id": definition.id,
        "name": definition.name,
        "description": definition.description,
        "type": definition.type.value,
        "capabilities": list(definition.capabilities),
        "authRequired": definition.auth_required,
    }
    if definition.endpoint is not None:
        data["endpoint"] = definition.endpoint
    if definition.pubkey is not None:
        data["pubkey"] = definition.pubkey
    if definition.schema is not None:
        data["schema"] = definition.schema
    return data
