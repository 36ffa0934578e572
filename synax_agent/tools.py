"""Tool registry for synax_agent.

Tools are not defined locally: they are discovered from an MCP tool
provider when the session connects. The registry is an immutable
snapshot of that listing and is replaced wholesale on refresh.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from synax_agent.errors import ProviderUnavailable, RegistryError

if TYPE_CHECKING:
    from synax_agent.provider import ToolProvider

logger = logging.getLogger(__name__)

# Field names providers have used for the argument schema, in lookup order.
SCHEMA_FIELDS = ("inputSchema", "input_schema", "parameters")


def _empty_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool advertised by the provider."""

    name: str
    description: str = ""
    argument_schema: dict[str, Any] = field(default_factory=_empty_schema)

    @property
    def properties(self) -> dict[str, Any]:
        """Schema properties, or an empty dict if the schema has none."""
        props = self.argument_schema.get("properties")
        return props if isinstance(props, dict) else {}

    @property
    def required(self) -> list[str]:
        req = self.argument_schema.get("required")
        return list(req) if isinstance(req, list) else []


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def descriptor_from_provider(record: Any) -> ToolDescriptor:
    """Normalize one provider tool record into a ToolDescriptor.

    Accepts plain mappings and SDK objects (``mcp.types.Tool``). The
    schema may be exposed as ``inputSchema``, ``input_schema`` or
    ``parameters`` depending on the provider version.
    """
    name = _field(record, "name")
    if not isinstance(name, str) or not name:
        raise RegistryError(f"Tool record has no name: {record!r}")

    schema = None
    for field_name in SCHEMA_FIELDS:
        schema = _field(record, field_name)
        if schema is not None:
            break
    if isinstance(schema, Mapping):
        schema = dict(schema)
    else:
        schema = _empty_schema()

    description = _field(record, "description") or ""
    return ToolDescriptor(name=name, description=str(description), argument_schema=schema)


class ToolRegistry:
    """Ordered, read-only collection of tools keyed by name."""

    def __init__(self, tools: Iterable[ToolDescriptor] = ()):
        by_name: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in by_name:
                raise RegistryError(f"Duplicate tool name: {tool.name}")
            by_name[tool.name] = tool
        self._tools = by_name

    @classmethod
    def empty(cls) -> ToolRegistry:
        return cls()

    def __len__(self) -> int:
        return len(self._tools)

    def __bool__(self) -> bool:
        return bool(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def get_tool(self, name: str) -> ToolDescriptor | None:
        """Get a specific tool by name."""
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __repr__(self) -> str:
        return f"ToolRegistry({self.names!r})"


async def refresh(provider: ToolProvider) -> ToolRegistry:
    """Build a fresh registry from the provider's current tool list.

    Raises:
        ProviderUnavailable: if the provider cannot be reached or listing fails
    """
    try:
        records = await provider.list_tools()
    except ProviderUnavailable:
        raise
    except Exception as e:
        raise ProviderUnavailable(f"Tool listing failed: {e}") from e

    registry = ToolRegistry(descriptor_from_provider(r) for r in records)
    logger.info("Registered %d tool(s): %s", len(registry), ", ".join(registry.names))
    return registry
