"""Tool invocation: argument remapping, dispatch and result handling."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from synax_agent.errors import SynaxError, ToolInvocationError

if TYPE_CHECKING:
    from synax_agent.provider import ToolProvider

logger = logging.getLogger(__name__)

WILDCARD = "*"


class ArgumentRemapper:
    """Renames near-synonym argument keys before dispatch.

    The table maps ``tool -> {supplied_key: canonical_key}``. A
    tool-specific entry always renames. The ``"*"`` entry applies to
    every tool, but only renames to a key the tool's schema declares,
    and a tool-specific entry overrides it per key. Unmapped keys pass
    through. A key the schema declares itself is never renamed, and an
    explicit canonical key wins over a synonym that would overwrite it.
    """

    def __init__(self, table: Mapping[str, Mapping[str, str]] | None = None):
        self.table = {tool: dict(keys) for tool, keys in (table or {}).items()}

    def mapping_for(self, tool_name: str, declared: Collection[str] = ()) -> dict[str, str]:
        merged = {
            supplied: canonical
            for supplied, canonical in self.table.get(WILDCARD, {}).items()
            if canonical in declared
        }
        merged.update(self.table.get(tool_name, {}))
        return merged

    def apply(
        self,
        tool_name: str,
        arguments: Mapping[str, Any],
        declared: Collection[str] = (),
    ) -> dict[str, Any]:
        declared = set(declared)
        mapping = self.mapping_for(tool_name, declared)
        if not mapping:
            return dict(arguments)

        result: dict[str, Any] = {}
        renamed: dict[str, Any] = {}
        for key, value in arguments.items():
            canonical = mapping.get(key)
            if canonical is None or canonical == key or key in declared:
                result[key] = value
            else:
                renamed.setdefault(canonical, value)
                logger.debug("Remapped argument %s.%s -> %s", tool_name, key, canonical)

        for key, value in renamed.items():
            result.setdefault(key, value)
        return result


@dataclass
class ContentBlock:
    """One typed unit of tool output."""

    type: str
    text: str | None = None
    data: Any = None


@dataclass
class InvocationResult:
    """Content blocks returned by a tool call."""

    tool_name: str
    arguments: dict[str, Any]
    blocks: list[ContentBlock] = field(default_factory=list)
    is_error: bool = False

    def texts(self) -> list[str]:
        """Text of the ``text`` blocks, in order; other kinds are skipped."""
        out = []
        for block in self.blocks:
            if block.type == "text" and block.text is not None:
                out.append(block.text)
            else:
                logger.debug("Ignoring %s content block from %s", block.type, self.tool_name)
        return out


def content_block_from_provider(item: Any) -> ContentBlock:
    """Normalize an SDK content item (or a plain dict) into a ContentBlock."""
    if isinstance(item, Mapping):
        block_type = item.get("type", "unknown")
        text = item.get("text")
    else:
        block_type = getattr(item, "type", "unknown")
        text = getattr(item, "text", None)
    return ContentBlock(type=str(block_type), text=text, data=item)


class ToolInvoker:
    """Forwards tool calls to the provider."""

    def __init__(self, provider: ToolProvider, remapper: ArgumentRemapper | None = None):
        self.provider = provider
        self.remapper = remapper or ArgumentRemapper()

    async def invoke(
        self,
        tool_name: str,
        arguments: Mapping[str, Any],
        declared: Collection[str] = (),
    ) -> InvocationResult:
        """Call ``tool_name`` with remapped ``arguments``.

        Raises:
            ToolInvocationError: on any provider failure, or if the tool
                reports an error result
        """
        mapped = self.remapper.apply(tool_name, arguments, declared)
        logger.info("Invoking tool %s with %s", tool_name, sorted(mapped))

        try:
            raw = await self.provider.call_tool(tool_name, mapped)
        except SynaxError as e:
            raise ToolInvocationError(tool_name, e.message) from e
        except Exception as e:
            raise ToolInvocationError(tool_name, str(e) or e.__class__.__name__) from e

        content = _field(raw, "content") or []
        result = InvocationResult(
            tool_name=tool_name,
            arguments=mapped,
            blocks=[content_block_from_provider(item) for item in content],
            is_error=bool(_field(raw, "isError")),
        )
        if result.is_error:
            detail = "\n".join(result.texts()) or "tool reported an error"
            raise ToolInvocationError(tool_name, detail)
        return result


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)
