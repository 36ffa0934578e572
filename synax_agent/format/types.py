"""Types shared by the tool-call prompt and the tool-call parser."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ParsedToolCall:
    """A tool call extracted from model text."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CallFormat:
    """Key names of the JSON object the model is asked to produce.

    The prompt template asks for ``tool_key``/``arguments_key``; the
    parser accepts those first and then the alternates, so both sides
    are driven by the same value.
    """

    tool_key: str = "tool"
    arguments_key: str = "arguments"
    tool_aliases: tuple[str, ...] = ("tool_name", "name")
    arguments_aliases: tuple[str, ...] = ("parameters", "args")

    @property
    def tool_keys(self) -> tuple[str, ...]:
        return (self.tool_key, *self.tool_aliases)

    @property
    def arguments_keys(self) -> tuple[str, ...]:
        return (self.arguments_key, *self.arguments_aliases)

    def example(self) -> str:
        """JSON skeleton shown to the model."""
        return (
            "{\n"
            f'    "{self.tool_key}": "the_name_of_the_tool_to_use",\n'
            f'    "{self.arguments_key}": {{\n'
            '        "param1": "value1",\n'
            '        "param2": "value2"\n'
            "    }\n"
            "}"
        )


DEFAULT_CALL_FORMAT = CallFormat()
