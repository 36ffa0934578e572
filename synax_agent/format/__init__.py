"""Tool-call format: the JSON shape the model is asked for and its parser.

Usage:
    from synax_agent.format import ToolCallParser

    parser = ToolCallParser()
    call = parser.parse(model_text)
    if call:
        await invoker.invoke(call.tool_name, call.arguments)
"""

from synax_agent.format.parsers import ToolCallParser, find_json_object
from synax_agent.format.types import DEFAULT_CALL_FORMAT, CallFormat, ParsedToolCall

__all__ = [
    "CallFormat",
    "DEFAULT_CALL_FORMAT",
    "ParsedToolCall",
    "ToolCallParser",
    "find_json_object",
]
