"""Tool call parsers."""

from synax_agent.format.parsers.json_object import ToolCallParser, find_json_object

__all__ = ["ToolCallParser", "find_json_object"]
