"""Parser for a JSON tool-call object embedded in free model text.

Models asked for a tool call tend to wrap the object in prose, code
fences or ``<tool_code>`` tags. The scanner below finds the first
balanced ``{...}`` block (string literals and escapes respected) that
is valid JSON, and the parser reads the tool name and arguments from it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from synax_agent.format.types import DEFAULT_CALL_FORMAT, CallFormat, ParsedToolCall

logger = logging.getLogger(__name__)


def _match_brace(text: str, start: int) -> int | None:
    """Return the index of the ``}`` closing the ``{`` at ``start``."""
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def find_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring that parses as a JSON object.

    Candidates that are balanced but not valid JSON are skipped and the
    scan resumes at the next ``{``.
    """
    start = text.find("{")
    while start != -1:
        end = _match_brace(text, start)
        if end is not None:
            candidate = text[start : end + 1]
            try:
                if isinstance(json.loads(candidate), dict):
                    return candidate
            except json.JSONDecodeError:
                pass
        start = text.find("{", start + 1)
    return None


class ToolCallParser:
    """Extracts a ParsedToolCall from model output.

    The accepted key names come from the same CallFormat the tool-call
    prompt is rendered with.
    """

    def __init__(self, call_format: CallFormat = DEFAULT_CALL_FORMAT):
        self.call_format = call_format

    def parse(self, text: str | None) -> ParsedToolCall | None:
        """Return the tool call in ``text``, or None if there is none.

        A missing call is a normal outcome (conversational replies may
        contain braces too), never an error.
        """
        if not text:
            return None

        raw = find_json_object(text)
        if raw is None:
            return None
        data: dict[str, Any] = json.loads(raw)

        tool_name = self._tool_name(data)
        if tool_name is None:
            logger.debug("JSON object has no tool name: %s", raw[:120])
            return None

        arguments = self._arguments(data)
        if arguments is None:
            logger.debug("JSON object has no usable arguments: %s", raw[:120])
            return None

        return ParsedToolCall(tool_name=tool_name, arguments=arguments)

    def _tool_name(self, data: dict[str, Any]) -> str | None:
        for key in self.call_format.tool_keys:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    def _arguments(self, data: dict[str, Any]) -> dict[str, Any] | None:
        for key in self.call_format.arguments_keys:
            if key not in data:
                continue
            value = data[key]
            # Some models double-encode the arguments as a JSON string.
            if isinstance(value, str):
                try:
                    value = json.loads(value)
                except json.JSONDecodeError:
                    return None
            return value if isinstance(value, dict) else None
        return None
