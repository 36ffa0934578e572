"""Prompt templates for synax_agent.

Two prompts carry logic: the routing classifier and the tool-call
request. The conversation path sends the user's text unchanged.
"""

from __future__ import annotations

from synax_agent.format.types import DEFAULT_CALL_FORMAT, CallFormat
from synax_agent.tools import ToolRegistry

CLASSIFY_TEMPLATE = """You are a request classifier. Decide whether the user's message asks to run one of the tools below, or is ordinary conversation.

TOOLS:
{tools}

Answer with exactly one word:
- TOOL if the message asks to perform an action that one of the tools can do
- CONVERSATION otherwise

Do not explain your answer.

USER MESSAGE:
{user_input}
"""

TOOL_CALL_TEMPLATE = """** TOOLS:**
You have access to the following tools:
{tools}

** RULES:**
- The user wants to use a tool to answer the request.
- Use the exact tool name and the exact parameter names listed above.
- If the user doesn't provide all required arguments, generate sensible values:
  * For paths: complete a partial path from context, keep the tilde (~) for the home directory
  * For text fields: use a relevant value taken from the request
  * For booleans: use a sensible default (true/false)
  * For numbers: use a reasonable default value
- Always include every required parameter.

** RESPONSE FORMAT:**
Respond ONLY with a JSON object in the following format, with no other text:
{example}

** USER REQUEST:**
{user_input}
"""


def format_tool_list(registry: ToolRegistry) -> str:
    """One ``- name: description`` line per tool."""
    return "\n".join(f"- {t.name}: {t.description}" for t in registry)


def format_tool_parameters(registry: ToolRegistry) -> str:
    """Tool list with each tool's parameters and whether they are required."""
    lines = []
    for tool in registry:
        lines.append(f"- {tool.name}: {tool.description}")
        required = set(tool.required)
        for key, prop in tool.properties.items():
            if isinstance(prop, dict):
                detail = prop.get("description") or prop.get("type") or "any"
            else:
                detail = "any"
            flag = " (required)" if key in required else ""
            lines.append(f"    - {key}: {detail}{flag}")
    return "\n".join(lines)


def build_classification_prompt(user_input: str, registry: ToolRegistry) -> str:
    return CLASSIFY_TEMPLATE.format(
        tools=format_tool_list(registry),
        user_input=user_input,
    )


def build_tool_call_prompt(
    user_input: str,
    registry: ToolRegistry,
    call_format: CallFormat = DEFAULT_CALL_FORMAT,
) -> str:
    """Prompt asking the model for a single JSON tool call.

    The JSON keys come from ``call_format``; pass the same value to the
    ToolCallParser that reads the reply.
    """
    return TOOL_CALL_TEMPLATE.format(
        tools=format_tool_parameters(registry),
        example=call_format.example(),
        user_input=user_input,
    )

