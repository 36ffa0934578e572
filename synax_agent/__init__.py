"""synax_agent - terminal assistant routing between a local model and MCP tools."""

__version__ = "0.3.0"

from synax_agent.agent import Agent, TurnOutcome, TurnState
from synax_agent.config import Config, load_config
from synax_agent.format import ParsedToolCall, ToolCallParser
from synax_agent.invoker import ArgumentRemapper, InvocationResult, ToolInvoker
from synax_agent.router import Router, RoutingDecision
from synax_agent.tools import ToolDescriptor, ToolRegistry, descriptor_from_provider, refresh

__all__ = [
    "Agent",
    "ArgumentRemapper",
    "Config",
    "InvocationResult",
    "ParsedToolCall",
    "Router",
    "RoutingDecision",
    "ToolCallParser",
    "ToolDescriptor",
    "ToolInvoker",
    "ToolRegistry",
    "TurnOutcome",
    "TurnState",
    "descriptor_from_provider",
    "load_config",
    "refresh",
]
