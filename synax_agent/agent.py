"""Core agent logic for synax_agent.

The agent is the orchestrator that ties together:
- Tool discovery (MCP provider -> registry)
- Routing (conversation vs. tool)
- Streamed generation for conversation turns
- Tool-call extraction and invocation for tool turns

One turn runs at a time. Every synax_agent error raised inside a turn
is reported to the user and the agent returns to IDLE.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging

from synax_agent.backends.base import Backend, GenerateRequest
from synax_agent.backends.ollama import OllamaBackend
from synax_agent.config import Config
from synax_agent.display import Display
from synax_agent.errors import (
    ProviderUnavailable,
    RegistryError,
    SynaxError,
    ToolInvocationError,
)
from synax_agent.format import DEFAULT_CALL_FORMAT, CallFormat, ParsedToolCall, ToolCallParser
from synax_agent.invoker import ArgumentRemapper, InvocationResult, ToolInvoker
from synax_agent.prompt import build_tool_call_prompt
from synax_agent.provider import ToolProvider
from synax_agent.router import Router, RoutingDecision
from synax_agent.tools import ToolRegistry, refresh

logger = logging.getLogger(__name__)


class TurnState(Enum):
    """Lifecycle of a single user turn."""

    IDLE = "idle"
    ROUTING = "routing"
    GENERATING = "generating"
    INVOKING = "invoking"
    DONE = "done"


@dataclass
class TurnOutcome:
    """What happened during one turn."""

    decision: RoutingDecision | None = None
    tool_call: ParsedToolCall | None = None
    result: InvocationResult | None = None
    error: SynaxError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Agent:
    """Routes user input to conversation or tool invocation."""

    def __init__(
        self,
        config: Config,
        display: Display,
        backend: Backend | None = None,
        provider: ToolProvider | None = None,
        call_format: CallFormat = DEFAULT_CALL_FORMAT,
    ):
        self.config = config
        self.display = display

        self.backend = backend or OllamaBackend(
            base_url=config.ollama.url,
            timeout=config.ollama.timeout,
        )
        self.provider = provider
        self.registry = ToolRegistry.empty()

        self.router = Router(
            self.backend,
            model=config.agent.model,
            temperature=config.agent.router_temperature,
        )
        self.call_format = call_format
        self.parser = ToolCallParser(call_format)
        self.invoker = (
            ToolInvoker(provider, ArgumentRemapper(config.remap)) if provider is not None else None
        )

        self.state = TurnState.IDLE
        self._turn_lock = asyncio.Lock()

    @property
    def model(self) -> str:
        return self.config.agent.model

    async def connect_tools(self) -> bool:
        """Connect to the tool provider and load its tools.

        Never raises: on failure the registry stays empty and the agent
        works in conversation-only mode.
        """
        if self.provider is None:
            return False

        try:
            await self.provider.connect()
            self.registry = await refresh(self.provider)
        except (ProviderUnavailable, RegistryError) as e:
            logger.warning("Tool provider unavailable: %s", e)
            self.display.error("MCP", f"{e} (continuing in conversation-only mode)")
            self.registry = ToolRegistry.empty()
            await self.provider.close()
            self.display.state.mcp_connected = False
            return False

        self.display.state.mcp_connected = True
        self.display.info(f"MCP tools: {', '.join(self.registry.names) or '(none)'}")
        return True

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()
        self.display.state.mcp_connected = False

    async def handle(self, user_input: str) -> TurnOutcome:
        """Run one turn for ``user_input``."""
        async with self._turn_lock:
            outcome = TurnOutcome()
            label = "Error"
            try:
                self.state = TurnState.ROUTING
                outcome.decision = await self.router.route(user_input, self.registry)

                if outcome.decision is RoutingDecision.TOOL:
                    label = "Tool Error"
                    self.state = TurnState.INVOKING
                    await self._tool_turn(user_input, outcome)
                else:
                    self.state = TurnState.GENERATING
                    await self._conversation_turn(user_input)
                self.state = TurnState.DONE
            except SynaxError as e:
                logger.debug("Turn failed: %s [%s]", e, e.code)
                outcome.error = e
                self.display.error(label, e.message)
            finally:
                self.state = TurnState.IDLE
            return outcome

    async def _conversation_turn(self, user_input: str) -> None:
        opts = self.config.ollama
        request = GenerateRequest(
            model=self.model,
            prompt=user_input,
            stream=True,
            temperature=opts.temperature,
            top_p=opts.top_p,
            top_k=opts.top_k,
        )
        try:
            async for fragment in self.backend.generate_stream(request):
                self.display.fragment(fragment)
        finally:
            self.display.end_stream()

    async def _tool_turn(self, user_input: str, outcome: TurnOutcome) -> None:
        opts = self.config.ollama
        request = GenerateRequest(
            model=self.model,
            prompt=build_tool_call_prompt(user_input, self.registry, self.call_format),
            stream=False,
            temperature=self.config.agent.tool_temperature,
            top_p=opts.top_p,
            top_k=opts.top_k,
        )
        response = await self.backend.generate(request)

        call = self.parser.parse(response.content)
        if call is None:
            # No tool call after all; show whatever the model said.
            if response.content.strip():
                self.display.answer(response.content.strip())
            else:
                self.display.failure("The model did not produce a tool call")
            return
        outcome.tool_call = call

        tool = self.registry.get_tool(call.tool_name)
        if tool is None:
            raise ToolInvocationError(call.tool_name, "unknown tool")
        if self.invoker is None:
            raise ToolInvocationError(call.tool_name, "no tool provider connected")

        self.display.tool_start(call.tool_name)
        outcome.result = await self.invoker.invoke(
            call.tool_name,
            call.arguments,
            declared=tool.properties.keys(),
        )
        for text in outcome.result.texts():
            self.display.tool_output(text)
