"""Per-turn routing: conversation or tool invocation.

Each user input is classified on its own by one short, low-temperature
completion. Anything other than a clear TOOL answer, including a
backend failure, routes to conversation so the user is never blocked.
"""

from __future__ import annotations

from enum import Enum
import logging

from synax_agent.backends.base import Backend, GenerateRequest
from synax_agent.prompt import build_classification_prompt
from synax_agent.tools import ToolRegistry

logger = logging.getLogger(__name__)

MAX_ROUTER_TEMPERATURE = 0.1


class RoutingDecision(Enum):
    """Where a user turn is dispatched."""

    CONVERSATION = "conversation"
    TOOL = "tool"


def classify_reply(reply: str | None) -> RoutingDecision:
    """Map the classifier's raw reply to a decision.

    Only the first token of the trimmed, upper-cased reply is inspected.
    """
    tokens = (reply or "").strip().upper().split()
    if tokens and tokens[0].startswith("TOOL"):
        return RoutingDecision.TOOL
    return RoutingDecision.CONVERSATION


class Router:
    """Classifies user input against the current tool registry."""

    def __init__(self, backend: Backend, model: str, temperature: float = MAX_ROUTER_TEMPERATURE):
        self.backend = backend
        self.model = model
        self.temperature = min(temperature, MAX_ROUTER_TEMPERATURE)

    async def route(self, user_input: str, registry: ToolRegistry) -> RoutingDecision:
        if not registry:
            return RoutingDecision.CONVERSATION

        request = GenerateRequest(
            model=self.model,
            prompt=build_classification_prompt(user_input, registry),
            stream=False,
            temperature=self.temperature,
        )
        try:
            response = await self.backend.generate(request)
        except Exception as e:
            logger.warning("Routing failed, falling back to conversation: %s", e)
            return RoutingDecision.CONVERSATION

        decision = classify_reply(response.content)
        logger.debug("Routed %r -> %s (reply=%r)", user_input[:60], decision.name, response.content[:40])
        return decision
