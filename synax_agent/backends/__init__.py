"""Backend implementations for text generation."""

from synax_agent.backends.base import Backend, GenerateRequest, GenerateResponse
from synax_agent.backends.ollama import OllamaBackend

__all__ = [
    "Backend",
    "GenerateRequest",
    "GenerateResponse",
    "OllamaBackend",
]
