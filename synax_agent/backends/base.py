"""Abstract backend interface for text generation."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass
class GenerateRequest:
    """Request to generate a completion from a single prompt."""

    model: str
    prompt: str
    stream: bool = False
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40

    def to_payload(self) -> dict:
        """Build the JSON body for /api/generate."""
        return {
            "model": self.model,
            "prompt": self.prompt,
            "stream": self.stream,
            "options": {
                "temperature": self.temperature,
                "top_p": self.top_p,
                "top_k": self.top_k,
            },
        }


@dataclass
class GenerateResponse:
    """Response from non-streaming generation."""

    content: str
    model: str
    done: bool = True
    tokens_prompt: int = 0
    tokens_completion: int = 0


class Backend(ABC):
    """Abstract backend for text generation."""

    @abstractmethod
    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate a response (non-streaming)."""
        pass

    @abstractmethod
    def generate_stream(self, request: GenerateRequest) -> AsyncIterator[str]:
        """Generate a response with streaming."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if backend is available."""
        pass

    async def list_models(self) -> list[str]:
        """Names of the models the backend can serve; empty if unknown."""
        return []
