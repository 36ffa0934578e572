"""Ollama backend for synax_agent.

Talks to a local Ollama server through the prompt-style /api/generate
endpoint. Streaming responses arrive as newline-delimited JSON objects,
each optionally carrying a ``response`` fragment.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import replace
import json
import logging
from typing import Any

import httpx

from synax_agent.backends.base import Backend, GenerateRequest, GenerateResponse
from synax_agent.errors import BackendError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:11434"
DEFAULT_TIMEOUT = 60.0  # seconds, whole call


class OllamaBackend(Backend):
    """Ollama LLM backend (prompt/completion API)."""

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Injected by tests; None means the default network transport.
        self._transport = transport

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or self.timeout),
            transport=self._transport,
        )

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/api/generate"

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate a complete response (non-streaming)."""

        payload = replace(request, stream=False).to_payload()

        try:
            async with self._client() as client:
                async with asyncio.timeout(self.timeout):
                    response = await client.post(self.generate_url, json=payload)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransportError(f"Request timed out after {self.timeout:g}s") from e
        except httpx.TransportError as e:
            raise TransportError(f"Could not reach {self.base_url}: {e}") from e

        if not response.is_success:
            raise _status_error(response)

        if not response.content:
            raise ProtocolError("No response body received from the server")

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Response body is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise ProtocolError("Response body has no 'response' field")

        return GenerateResponse(
            content=data["response"],
            model=data.get("model", request.model),
            done=bool(data.get("done", True)),
            tokens_prompt=data.get("prompt_eval_count", 0),
            tokens_completion=data.get("eval_count", 0),
        )

    async def generate_stream(self, request: GenerateRequest) -> AsyncIterator[str]:
        """Generate a response with streaming.

        Yields each ``response`` fragment as soon as its line arrives.
        Malformed lines and objects without a fragment are skipped.
        """

        payload = replace(request, stream=True).to_payload()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        async with self._client() as client:
            http_request = client.build_request("POST", self.generate_url, json=payload)
            try:
                async with asyncio.timeout_at(deadline):
                    response = await client.send(http_request, stream=True)
            except (TimeoutError, httpx.TimeoutException) as e:
                raise TransportError(f"Request timed out after {self.timeout:g}s") from e
            except httpx.TransportError as e:
                raise TransportError(f"Could not reach {self.base_url}: {e}") from e

            try:
                if not response.is_success:
                    await response.aread()
                    raise _status_error(response)

                lines = response.aiter_lines()
                received = False
                while True:
                    try:
                        async with asyncio.timeout_at(deadline):
                            line = await anext(lines)
                    except StopAsyncIteration:
                        break
                    except (TimeoutError, httpx.TimeoutException) as e:
                        raise TransportError(
                            f"Stream timed out after {self.timeout:g}s"
                        ) from e
                    except httpx.TransportError as e:
                        raise TransportError(f"Stream interrupted: {e}") from e

                    if not line.strip():
                        continue
                    received = True

                    fragment = parse_stream_line(line)
                    if fragment:
                        yield fragment

                if not received:
                    raise ProtocolError("No response body received from the server")
            finally:
                await response.aclose()

    async def health_check(self) -> bool:
        """Check if Ollama is available."""
        try:
            async with self._client(timeout=5) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except (httpx.HTTPError, httpx.InvalidURL):
            return False

    async def list_models(self) -> list[str]:
        """List available models."""
        try:
            async with self._client(timeout=5) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                data = response.json()
                return [m["name"] for m in data.get("models", [])]
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, KeyError, TypeError):
            return []


def parse_stream_line(line: str) -> str | None:
    """Extract the ``response`` fragment from one NDJSON line.

    Returns None for lines that are not JSON or carry no fragment.
    """
    try:
        data: Any = json.loads(line)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed stream line: %r", line[:120])
        return None

    if not isinstance(data, dict):
        return None
    if "error" in data:
        logger.warning("Backend reported error mid-stream: %s", data["error"])
    fragment = data.get("response")
    return fragment if isinstance(fragment, str) else None


def _status_error(response: httpx.Response) -> BackendError:
    """Build a BackendError from a non-success response.

    Uses the server's ``error`` field when the body is JSON, otherwise
    the raw status line.
    """
    message = None
    try:
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            message = str(data["error"])
    except (json.JSONDecodeError, UnicodeDecodeError):
        pass

    if message is None:
        message = f"HTTP {response.status_code} {response.reason_phrase}".strip()
    return BackendError(message, status_code=response.status_code)
