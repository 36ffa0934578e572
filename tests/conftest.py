from __future__ import annotations

from collections.abc import AsyncIterator
import io
from pathlib import Path

import pytest
from rich.console import Console

from synax_agent.backends.base import Backend, GenerateRequest, GenerateResponse
from synax_agent.display import Display


@pytest.fixture(autouse=True)
def hermetic_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Autouse: each test runs in its own tmp cwd with HOME inside tmp, and
    no SYNAX_* variables leak in from the developer's shell.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for var in ("SYNAX_MODEL", "SYNAX_OLLAMA_URL", "SYNAX_OLLAMA_TIMEOUT", "SYNAX_MCP_COMMAND"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


class FakeBackend(Backend):
    """Scripted backend: returns queued replies and records requests."""

    def __init__(
        self,
        replies: list[str | Exception] | None = None,
        fragments: list[str] | None = None,
        stream_error: Exception | None = None,
        healthy: bool = True,
    ):
        self.replies = list(replies or [])
        self.fragments = list(fragments or [])
        self.stream_error = stream_error
        self.healthy = healthy
        self.requests: list[GenerateRequest] = []
        self.base_url = "http://fake:11434"

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return GenerateResponse(content=reply, model=request.model)

    async def generate_stream(self, request: GenerateRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def display(output: io.StringIO) -> Display:
    console = Console(file=output, force_terminal=False, color_system=None, width=200)
    return Display(model="test-model", console=console, status_bar=False)


@pytest.fixture
def backend_factory() -> type[FakeBackend]:
    return FakeBackend
