import httpx
import pytest
import respx

from synax_agent.agent import Agent
from synax_agent.backends.ollama import OllamaBackend
from synax_agent.config import Config
from synax_agent.repl import Repl, model_installed
from synax_agent.tools import ToolDescriptor, ToolRegistry


def scripted(*lines):
    queue = list(lines)

    async def read_line():
        return queue.pop(0) if queue else None

    return read_line


@pytest.fixture
def agent(display, fake_backend):
    return Agent(Config(), display, backend=fake_backend)


@pytest.mark.asyncio
@pytest.mark.parametrize("command", ["exit", "quit", "  EXIT  "])
async def test_exit_commands_stop_the_loop(agent, display, command):
    assert await Repl(agent, display).dispatch(command) is False


@pytest.mark.asyncio
async def test_empty_line_is_ignored(agent, display, fake_backend):
    assert await Repl(agent, display).dispatch("   ") is True
    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_help_lists_commands(agent, display, output):
    await Repl(agent, display).dispatch("help")
    text = output.getvalue()
    for name in ("exit/quit", "clear", "help", "status", "tools"):
        assert name in text


@pytest.mark.asyncio
async def test_tools_with_empty_registry_reports_zero(agent, display, output, fake_backend):
    await Repl(agent, display).dispatch("tools")
    assert "0 tools" in output.getvalue()
    assert fake_backend.requests == []


@pytest.mark.asyncio
async def test_tools_lists_registered_names(agent, display, output):
    agent.registry = ToolRegistry([ToolDescriptor("add-note", "adds a note"), ToolDescriptor("ls")])
    await Repl(agent, display).dispatch("tools")
    text = output.getvalue()
    assert "2 tool(s)" in text
    assert "add-note - adds a note" in text
    assert "ls" in text


@pytest.mark.asyncio
async def test_status_ok(agent, display, output):
    await Repl(agent, display).dispatch("status")
    assert "✓ Connected to Ollama" in output.getvalue()


@pytest.mark.asyncio
@respx.mock
async def test_status_with_unreachable_backend_does_not_raise(display, output):
    respx.get("http://localhost:9/api/tags").mock(side_effect=httpx.ConnectError("refused"))
    agent = Agent(Config(), display, backend=OllamaBackend("http://localhost:9"))

    assert await Repl(agent, display).dispatch("status") is True
    assert "✗ Could not connect to Ollama" in output.getvalue()


@pytest.mark.asyncio
async def test_other_input_is_a_turn(agent, display, output, fake_backend):
    fake_backend.fragments = ["Hello!"]
    await Repl(agent, display).dispatch("hi there")
    assert fake_backend.requests[0].prompt == "hi there"
    assert "Hello!" in output.getvalue()


@pytest.mark.asyncio
async def test_run_processes_lines_until_exit(agent, display, output, fake_backend):
    fake_backend.fragments = ["pong"]
    repl = Repl(agent, display, read_line=scripted("ping", "", "help", "exit", "never read"))

    await repl.run(poll_interval=0.01)

    assert [r.prompt for r in fake_backend.requests] == ["ping"]
    assert "Goodbye" in output.getvalue()
    assert display._poller is None


@pytest.mark.asyncio
async def test_run_stops_on_eof(agent, display, output):
    await Repl(agent, display, read_line=scripted()).run(poll_interval=0.01)
    assert "Goodbye" in output.getvalue()


@pytest.mark.asyncio
@respx.mock
async def test_status_reports_missing_model(display, output):
    respx.get("http://ollama:11434/api/tags").mock(
        return_value=httpx.Response(200, json={"models": [{"name": "llama3:latest"}]})
    )
    agent = Agent(Config(), display, backend=OllamaBackend("http://ollama:11434"))

    await Repl(agent, display).dispatch("status")

    text = output.getvalue()
    assert "✓ Connected to Ollama" in text
    assert "Model 'mistral' is not installed" in text
    assert "llama3:latest" in text


@pytest.mark.asyncio
@respx.mock
async def test_status_accepts_tagged_install_of_configured_model(display, output):
    respx.get("http://ollama:11434/api/tags").mock(
        return_value=httpx.Response(200, json={"models": [{"name": "mistral:latest"}]})
    )
    agent = Agent(Config(), display, backend=OllamaBackend("http://ollama:11434"))

    await Repl(agent, display).dispatch("status")

    assert "not installed" not in output.getvalue()


@pytest.mark.parametrize(
    "model, models, expected",
    [
        ("mistral", ["mistral:latest"], True),
        ("mistral", ["mistral-nemo:latest"], False),
        ("qwen3:4b", ["qwen3:4b", "qwen3:8b"], True),
        ("qwen3:4b", ["qwen3:8b"], False),
    ],
)
def test_model_installed(model, models, expected):
    assert model_installed(model, models) is expected
