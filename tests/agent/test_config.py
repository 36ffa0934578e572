from pathlib import Path

import pytest

from synax_agent.config import Config, load_config


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_defaults_without_any_file():
    config = load_config()
    assert config.agent.model == "mistral"
    assert config.ollama.url == "http://localhost:11434"
    assert config.ollama.timeout == 60.0
    assert config.agent.router_temperature == 0.1
    assert config.mcp.configured is False
    assert config.remap["*"]["note"] == "text"


def test_project_file_overrides_user_file(hermetic_env):
    write(hermetic_env / "home" / ".synax" / "agent.toml", '[agent]\nmodel = "llama3"\n[ollama]\ntimeout = 5\n')
    write(hermetic_env / ".synax" / "agent.toml", '[agent]\nmodel = "qwen"\n')

    config = load_config()

    assert config.agent.model == "qwen"
    assert config.ollama.timeout == 5


def test_explicit_config_path_wins_over_discovered_files(hermetic_env):
    write(hermetic_env / "synax.toml", '[agent]\nmodel = "qwen"\n')
    explicit = write(hermetic_env / "elsewhere" / "custom.toml", '[agent]\nmodel = "phi"\n')

    assert Config.load(str(explicit)).agent.model == "phi"


def test_mcp_section_and_remap_merge(hermetic_env):
    write(
        hermetic_env / "synax.toml",
        """
[mcp]
command = "node"
args = ["build/index.js"]
env = { NOTES_DIR = "/tmp/notes" }

[remap.add-note]
body = "text"
""",
    )

    config = load_config()

    assert config.mcp.configured
    assert config.mcp.args == ["build/index.js"]
    assert config.mcp.env == {"NOTES_DIR": "/tmp/notes"}
    assert config.remap["add-note"] == {"body": "text"}
    assert "*" in config.remap


def test_mcp_disabled_is_not_configured(hermetic_env):
    write(hermetic_env / "synax.toml", '[mcp]\nenabled = false\ncommand = "node"\n')
    assert load_config().mcp.configured is False


def test_invalid_toml_is_ignored(hermetic_env, caplog):
    write(hermetic_env / "synax.toml", "[agent\nmodel = ")

    config = load_config()

    assert config.agent.model == "mistral"
    assert "Ignoring config file" in caplog.text


def test_unknown_keys_are_ignored(hermetic_env):
    write(hermetic_env / "synax.toml", '[agent]\nflavour = "mint"\nmodel = "qwen"\n')
    config = load_config()
    assert config.agent.model == "qwen"
    assert not hasattr(config.agent, "flavour")


def test_env_overrides_files(hermetic_env, monkeypatch):
    write(hermetic_env / "synax.toml", '[agent]\nmodel = "qwen"\n')
    monkeypatch.setenv("SYNAX_MODEL", "llama3")
    monkeypatch.setenv("SYNAX_OLLAMA_URL", "http://gpu-box:11434")
    monkeypatch.setenv("SYNAX_OLLAMA_TIMEOUT", "12.5")

    config = load_config()

    assert config.agent.model == "llama3"
    assert config.ollama.url == "http://gpu-box:11434"
    assert config.ollama.timeout == 12.5


def test_invalid_env_value_is_ignored(monkeypatch):
    monkeypatch.setenv("SYNAX_OLLAMA_TIMEOUT", "soon")
    assert load_config().ollama.timeout == 60.0


@pytest.mark.parametrize(
    "command_line, command, args",
    [
        ("node build/server.js", "node", ["build/server.js"]),
        ("uvx 'notes server' --verbose", "uvx", ["notes server", "--verbose"]),
    ],
)
def test_mcp_command_env_is_split(monkeypatch, command_line, command, args):
    monkeypatch.setenv("SYNAX_MCP_COMMAND", command_line)
    config = load_config()
    assert (config.mcp.command, config.mcp.args) == (command, args)


@pytest.mark.parametrize("command_line", ["   ", "node 'unterminated"])
def test_unusable_mcp_command_env_is_ignored(hermetic_env, monkeypatch, command_line):
    write(hermetic_env / "synax.toml", '[mcp]\ncommand = "node"\nargs = ["index.js"]\n')
    monkeypatch.setenv("SYNAX_MCP_COMMAND", command_line)

    config = load_config()

    assert (config.mcp.command, config.mcp.args) == ("node", ["index.js"])
