"""Configuration loading for synax_agent.

Config precedence (lowest to highest):
1. Built-in defaults (in code)
2. ~/.synax/agent.toml (user global)
3. ./.synax/agent.toml (project local)
4. ./synax.toml
5. --config PATH
6. Environment variables (SYNAX_*)
7. CLI flags (applied by the caller)

A missing [mcp] command is not an error: the assistant then runs in
conversation-only mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
import os
from pathlib import Path
import shlex
import tomllib
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class OllamaConfig:
    """Generation backend configuration."""

    url: str = "http://localhost:11434"
    timeout: float = 60.0
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40


@dataclass
class AgentConfig:
    """Agent configuration."""

    model: str = "mistral"
    router_temperature: float = 0.1
    tool_temperature: float = 0.3


@dataclass
class McpConfig:
    """Tool provider (MCP stdio server) configuration."""

    enabled: bool = True
    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    show_stderr: bool = False

    @property
    def configured(self) -> bool:
        return self.enabled and bool(self.command)


@dataclass
class UIConfig:
    """Terminal UI configuration."""

    status_bar: bool = True
    poll_interval: float = 1.0


def _default_remap() -> dict[str, dict[str, str]]:
    return {"*": {"note": "text", "content": "text", "message": "text"}}


@dataclass
class Config:
    """Root configuration."""

    agent: AgentConfig = field(default_factory=AgentConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    mcp: McpConfig = field(default_factory=McpConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    remap: dict[str, dict[str, str]] = field(default_factory=_default_remap)

    @classmethod
    def load(cls, config_path: str | None = None) -> Config:
        """Load configuration with precedence."""
        config = cls()

        config_files = [
            Path.home() / ".synax" / "agent.toml",
            Path.cwd() / ".synax" / "agent.toml",
            Path.cwd() / "synax.toml",
        ]

        if config_path:
            explicit = Path(config_path).expanduser()
            if not explicit.exists():
                logger.warning("Config file not found: %s", explicit)
            config_files.append(explicit)

        for path in config_files:
            if path.exists():
                config = _merge_config(config, _load_toml(path))

        return _apply_env_overrides(config)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file; unreadable or invalid files are ignored."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring config file %s: %s", path, e)
        return {}


def _merge_section(section: Any, data: Any) -> None:
    """Copy known keys from a TOML table onto a config section."""
    if not isinstance(data, dict):
        return
    known = {f.name for f in fields(section)}
    for key, value in data.items():
        if key in known:
            setattr(section, key, value)
        else:
            logger.debug("Unknown config key %s.%s", type(section).__name__, key)


def _merge_config(config: Config, data: dict[str, Any]) -> Config:
    """Merge TOML data into config."""

    for name in ("agent", "ollama", "mcp", "ui"):
        if name in data:
            _merge_section(getattr(config, name), data[name])

    if isinstance(data.get("remap"), dict):
        for tool, mapping in data["remap"].items():
            if isinstance(mapping, dict):
                config.remap[tool] = {str(k): str(v) for k, v in mapping.items()}

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides.

    Pattern: SYNAX_SECTION_KEY, e.g. SYNAX_OLLAMA_URL. SYNAX_MCP_COMMAND
    takes a full shell-style command line ("node build/server.js").
    """

    env_map = {
        "SYNAX_MODEL": ("agent", "model", str),
        "SYNAX_OLLAMA_URL": ("ollama", "url", str),
        "SYNAX_OLLAMA_TIMEOUT": ("ollama", "timeout", float),
    }

    for env_var, (section, key, converter) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                setattr(getattr(config, section), key, converter(value))
            except (ValueError, TypeError):
                logger.warning("Ignoring invalid %s=%r", env_var, value)

    command_line = os.environ.get("SYNAX_MCP_COMMAND")
    if command_line:
        try:
            parts = shlex.split(command_line)
        except ValueError as e:
            logger.warning("Ignoring invalid SYNAX_MCP_COMMAND=%r: %s", command_line, e)
            parts = []
        if parts:
            config.mcp.command, config.mcp.args = parts[0], parts[1:]

    return config


# Convenience function
def load_config(config_path: str | None = None) -> Config:
    """Load configuration."""
    return Config.load(config_path)
