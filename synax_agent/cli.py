"""synax CLI entry point.

Interactive terminal assistant: free-form conversation with a local
Ollama model, plus tools discovered from an MCP server.
"""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from synax_agent import __version__
from synax_agent.agent import Agent
from synax_agent.config import Config, load_config
from synax_agent.display import Display
from synax_agent.provider import ToolProvider
from synax_agent.repl import Repl

console = Console(stderr=True)  # Diagnostics to stderr

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=verbose)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.command()
@click.option("--url", help="Ollama base URL (default http://localhost:11434)")
@click.option("--model", help="Model name (default mistral)")
@click.option("--config", "config_path", help="Config file path")
@click.option("--timeout", type=float, help="Request timeout in seconds (default 60)")
@click.option("--no-tools", is_flag=True, help="Do not start the MCP tool server")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option("--version", is_flag=True, help="Show version")
def main(
    url: str | None,
    model: str | None,
    config_path: str | None,
    timeout: float | None,
    no_tools: bool,
    verbose: bool,
    version: bool,
) -> None:
    """synax - terminal assistant for a local model and MCP tools.

    \b
    Commands inside the session:
        exit / quit    Leave
        clear          Clear the screen
        help           List commands
        status         Check the model backend
        tools          List registered tools
    """

    if version:
        click.echo(f"synax-agent v{__version__}")
        return

    setup_logging(verbose)

    config = load_config(config_path)

    # Apply CLI overrides
    if url:
        config.ollama.url = url
    if model:
        config.agent.model = model
    if timeout:
        config.ollama.timeout = timeout
    if no_tools:
        config.mcp.enabled = False

    try:
        asyncio.run(_run(config))
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        raise SystemExit(130)


def build_provider(config: Config) -> ToolProvider | None:
    if not config.mcp.configured:
        logger.info("No MCP server configured; conversation-only mode")
        return None
    return ToolProvider(
        command=config.mcp.command,
        args=config.mcp.args,
        env=config.mcp.env,
        show_server_stderr=config.mcp.show_stderr,
    )


async def _run(config: Config) -> None:
    display = Display(model=config.agent.model, status_bar=config.ui.status_bar)
    agent = Agent(config, display, provider=build_provider(config))

    await agent.connect_tools()
    try:
        await Repl(agent, display).run(poll_interval=config.ui.poll_interval)
    finally:
        await agent.close()


if __name__ == "__main__":
    main()
