"""Terminal output for synax_agent.

All user-visible output goes through one rich Console. The status line
shows the last known working directory, the git branch, the MCP
connection indicator and the model. The directory is sampled by a
background task; the renderer is its only reader.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import os
import subprocess

from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)

HELP_ROWS = [
    ("exit/quit", "Exit the application"),
    ("clear", "Clear the screen"),
    ("help", "Display this help"),
    ("status", "Check connection to the model"),
    ("tools", "List available tools"),
]


@dataclass
class DisplayState:
    """Process-scoped display state, owned by Display."""

    cwd: str
    model: str
    mcp_connected: bool = False


def git_branch(cwd: str) -> str:
    """Current git branch of ``cwd``, or "" outside a repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):
        return ""
    return result.stdout.strip() if result.returncode == 0 else ""


async def poll_cwd(state: DisplayState, interval: float = 1.0) -> None:
    """Keep ``state.cwd`` current until cancelled."""
    while True:
        try:
            state.cwd = os.getcwd()
        except FileNotFoundError:
            pass  # directory removed under us; keep the last known one
        await asyncio.sleep(interval)


class Display:
    """User-facing output."""

    def __init__(self, model: str, console: Console | None = None, status_bar: bool = True):
        self.console = console or Console(highlight=False)
        self.state = DisplayState(cwd=os.getcwd(), model=model)
        self.status_bar = status_bar
        self._poller: asyncio.Task[None] | None = None

    # -- lifecycle -----------------------------------------------------

    def start_polling(self, interval: float = 1.0) -> None:
        if self._poller is None:
            self._poller = asyncio.create_task(poll_cwd(self.state, interval))

    async def stop_polling(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            try:
                await self._poller
            except asyncio.CancelledError:
                pass
            self._poller = None

    # -- rendering -----------------------------------------------------

    def render_status_line(self) -> Text:
        line = Text(f" -> {self.state.cwd}", style="grey50")
        branch = git_branch(self.state.cwd)
        if branch:
            line.append(f" ({branch})", style="magenta")
        if self.state.mcp_connected:
            line.append("   | ", style="grey50")
            line.append("●", style="green")
            line.append(" MCP |   ", style="grey50")
        else:
            line.append("   ")
        line.append(self.state.model, style="green")
        return line

    def show_status_line(self) -> None:
        if self.status_bar:
            self.console.print(self.render_status_line())

    def banner(self) -> None:
        self.console.print(f" {self.state.model} CLI started!", style="green")
        self.console.print(' Type "exit" or "quit" to quit, "clear" to clear the screen', style="grey50")
        self.console.print(' Type "help" to see available commands\n', style="grey50")

    def help(self) -> None:
        self.console.print("\nAvailable commands:", style="cyan")
        for name, text in HELP_ROWS:
            self.console.print(f"  {name:<10}- {text}", style="grey50")

    def clear(self) -> None:
        self.console.clear()

    # -- messages ------------------------------------------------------

    def info(self, message: str) -> None:
        self.console.print(message, style="blue", markup=False)

    def success(self, message: str) -> None:
        self.console.print(f"✓ {message}", style="green", markup=False)

    def failure(self, message: str) -> None:
        self.console.print(f"✗ {message}", style="red", markup=False)

    def error(self, label: str, message: str) -> None:
        line = Text("\n")
        line.append(f"{label}: ", style="bold red")
        line.append(message)
        self.console.print(line)

    def fragment(self, text: str) -> None:
        """Write a streamed fragment without a trailing newline."""
        self.console.print(text, style="blue", end="", soft_wrap=True, markup=False)

    def end_stream(self) -> None:
        self.console.print("\n")

    def answer(self, text: str) -> None:
        self.console.print(text, style="blue", markup=False)

    def tool_start(self, tool_name: str) -> None:
        line = Text("\n🔧 Running tool: ")
        line.append(tool_name, style="blue")
        self.console.print(line)

    def tool_output(self, text: str) -> None:
        self.console.print(text, style="magenta", markup=False)
