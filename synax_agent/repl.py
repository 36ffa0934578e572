"""Interactive turn loop.

Input is read on a daemon thread so the event loop stays free, but a
new line is only requested after the previous turn has finished:
turns never overlap.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
import threading

from rich.console import Console

from synax_agent.agent import Agent
from synax_agent.display import Display

logger = logging.getLogger(__name__)

PROMPT = "[magenta] > [/magenta]"

ReadLine = Callable[[], Awaitable["str | None"]]


async def read_console_line(console: Console, prompt: str = PROMPT) -> str | None:
    """Read one line from the terminal; None on EOF."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future[str | None] = loop.create_future()

    def deliver(value: str | None, error: BaseException | None = None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    def worker() -> None:
        try:
            line = console.input(prompt)
        except EOFError:
            loop.call_soon_threadsafe(deliver, None)
        except Exception as e:
            loop.call_soon_threadsafe(deliver, None, e)
        else:
            loop.call_soon_threadsafe(deliver, line)

    threading.Thread(target=worker, name="synax-input", daemon=True).start()
    return await future


def model_installed(model: str, models: list[str]) -> bool:
    """True if ``model`` is in ``models``; an untagged name matches any tag."""
    if ":" in model:
        return model in models
    return any(name.split(":", 1)[0] == model for name in models)


class Repl:
    """Command surface: exit/quit, clear, help, status, tools; anything else is a turn."""

    def __init__(self, agent: Agent, display: Display, read_line: ReadLine | None = None):
        self.agent = agent
        self.display = display
        self._read_line = read_line or (lambda: read_console_line(display.console))

    async def run(self, poll_interval: float = 1.0) -> None:
        self.display.banner()
        self.display.start_polling(poll_interval)
        try:
            while True:
                self.display.show_status_line()
                line = await self._read_line()
                if line is None:
                    break
                if not await self.dispatch(line):
                    break
        finally:
            await self.display.stop_polling()
        self.display.console.print("\nGoodbye! 👋", style="yellow")

    async def dispatch(self, line: str) -> bool:
        """Handle one input line. Returns False when the session should end."""
        text = line.strip()
        if not text:
            return True

        command = text.lower()
        if command in ("exit", "quit"):
            return False
        if command == "clear":
            self.display.clear()
        elif command == "help":
            self.display.help()
        elif command == "status":
            await self.show_status()
        elif command == "tools":
            self.show_tools()
        else:
            await self.agent.handle(text)
        return True

    async def show_status(self) -> None:
        self.display.info("Checking connection to model...")
        backend = self.agent.backend
        try:
            healthy = await backend.health_check()
        except Exception as e:
            logger.debug("Health check raised: %s", e)
            healthy = False

        url = getattr(backend, "base_url", "backend")
        if not healthy:
            self.display.failure(f"Could not connect to Ollama at {url}. Is it running?")
            return

        self.display.success(f"Connected to Ollama at {url} (model: {self.agent.model})")
        try:
            models = await backend.list_models()
        except Exception as e:
            logger.debug("Model listing raised: %s", e)
            models = []
        if models and not model_installed(self.agent.model, models):
            self.display.failure(
                f"Model '{self.agent.model}' is not installed "
                f"(available: {', '.join(models)}). Try: ollama pull {self.agent.model}"
            )

    def show_tools(self) -> None:
        registry = self.agent.registry
        if not registry:
            self.display.info("0 tools registered (conversation-only mode)")
            return
        self.display.success(f"{len(registry)} tool(s) registered")
        for tool in registry:
            self.display.console.print(f"  {tool.name}", style="green", end="", markup=False)
            self.display.console.print(f" - {tool.description}" if tool.description else "", style="grey50", markup=False)
