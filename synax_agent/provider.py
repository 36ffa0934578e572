"""MCP tool provider connection.

Spawns the configured MCP server as a subprocess and talks to it over
stdio through the official ``mcp`` client SDK. Only two operations are
used: listing tools and calling a tool.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
import logging
import os
from typing import Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from synax_agent.errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class ToolProvider:
    """Client side of a stdio MCP server.

    Lifecycle:
    - connect(): spawns the server and performs the MCP handshake
    - close(): tears down the session and the subprocess (idempotent)
    """

    def __init__(
        self,
        command: str,
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        show_server_stderr: bool = False,
    ):
        if not command:
            raise ValueError("Command cannot be empty")
        self.command = command
        self.args = list(args or [])
        self.env = dict(env or {})
        self.show_server_stderr = show_server_stderr

        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    @property
    def connected(self) -> bool:
        return self._session is not None

    def describe(self) -> str:
        return " ".join([self.command, *self.args])

    async def connect(self) -> None:
        """Spawn the server and initialize the MCP session.

        Raises:
            ProviderUnavailable: if the process cannot be started or the
                handshake fails
        """
        if self._session is not None:
            return

        params = StdioServerParameters(
            command=self.command,
            args=self.args,
            env={**os.environ, **self.env} if self.env else None,
        )

        stack = AsyncExitStack()
        try:
            if self.show_server_stderr:
                streams = stdio_client(params)
            else:
                devnull = stack.enter_context(open(os.devnull, "w"))
                streams = stdio_client(params, errlog=devnull)
            read, write = await stack.enter_async_context(streams)
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except Exception as e:
            await _close_quietly(stack)
            raise ProviderUnavailable(
                f"Failed to connect to MCP server '{self.describe()}': {e}"
            ) from e

        self._stack = stack
        self._session = session
        logger.info("Connected to MCP server: %s", self.describe())

    async def list_tools(self) -> list[Any]:
        """Return the provider's raw tool records."""
        session = self._require_session()
        try:
            result = await session.list_tools()
        except Exception as e:
            raise ProviderUnavailable(f"Tool listing failed: {e}") from e
        return list(result.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Invoke a tool; returns the SDK's CallToolResult."""
        session = self._require_session()
        return await session.call_tool(name, arguments)

    async def close(self) -> None:
        """Close the session and stop the server process."""
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await _close_quietly(stack)
            logger.debug("MCP provider disconnected")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ProviderUnavailable("MCP server is not connected")
        return self._session


async def _close_quietly(stack: AsyncExitStack) -> None:
    try:
        await stack.aclose()
    except Exception as e:
        # Subprocess teardown can fail if the server already died.
        logger.debug("Error while closing MCP session: %s", e)
