"""
synax_agent error types.

Every error carries a short ``code`` so the turn loop can report it
without inspecting the exception class.
"""

from __future__ import annotations


class SynaxError(Exception):
    """Base error for synax_agent."""

    code: str = "SYNAX_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class TransportError(SynaxError):
    """Network failure, timeout or aborted request."""

    code = "TRANSPORT_ERROR"


class BackendError(SynaxError):
    """Generation backend answered with a non-success status."""

    code = "BACKEND_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(SynaxError):
    """Response body missing or not in the expected shape."""

    code = "PROTOCOL_ERROR"


class ProviderUnavailable(SynaxError):
    """Tool provider unreachable or tool listing failed."""

    code = "PROVIDER_UNAVAILABLE"


class ToolInvocationError(SynaxError):
    """A named tool failed during invocation."""

    code = "TOOL_INVOCATION_FAILED"

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"{tool_name}: {message}")
        self.tool_name = tool_name
        self.detail = message


class RegistryError(SynaxError):
    """Tool registry misconfiguration (e.g. duplicate tool names)."""

    code = "REGISTRY_ERROR"
