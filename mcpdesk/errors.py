"""
Error taxonomy for mcpdesk.

Components raise these internally; the negotiator, registry and manager convert
them into :class:`~mcpdesk.result.Result` values at their public boundary.
Logical tool failures are not exceptions, see :class:`~mcpdesk.models.outcome.InvocationOutcome`.
"""


class MCPDeskError(Exception):
    """Base class for all mcpdesk errors."""

    def __init__(self, message: str, server_name: str = ""):
        super().__init__(message)
        self.message = message
        self.server_name = server_name

    def __str__(self) -> str:
        return self.message


class ConfigError(MCPDeskError):
    """Malformed or incomplete server definition. Raised before any I/O."""


class ConnectError(MCPDeskError):
    """Transport handshake failed (spawn failure, every sub-protocol failed, timeout)."""

    def __init__(self, message: str, server_name: str = "", attempts=None):
        super().__init__(message, server_name)
        # One human-readable message per transport attempt, in order
        self.attempts = list(attempts or [])


class ToolFetchError(MCPDeskError):
    """The session was established but its tool list could not be retrieved."""


class DisconnectError(MCPDeskError):
    """No session exists for the name, or closing its channel failed."""
