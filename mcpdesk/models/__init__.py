from .server import (
    LocalProcessConfig,
    RemoteStreamConfig,
    ServerIdentity,
    ServerStatus,
    TransportKind,
)
from .tool import ParameterType, Tool, ToolParameter
from .outcome import ContentKind, InvocationOutcome, OutcomeStatus

__all__ = [
    "LocalProcessConfig",
    "RemoteStreamConfig",
    "ServerIdentity",
    "ServerStatus",
    "TransportKind",
    "ParameterType",
    "Tool",
    "ToolParameter",
    "ContentKind",
    "InvocationOutcome",
    "OutcomeStatus",
]
