"""
mcpdesk - connect to Model Context Protocol tool servers, browse their tools and call them.
"""
from typing import Any, Dict, List, MutableMapping, Optional

# Core components
from .manager import ServerManager, ServerState
from .negotiator import TransportNegotiator
from .registry import Session, SessionRegistry
from .invoker import ToolInvoker
from .classifier import classify_response
from .normalizer import normalize_tool, normalize_tools

# Supporting modules
from .errors import ConfigError, ConnectError, DisconnectError, MCPDeskError, ToolFetchError
from .logging import EventLog, IEventLogSink, LogEntry
from .models import (
    ContentKind,
    InvocationOutcome,
    OutcomeStatus,
    ParameterType,
    ServerIdentity,
    ServerStatus,
    Tool,
    ToolParameter,
    TransportKind,
)
from .result import Result
from .settings import DeskSettings
from .store import ConfigStore, IConfigStore
from .tools import coerce_argument, load_servers_config, parse_server_config, validate_arguments
from .transports import ITransportStrategy, default_strategies
from .utils.logging import set_debug

__all__ = [
    'ServerManager',
    'ServerState',
    'TransportNegotiator',
    'Session',
    'SessionRegistry',
    'ToolInvoker',
    'classify_response',
    'normalize_tool',
    'normalize_tools',
    'MCPDeskError',
    'ConfigError',
    'ConnectError',
    'ToolFetchError',
    'DisconnectError',
    'EventLog',
    'IEventLogSink',
    'LogEntry',
    'ContentKind',
    'InvocationOutcome',
    'OutcomeStatus',
    'ParameterType',
    'ServerIdentity',
    'ServerStatus',
    'Tool',
    'ToolParameter',
    'TransportKind',
    'Result',
    'DeskSettings',
    'ConfigStore',
    'IConfigStore',
    'coerce_argument',
    'load_servers_config',
    'parse_server_config',
    'validate_arguments',
    'create_desk',
]


def create_desk(
    settings: Optional[DeskSettings] = None,
    store_backend: Optional[MutableMapping[str, Any]] = None,
    strategies: Optional[Dict[TransportKind, List[ITransportStrategy]]] = None,
    servers: Optional[List[ServerIdentity]] = None,
) -> ServerManager:
    """
    Wire up a ready-to-use :class:`ServerManager`.

    Args:
        settings: Timeouts, latency floor, log capacity and storage key. Defaults to
                  `DeskSettings.from_env()`.
        store_backend: Host key/value store for saved servers (a plain dict if omitted).
        strategies: Override the transport strategies per kind (mainly for tests).
        servers: Server definitions to seed into the store, replacing same-named records.

    Returns:
        ServerManager: With its own event log, registry and invoker.

    Example:
        desk = create_desk(servers=load_servers_config("mcp.json"))
        tools = (await desk.connect("calculator")).unwrap()
        outcome = await desk.call_tool("calculator", "add", {"a": 1, "b": 2})
    """
    settings = settings or DeskSettings.from_env()
    if settings.debug:
        set_debug(True)

    event_log = EventLog(max_entries=settings.max_log_entries)
    store = ConfigStore(store_backend, storage_key=settings.storage_key)
    for identity in servers or []:
        store.upsert(identity)

    negotiator = TransportNegotiator(
        event_log,
        handshake_timeout=settings.handshake_timeout,
        strategies=strategies if strategies is not None else default_strategies(),
    )
    registry = SessionRegistry(negotiator, event_log)
    invoker = ToolInvoker(registry, event_log, min_latency=settings.min_latency)
    return ServerManager(store, registry, invoker, event_log)
