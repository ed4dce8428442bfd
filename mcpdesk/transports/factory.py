from typing import Dict, List, Optional, Protocol

from fastmcp.client.transports import SSETransport, StreamableHttpTransport

from mcpdesk.errors import ConfigError
from mcpdesk.models.server import ServerIdentity, TransportKind
from mcpdesk.transports.channel import Channel
from mcpdesk.transports.local import LocalProcessStrategy


class ITransportStrategy(Protocol):
    """
    One way of reaching a tool server.

    `open` prepares a :class:`Channel` (spawning a process if needed) without
    performing the handshake; the negotiator drives the handshake itself.
    """
    label: str

    async def open(self, identity: ServerIdentity) -> Channel:
        ...


class StreamableHttpStrategy:
    """Multiplexed bidirectional HTTP stream (the current MCP HTTP transport)."""

    label = "streamable-http"

    async def open(self, identity: ServerIdentity) -> Channel:
        remote = _require_remote(identity)
        transport = StreamableHttpTransport(remote.url, headers=dict(remote.headers) or None)
        return Channel(transport, label=self.label)


class SseStrategy:
    """Single-direction server-sent event stream (the legacy MCP HTTP transport)."""

    label = "sse"

    async def open(self, identity: ServerIdentity) -> Channel:
        remote = _require_remote(identity)
        transport = SSETransport(remote.url, headers=dict(remote.headers) or None)
        return Channel(transport, label=self.label)


def default_strategies() -> Dict[TransportKind, List[ITransportStrategy]]:
    """
    Ordered strategies per transport kind. The negotiator tries them in list order
    and stops at the first that completes a handshake.
    """
    return {
        TransportKind.LOCAL_PROCESS: [LocalProcessStrategy()],
        TransportKind.REMOTE_STREAM: [StreamableHttpStrategy(), SseStrategy()],
    }


def get_strategies(kind: TransportKind,
                   table: Optional[Dict[TransportKind, List[ITransportStrategy]]] = None
                   ) -> List[ITransportStrategy]:
    """
    Look up the strategies for `kind`; an unknown kind yields an empty list.
    """
    table = default_strategies() if table is None else table
    return list(table.get(kind, []))


def _require_remote(identity: ServerIdentity):
    if identity.remote is None or not identity.remote.url:
        raise ConfigError("HTTP configuration must include a URL", identity.name)
    return identity.remote
