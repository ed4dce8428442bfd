"""
Transport negotiation.

Given a :class:`~mcpdesk.models.server.ServerIdentity`, establish a handshaked
:class:`~mcpdesk.transports.channel.Channel` by trying the strategies registered for its
transport kind in order:

- LocalProcess: spawn the executable (see :mod:`mcpdesk.transports.local`), then
  handshake over its stdin/stdout.
- RemoteStream: streamable HTTP first, then SSE against the same URL and headers.
  The second attempt only runs after the first one failed, never concurrently.

The handshake of every attempt is bounded by `handshake_timeout`; spawning is not.
There is no retry beyond the ordered fallback.
"""
import json
from typing import Dict, List, Optional

from mcpdesk.errors import ConfigError, ConnectError
from mcpdesk.logging import IEventLogSink
from mcpdesk.models.server import ServerIdentity, TransportKind
from mcpdesk.result import Result
from mcpdesk.settings import DEFAULT_HANDSHAKE_TIMEOUT
from mcpdesk.transports.channel import Channel
from mcpdesk.transports.factory import ITransportStrategy, get_strategies
from mcpdesk.utils.helpers import describe_error, error_to_dict, json_serializer_default, serialize_error
from mcpdesk.utils.logging import log_message


class TransportNegotiator:
    def __init__(
        self,
        event_log: IEventLogSink,
        handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT,
        strategies: Optional[Dict[TransportKind, List[ITransportStrategy]]] = None,
    ):
        self.event_log = event_log
        self.handshake_timeout = handshake_timeout
        self._strategies = strategies

    def strategies_for(self, kind: TransportKind) -> List[ITransportStrategy]:
        return get_strategies(kind, self._strategies)

    async def connect(self, identity: ServerIdentity) -> Result[Channel]:
        """
        Establish a live channel for `identity`.

        Returns a successful Result holding the handshaked channel, or a failed Result
        carrying a ConnectError for a transport kind with no strategies, a ConfigError
        (invalid identity, nothing attempted), or a ConnectError whose message joins
        every attempt's failure.
        """
        name = identity.name
        strategies = self.strategies_for(identity.transport_kind)
        if not strategies:
            error = ConnectError(f"Unsupported transport type: {identity.transport_kind}", name)
            self.event_log.append(name, str(error), serialize_error(error), True)
            return Result.failure(error)

        try:
            identity.validate()
        except ConfigError as e:
            self.event_log.append(name, f"Invalid server configuration: {e}", serialize_error(e), True)
            return Result.failure(e)

        failures: List[str] = []
        details: List[dict] = []
        for index, strategy in enumerate(strategies):
            channel: Optional[Channel] = None
            try:
                channel = await strategy.open(identity)
                await channel.handshake(self.handshake_timeout)
            except Exception as e:
                message = f"{strategy.label}: {describe_error(e)}"
                detail = {"transport": strategy.label, "error": error_to_dict(e)}
                if channel is not None:
                    await self._discard(channel)
                    detail.update(channel.diagnostics())
                failures.append(message)
                details.append(detail)
                next_strategy = strategies[index + 1] if index + 1 < len(strategies) else None
                if next_strategy is not None:
                    self.event_log.append(
                        name,
                        f"Connection via {strategy.label} failed, falling back to {next_strategy.label}: "
                        f"{describe_error(e)}",
                        _dump(detail),
                        True,
                    )
                continue

            self.event_log.append(name, f"Connected via {strategy.label}", None, False)
            return Result.success(channel)

        error = ConnectError("; ".join(failures), name, attempts=failures)
        self.event_log.append(name, f"Failed to connect: {error}", _dump({"attempts": details}), True)
        return Result.failure(error)

    @staticmethod
    async def _discard(channel: Channel) -> None:
        try:
            await channel.close()
        except Exception as e:
            log_message("DEBUG", f"Ignoring {channel.label} close error after failed handshake: {e}")


def _dump(data: dict) -> str:
    return json.dumps(data, indent=2, default=json_serializer_default)
