import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mcpdesk.errors import DisconnectError, ToolFetchError
from mcpdesk.logging import IEventLogSink
from mcpdesk.models.server import ServerIdentity
from mcpdesk.models.tool import Tool
from mcpdesk.negotiator import TransportNegotiator
from mcpdesk.normalizer import normalize_tools
from mcpdesk.result import Result
from mcpdesk.transports.channel import Channel
from mcpdesk.utils.helpers import describe_error, serialize_error, serialize_payload
from mcpdesk.utils.logging import log_message


@dataclass
class Session:
    """A live, registered channel to one server. Owned by :class:`SessionRegistry`."""
    identity: ServerIdentity
    channel: Channel
    connected_at: float = field(default_factory=time.monotonic)

    @property
    def name(self) -> str:
        return self.identity.name


class SessionRegistry:
    """
    In-memory map from server name to live :class:`Session`.

    Per name the state is either absent or live; there is no stored "connecting" state.
    Mutations for one name (`connect_and_register`, `disconnect`) are serialized by a
    per-name lock, operations on different names interleave freely.
    """
    def __init__(self, negotiator: TransportNegotiator, event_log: IEventLogSink):
        self.negotiator = negotiator
        self.event_log = event_log
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @contextlib.asynccontextmanager
    async def _name_lock(self, name: str):
        """
        Hold the lock for `name`. The lock is dropped once the name is absent and
        no other operation holds or waits for it.
        """
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        self._lock_users[name] = self._lock_users.get(name, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[name] -= 1
            if self._lock_users[name] == 0:
                del self._lock_users[name]
                if name not in self._sessions:
                    del self._locks[name]

    async def connect_and_register(self, identity: ServerIdentity) -> Result[List[Tool]]:
        """
        Connect, fetch and normalize the tool list, then register the session.

        If the tool fetch fails the new channel is closed and nothing is registered.
        When a session already exists under the name it is kept until the new one is
        fully ready, then torn down and replaced.
        """
        name = identity.name
        async with self._name_lock(name):
            connected = await self.negotiator.connect(identity)
            if not connected.ok:
                return Result.failure(connected.error)
            channel = connected.value

            try:
                raw_tools = await channel.list_tools()
            except Exception as e:
                error = ToolFetchError(f"Failed to get tools from {name}: {describe_error(e)}", name)
                self.event_log.append(name, str(error), serialize_error(e), True)
                await self._close_quietly(channel)
                return Result.failure(error)

            tools = normalize_tools(raw_tools)
            previous = self._sessions.pop(name, None)
            if previous is not None:
                await self._close_quietly(previous.channel)
                self.event_log.append(name, "Replaced previous session", None, False)
            self._sessions[name] = Session(identity=identity, channel=channel)

            if tools:
                message = f"Loaded {len(tools)} tools"
            else:
                message = "Server exposes no tools"
            self.event_log.append(name, message, serialize_payload([t.to_dict() for t in tools]), False)
            return Result.success(tools)

    async def disconnect(self, name: str) -> Result[None]:
        """
        Close and unregister the session for `name`.

        Fails with DisconnectError if there is no session, or if closing the channel
        raises; in the latter case the entry stays so the caller can retry.
        """
        async with self._name_lock(name):
            session = self._sessions.get(name)
            if session is None:
                error = DisconnectError(f"No active connection for server: {name}", name)
                self.event_log.append(name, str(error), None, True)
                return Result.failure(error)
            try:
                await session.channel.close()
            except Exception as e:
                error = DisconnectError(f"Failed to disconnect from {name}: {describe_error(e)}", name)
                self.event_log.append(name, str(error), serialize_error(e), True)
                return Result.failure(error)
            del self._sessions[name]
            self.event_log.append(name, "Disconnected", None, False)
            return Result.success()

    async def disconnect_all(self) -> Dict[str, Result[None]]:
        results = {}
        for name in list(self._sessions.keys()):
            results[name] = await self.disconnect(name)
        return results

    def is_connected(self, name: str) -> bool:
        return name in self._sessions

    def get_session(self, name: str) -> Optional[Session]:
        return self._sessions.get(name)

    def connected_names(self) -> List[str]:
        return list(self._sessions.keys())

    async def _close_quietly(self, channel: Channel) -> None:
        try:
            await channel.close()
        except Exception as e:
            log_message("WARN", f"Error while closing {channel.label} channel: {e}")
