from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from mcpdesk.errors import ConfigError
from mcpdesk.invoker import ToolInvoker
from mcpdesk.logging import EventLog
from mcpdesk.models.outcome import InvocationOutcome
from mcpdesk.models.server import ServerIdentity, ServerStatus
from mcpdesk.models.tool import Tool
from mcpdesk.registry import SessionRegistry
from mcpdesk.result import Result
from mcpdesk.store import IConfigStore


@dataclass
class ServerState:
    identity: ServerIdentity
    status: ServerStatus

    @property
    def name(self) -> str:
        return self.identity.name

    def to_dict(self) -> Dict[str, Any]:
        return {**self.identity.to_dict(), "status": self.status.value}


class ServerManager:
    """
    Front door for a host application: keeps the saved server definitions, the live
    sessions and the event log consistent with each other.

    The "connecting" status shown by :meth:`list_servers` is tracked here while a
    connect is outstanding; the registry itself only knows absent or live.
    """
    def __init__(self, store: IConfigStore, registry: SessionRegistry, invoker: ToolInvoker,
                 event_log: EventLog):
        self.store = store
        self.registry = registry
        self.invoker = invoker
        self.event_log = event_log
        self._tools: Dict[str, List[Tool]] = {}
        # name -> number of connects in flight
        self._connecting: Dict[str, int] = {}

    async def connect_and_save(self, identity: ServerIdentity,
                               original_name: Optional[str] = None) -> Result[List[Tool]]:
        """
        Connect to a new or edited server and persist it only if the connect succeeds.

        Args:
            identity: The server definition as entered.
            original_name: None when creating; the stored name when editing. A
                different `identity.name` means a rename.

        Collisions (create over an existing name, rename onto another server, update of
        an unknown server) are rejected with ConfigError before any I/O.
        """
        try:
            identity.validate()
        except ConfigError as e:
            self.event_log.append(identity.name, f"Invalid server configuration: {e}", None, True)
            return Result.failure(e)

        collision = self._check_collision(identity, original_name)
        if collision is not None:
            self.event_log.append(identity.name, str(collision), None, True)
            return Result.failure(collision)

        result = await self._connect(identity)
        if not result.ok:
            return result

        self.store.upsert(identity)
        if original_name is not None and original_name != identity.name:
            self.store.remove(original_name)
            self._tools.pop(original_name, None)
            if self.registry.is_connected(original_name):
                await self.registry.disconnect(original_name)
        return result

    def _check_collision(self, identity: ServerIdentity,
                         original_name: Optional[str]) -> Optional[ConfigError]:
        name = identity.name
        if original_name is None:
            if self.store.get(name) is not None:
                return ConfigError(f'A server with the name "{name}" already exists', name)
            return None
        if self.store.get(original_name) is None:
            return ConfigError(f'Server "{original_name}" not found', name)
        if original_name != name and self.store.get(name) is not None:
            return ConfigError(f'A server with the name "{name}" already exists', name)
        return None

    async def connect(self, name: str) -> Result[List[Tool]]:
        """Connect (or reconnect) a saved server by name."""
        identity = self.store.get(name)
        if identity is None:
            error = ConfigError(f'Server "{name}" not found', name)
            self.event_log.append(name, str(error), None, True)
            return Result.failure(error)
        return await self._connect(identity)

    async def _connect(self, identity: ServerIdentity) -> Result[List[Tool]]:
        name = identity.name
        self._connecting[name] = self._connecting.get(name, 0) + 1
        try:
            result = await self.registry.connect_and_register(identity)
        finally:
            self._connecting[name] -= 1
            if self._connecting[name] == 0:
                del self._connecting[name]
        if result.ok:
            self._tools[identity.name] = list(result.value or [])
        return result

    async def disconnect(self, name: str) -> Result[None]:
        result = await self.registry.disconnect(name)
        if result.ok:
            self._tools.pop(name, None)
        return result

    async def call_tool(self, name: str, tool_name: str,
                        params: Optional[Dict[str, Any]] = None) -> InvocationOutcome:
        return await self.invoker.invoke(name, tool_name, params)

    def tools(self, name: str) -> List[Tool]:
        """Tools from the last successful connect; empty when not connected."""
        if not self.registry.is_connected(name):
            return []
        return list(self._tools.get(name, []))

    def get_tool(self, name: str, tool_name: str) -> Optional[Tool]:
        return next((t for t in self.tools(name) if t.name == tool_name), None)

    def status(self, name: str) -> ServerStatus:
        if name in self._connecting:
            return ServerStatus.CONNECTING
        if self.registry.is_connected(name):
            return ServerStatus.CONNECTED
        return ServerStatus.DISCONNECTED

    def list_servers(self) -> List[ServerState]:
        return [ServerState(identity, self.status(identity.name)) for identity in self.store.list()]

    async def delete_server(self, name: str) -> Result[None]:
        """Disconnect if needed, then forget the server and its log."""
        if self.registry.is_connected(name):
            result = await self.disconnect(name)
            if not result.ok:
                return result
        elif self.store.get(name) is None:
            return Result.failure(ConfigError(f'Server "{name}" not found', name))
        self.store.remove(name)
        self._tools.pop(name, None)
        self.event_log.clear(name)
        return Result.success()

    async def shutdown(self) -> None:
        """Disconnect every live session. Failures are already in the event log."""
        await self.registry.disconnect_all()
        self._tools.clear()
