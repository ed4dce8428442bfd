import asyncio
from typing import Any, Dict, List, Optional

from fastmcp import Client
from fastmcp.client.transports import ClientTransport
from mcp.types import CallToolResult

from mcpdesk.errors import ConnectError
from mcpdesk.utils.logging import log_message


class Channel:
    """
    A communication channel to one tool server, built on `fastmcp.Client`.

    The lifecycle has two explicit phases:
    - construction (`open` in a strategy) prepares the transport but exchanges no messages;
    - :meth:`handshake` enters the client, which performs the MCP `initialize` exchange.
      It is idempotent: calling it on an established channel does nothing.

    The client is entered and exited by one runner task owned by the channel, so
    handshake and close may be awaited from different tasks.

    :meth:`close` is idempotent as well and marks the channel closed even when the
    underlying shutdown raises, so a retried close succeeds.
    """
    def __init__(self, transport: ClientTransport, label: str):
        self.transport = transport
        self.label = label
        self._client: Optional[Client] = None
        self._runner: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._closed = False

    @property
    def is_established(self) -> bool:
        return self._client is not None and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _create_client(self) -> Client:
        return Client(self.transport)

    async def handshake(self, timeout: float) -> None:
        """
        Perform the session handshake, bounded by `timeout` seconds.

        Raises:
            ConnectError: on timeout, or if the channel was already closed.
            Exception: transport/protocol errors from fastmcp are propagated as raised.
        """
        if self._closed:
            raise ConnectError(f"{self.label} channel is closed")
        if self._client is not None:
            return
        client = self._create_client()
        ready = asyncio.get_running_loop().create_future()
        runner = asyncio.create_task(self._run(client, ready), name=f"{self.label}-session")
        try:
            await asyncio.wait_for(asyncio.shield(ready), timeout)
        except asyncio.TimeoutError:
            await self._abort(runner, ready)
            raise ConnectError(f"handshake timed out after {timeout:g}s")
        except BaseException:
            await self._abort(runner, ready)
            raise
        self._client, self._runner = client, runner
        log_message("DEBUG", f"{self.label} handshake complete")

    async def _run(self, client: Client, ready: asyncio.Future) -> None:
        """Owns the client context: enter, report readiness, hold until stopped, exit."""
        try:
            async with client:
                ready.set_result(None)
                await self._stop.wait()
        except asyncio.CancelledError:
            if not ready.done():
                ready.cancel()
                return
            raise
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
                return
            raise

    async def list_tools(self) -> List[Any]:
        """Raw `tools/list` result entries (`mcp.types.Tool`)."""
        client = self._require_client()
        result = await client.list_tools_mcp()
        return list(result.tools or [])

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> CallToolResult:
        """Raw `tools/call` result. Tool-level errors come back inside the result, not raised."""
        client = self._require_client()
        return await client.call_tool_mcp(name=name, arguments=arguments or {})

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        runner, self._runner, self._client = self._runner, None, None
        if runner is not None:
            self._stop.set()
            await runner

    def diagnostics(self) -> Dict[str, Any]:
        """Details attached to failure reports for this channel."""
        return {"transport": self.label}

    def _require_client(self) -> Client:
        if self._client is None or self._closed:
            raise ConnectError(f"{self.label} channel is not connected")
        return self._client

    async def _abort(self, runner: asyncio.Task, ready: asyncio.Future) -> None:
        self._stop.set()
        if not runner.done():
            runner.cancel()
        try:
            await runner
        except asyncio.CancelledError:
            pass
        except Exception as e:
            log_message("DEBUG", f"Ignoring error while unwinding failed handshake: {e}")
        if ready.done() and not ready.cancelled():
            ready.exception()

    def __repr__(self):
        state = "closed" if self._closed else ("established" if self._client else "pending")
        return f"Channel(label={self.label!r}, state={state})"
