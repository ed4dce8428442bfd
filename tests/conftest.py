"""
Pytest configuration for mcpdesk tests
"""
import asyncio

import pytest

from mcpdesk.logging import EventLog
from mcpdesk.models.server import ServerIdentity, TransportKind
from mcpdesk.negotiator import TransportNegotiator
from mcpdesk.registry import SessionRegistry


class FakeChannel:
    """
    In-memory stand-in for a handshaked transport channel.
    """
    def __init__(self, label="fake", tools=None, handshake_error=None, list_error=None,
                 call_result=None, call_error=None, close_errors=None, call_delay=0.0):
        self.label = label
        self.tools = tools if tools is not None else []
        self.handshake_error = handshake_error
        self.list_error = list_error
        self.call_result = call_result
        self.call_error = call_error
        self.close_errors = list(close_errors or [])
        self.call_delay = call_delay
        self.handshakes = 0
        self.close_calls = 0
        self.calls = []
        self.closed = False

    async def handshake(self, timeout):
        self.handshakes += 1
        if self.handshake_error is not None:
            raise self.handshake_error

    async def list_tools(self):
        if self.list_error is not None:
            raise self.list_error
        return list(self.tools)

    async def call_tool(self, name, arguments=None):
        self.calls.append((name, arguments))
        if self.call_delay:
            await asyncio.sleep(self.call_delay)
        if self.call_error is not None:
            raise self.call_error
        return self.call_result

    async def close(self):
        self.close_calls += 1
        if self.close_errors:
            raise self.close_errors.pop(0)
        self.closed = True

    def diagnostics(self):
        return {"transport": self.label}


class FakeStrategy:
    """
    Strategy returning prepared channels in order (the last one is reused).
    """
    def __init__(self, label, *channels, open_error=None):
        self.label = label
        self.channels = list(channels)
        self.open_error = open_error
        self.opened = []

    async def open(self, identity):
        self.opened.append(identity)
        if self.open_error is not None:
            raise self.open_error
        if len(self.channels) > 1:
            return self.channels.pop(0)
        return self.channels[0]


SAMPLE_TOOLS = [
    {
        "name": "add",
        "description": "Add two numbers",
        "inputSchema": {
            "type": "object",
            "properties": {
                "a": {"type": "integer", "description": "First number"},
                "b": {"type": "integer", "description": "Second number"},
            },
            "required": ["a", "b"],
        },
    },
    {
        "name": "search",
        "description": "Search for information",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "limit": {"type": "integer"},
            },
            "required": ["query"],
        },
    },
]


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def stdio_identity():
    return ServerIdentity.stdio("calc", "python", ["server.py"])


@pytest.fixture
def http_identity():
    return ServerIdentity.http("remote", "http://localhost:8000/mcp", headers={"Authorization": "Bearer t"})


@pytest.fixture
def sample_tools():
    return [dict(t) for t in SAMPLE_TOOLS]


@pytest.fixture
def make_registry(event_log):
    """
    Build a SessionRegistry whose stdio strategy hands out the given fake channels.
    """
    def _make(*channels, open_error=None):
        strategy = FakeStrategy("stdio", *channels, open_error=open_error)
        negotiator = TransportNegotiator(
            event_log,
            handshake_timeout=1.0,
            strategies={TransportKind.LOCAL_PROCESS: [strategy]},
        )
        return SessionRegistry(negotiator, event_log)
    return _make
