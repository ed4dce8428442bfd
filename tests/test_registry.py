"""
Tests for the SessionRegistry
"""
import asyncio

import pytest

from mcpdesk.errors import ConnectError, DisconnectError, ToolFetchError

from conftest import FakeChannel


class TestSessionRegistry:
    @pytest.mark.asyncio
    async def test_connect_registers_session(self, make_registry, stdio_identity, sample_tools):
        channel = FakeChannel("stdio", tools=sample_tools)
        registry = make_registry(channel)

        result = await registry.connect_and_register(stdio_identity)

        assert result.ok
        assert [t.name for t in result.value] == ["add", "search"]
        assert registry.is_connected("calc")
        assert registry.get_session("calc").channel is channel
        assert registry.connected_names() == ["calc"]

    @pytest.mark.asyncio
    async def test_zero_tools_is_success(self, make_registry, stdio_identity, event_log):
        registry = make_registry(FakeChannel("stdio", tools=[]))

        result = await registry.connect_and_register(stdio_identity)

        assert result.ok
        assert result.value == []
        assert registry.is_connected("calc")
        latest = event_log.read("calc")[0]
        assert latest.message == "Server exposes no tools"
        assert not latest.is_error

    @pytest.mark.asyncio
    async def test_tool_fetch_failure_rolls_back(self, make_registry, stdio_identity, event_log):
        channel = FakeChannel("stdio", list_error=RuntimeError("tools/list not supported"))
        registry = make_registry(channel)

        result = await registry.connect_and_register(stdio_identity)

        assert isinstance(result.error, ToolFetchError)
        assert "tools/list not supported" in str(result.error)
        assert not registry.is_connected("calc")
        assert channel.closed
        assert event_log.read("calc")[0].is_error

    @pytest.mark.asyncio
    async def test_connect_failure_leaves_no_entry(self, make_registry, stdio_identity):
        registry = make_registry(FakeChannel("stdio", handshake_error=RuntimeError("EOF")))
        result = await registry.connect_and_register(stdio_identity)
        assert isinstance(result.error, ConnectError)
        assert not registry.is_connected("calc")

    @pytest.mark.asyncio
    async def test_disconnect(self, make_registry, stdio_identity):
        channel = FakeChannel("stdio")
        registry = make_registry(channel)
        await registry.connect_and_register(stdio_identity)

        result = await registry.disconnect("calc")

        assert result.ok
        assert channel.closed
        assert not registry.is_connected("calc")
        assert registry.get_session("calc") is None

    @pytest.mark.asyncio
    async def test_disconnect_unknown(self, make_registry):
        result = await make_registry(FakeChannel()).disconnect("ghost")
        assert isinstance(result.error, DisconnectError)

    @pytest.mark.asyncio
    async def test_failed_close_keeps_entry_for_retry(self, make_registry, stdio_identity):
        channel = FakeChannel("stdio", close_errors=[OSError("broken pipe")])
        registry = make_registry(channel)
        await registry.connect_and_register(stdio_identity)

        first = await registry.disconnect("calc")
        assert isinstance(first.error, DisconnectError)
        assert "broken pipe" in str(first.error)
        assert registry.is_connected("calc")

        second = await registry.disconnect("calc")
        assert second.ok
        assert not registry.is_connected("calc")

    @pytest.mark.asyncio
    async def test_reconnect_replaces_previous_session(self, make_registry, stdio_identity):
        old = FakeChannel("stdio")
        new = FakeChannel("stdio", tools=[{"name": "ping"}])
        registry = make_registry(old, new)

        await registry.connect_and_register(stdio_identity)
        result = await registry.connect_and_register(stdio_identity)

        assert result.ok
        assert old.closed
        assert registry.get_session("calc").channel is new

    @pytest.mark.asyncio
    async def test_failed_reconnect_keeps_previous_session(self, make_registry, stdio_identity):
        old = FakeChannel("stdio")
        broken = FakeChannel("stdio", list_error=RuntimeError("boom"))
        registry = make_registry(old, broken)

        await registry.connect_and_register(stdio_identity)
        result = await registry.connect_and_register(stdio_identity)

        assert not result.ok
        assert not old.closed
        assert registry.get_session("calc").channel is old

    @pytest.mark.asyncio
    async def test_concurrent_operations_leave_one_session(self, make_registry, stdio_identity):
        channels = [FakeChannel("stdio") for _ in range(3)]
        registry = make_registry(*channels)

        await asyncio.gather(
            registry.connect_and_register(stdio_identity),
            registry.connect_and_register(stdio_identity),
            registry.connect_and_register(stdio_identity),
        )

        live = [c for c in channels if not c.closed]
        assert len(live) == 1
        assert registry.get_session("calc").channel is live[0]

        await registry.disconnect("calc")
        assert not registry.is_connected("calc")

    @pytest.mark.asyncio
    async def test_disconnect_all(self, make_registry, stdio_identity):
        registry = make_registry(FakeChannel("stdio"))
        await registry.connect_and_register(stdio_identity)
        results = await registry.disconnect_all()
        assert results["calc"].ok
        assert registry.connected_names() == []

    @pytest.mark.asyncio
    async def test_locks_released_when_name_is_absent(self, make_registry, stdio_identity):
        registry = make_registry(FakeChannel("stdio"))

        await registry.disconnect("ghost")
        assert "ghost" not in registry._locks

        await registry.connect_and_register(stdio_identity)
        assert "calc" in registry._locks

        await registry.disconnect("calc")
        assert registry._locks == {}
        assert registry._lock_users == {}

    @pytest.mark.asyncio
    async def test_failed_connect_leaves_no_lock(self, make_registry, stdio_identity):
        registry = make_registry(FakeChannel("stdio", handshake_error=RuntimeError("EOF")))
        await asyncio.gather(
            registry.connect_and_register(stdio_identity),
            registry.connect_and_register(stdio_identity),
        )
        assert registry._locks == {}
