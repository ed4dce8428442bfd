import asyncio
import time
from typing import Any, Dict, Optional

from mcpdesk.classifier import classify_response
from mcpdesk.logging import IEventLogSink
from mcpdesk.models.outcome import InvocationOutcome
from mcpdesk.registry import SessionRegistry
from mcpdesk.settings import DEFAULT_MIN_LATENCY
from mcpdesk.utils.helpers import describe_error, serialize_error, serialize_payload


class ToolInvoker:
    """
    Runs a tool on a registered session and classifies what comes back.

    Results of an issued call are never returned before `min_latency` seconds
    have passed since the call started. There is no implicit reconnect: a name
    without a live session yields a TRANSPORT_ERROR outcome immediately.
    """
    def __init__(self, registry: SessionRegistry, event_log: IEventLogSink,
                 min_latency: float = DEFAULT_MIN_LATENCY):
        self.registry = registry
        self.event_log = event_log
        self.min_latency = min_latency

    async def invoke(self, server_name: str, tool_name: str,
                     params: Optional[Dict[str, Any]] = None) -> InvocationOutcome:
        session = self.registry.get_session(server_name)
        if session is None:
            message = f"No active connection for server: {server_name}"
            self.event_log.append(server_name, f"Tool '{tool_name}' failed: {message}", None, True)
            return InvocationOutcome.transport_error(message)

        arguments = dict(params or {})
        started = time.monotonic()
        try:
            raw = await session.channel.call_tool(tool_name, arguments)
        except Exception as e:
            outcome = InvocationOutcome.transport_error(describe_error(e))
            raw_data = serialize_error(e)
        else:
            outcome = classify_response(raw)
            raw_data = serialize_payload(raw)

        remaining = self.min_latency - (time.monotonic() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)

        verb = "executed" if outcome.is_success else "failed"
        self.event_log.append(server_name, f"Tool '{tool_name}' {verb}", raw_data, outcome.is_failure)
        return outcome
