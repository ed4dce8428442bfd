from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol

from mcpdesk.settings import DEFAULT_MAX_LOG_ENTRIES
from mcpdesk.utils.logging import log_message


@dataclass
class LogEntry:
    server_name: str
    message: str
    raw_data: Optional[str] = None
    is_error: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverName": self.server_name,
            "message": self.message,
            "rawData": self.raw_data,
            "isError": self.is_error,
            "timestamp": self.timestamp.isoformat(),
        }


class IEventLogSink(Protocol):
    """
    Write side of the event log as seen by the negotiator, registry and invoker.
    """
    def append(self, server_name: str, message: str, raw_data: Optional[str] = None,
               is_error: bool = False) -> LogEntry:
        ...


class EventLog:
    """
    Per-server, bounded record of significant events (connects, disconnects, tool calls).

    Each server keeps at most `max_entries` entries; once full, the oldest entry is
    evicted first. Entries are read back newest-first. Listeners registered with
    :meth:`subscribe` are called with the server name after every append or clear.
    """
    def __init__(self, max_entries: int = DEFAULT_MAX_LOG_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._logs: Dict[str, Deque[LogEntry]] = {}
        self._listeners: List[Callable[[str], None]] = []

    def append(self, server_name: str, message: str, raw_data: Optional[str] = None,
               is_error: bool = False) -> LogEntry:
        entry = LogEntry(server_name=server_name, message=message, raw_data=raw_data, is_error=is_error)
        server_logs = self._logs.setdefault(server_name, deque(maxlen=self.max_entries))
        server_logs.append(entry)
        log_message("ERROR" if is_error else "INFO", f"{server_name}: {message}")
        self._notify(server_name)
        return entry

    def read(self, server_name: str) -> List[LogEntry]:
        """Entries for a server, newest first."""
        return list(reversed(self._logs.get(server_name, ())))

    def clear(self, server_name: str) -> None:
        self._logs[server_name] = deque(maxlen=self.max_entries)
        self._notify(server_name)

    def clear_all(self) -> None:
        names = list(self._logs.keys())
        self._logs.clear()
        for name in names:
            self._notify(name)

    def server_names(self) -> List[str]:
        return list(self._logs.keys())

    def subscribe(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[str], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, server_name: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(server_name)
            except Exception as e:
                # listener errors are reported, not propagated
                log_message("WARN", f"Event log listener failed for {server_name}: {e}")
