import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from mcpdesk.errors import ConfigError

# Remote endpoints must end in /mcp (streamable HTTP) or /sse (event stream)
REMOTE_URL_PATTERN = re.compile(r"^https?://[^\s/?#]+(?:/[^\s?#]*)?/(?:mcp|sse)/?$")


class TransportKind(str, Enum):
    LOCAL_PROCESS = "stdio"
    REMOTE_STREAM = "http"

    @classmethod
    def parse(cls, value: Any) -> "TransportKind":
        """Map user-facing spellings ("stdio", "sse", "streamable-http", ...) onto a kind."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text in _KIND_ALIASES:
            return _KIND_ALIASES[text]
        raise ConfigError(f"Unsupported transport type: {value}")


_KIND_ALIASES = {
    "stdio": TransportKind.LOCAL_PROCESS,
    "local": TransportKind.LOCAL_PROCESS,
    "http": TransportKind.REMOTE_STREAM,
    "https": TransportKind.REMOTE_STREAM,
    "sse": TransportKind.REMOTE_STREAM,
    "streamable-http": TransportKind.REMOTE_STREAM,
    "streamable_http": TransportKind.REMOTE_STREAM,
    "remote": TransportKind.REMOTE_STREAM,
}


class ServerStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"


@dataclass(frozen=True)
class LocalProcessConfig:
    """
    How to launch a tool server as a child process.

    `env` is an overlay merged on top of the inherited environment, never a replacement.
    """
    command: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"command": self.command, "args": list(self.args)}
        if self.cwd:
            data["cwd"] = self.cwd
        if self.env:
            data["env"] = dict(self.env)
        return data


@dataclass(frozen=True)
class RemoteStreamConfig:
    url: str
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url}
        if self.headers:
            data["headers"] = dict(self.headers)
        return data


@dataclass(frozen=True)
class ServerIdentity:
    """
    Static description of a tool server. `name` is the primary key across
    the session registry and the config store.

    Exactly one of `local` / `remote` is used, selected by `transport_kind`.
    """
    name: str
    transport_kind: TransportKind
    local: Optional[LocalProcessConfig] = None
    remote: Optional[RemoteStreamConfig] = None
    description: str = ""

    @classmethod
    def stdio(cls, name: str, command: str, args: Optional[List[str]] = None,
              cwd: Optional[str] = None, env: Optional[Dict[str, str]] = None,
              description: str = "") -> "ServerIdentity":
        return cls(
            name=name,
            transport_kind=TransportKind.LOCAL_PROCESS,
            local=LocalProcessConfig(command=command, args=list(args or []), cwd=cwd, env=dict(env or {})),
            description=description,
        )

    @classmethod
    def http(cls, name: str, url: str, headers: Optional[Dict[str, str]] = None,
             description: str = "") -> "ServerIdentity":
        return cls(
            name=name,
            transport_kind=TransportKind.REMOTE_STREAM,
            remote=RemoteStreamConfig(url=url, headers=dict(headers or {})),
            description=description,
        )

    def validate(self) -> "ServerIdentity":
        """
        Check the identity invariant and return self.

        Raises:
            ConfigError: missing name, missing transport block or mandatory field,
                         or a URL that does not end in /mcp or /sse.
        """
        if not self.name or not self.name.strip():
            raise ConfigError("Server name is required")
        if self.transport_kind == TransportKind.LOCAL_PROCESS:
            if self.local is None:
                raise ConfigError("STDIO configuration is missing", self.name)
            if not self.local.command or not self.local.command.strip():
                raise ConfigError("STDIO configuration must include a command", self.name)
        elif self.transport_kind == TransportKind.REMOTE_STREAM:
            if self.remote is None or not self.remote.url:
                raise ConfigError("HTTP configuration must include a URL", self.name)
            if not REMOTE_URL_PATTERN.match(self.remote.url):
                raise ConfigError(
                    f"Invalid HTTP URL format: {self.remote.url}. Expected: (http|https)://.../(mcp|sse)",
                    self.name,
                )
        else:
            raise ConfigError(f"Unsupported transport type: {self.transport_kind}", self.name)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "transport": self.transport_kind.value}
        if self.description:
            data["description"] = self.description
        if self.local is not None:
            data["stdio"] = self.local.to_dict()
        if self.remote is not None:
            data["http"] = self.remote.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerIdentity":
        """Inverse of :meth:`to_dict`. Does not validate."""
        local = data.get("stdio")
        remote = data.get("http")
        return cls(
            name=data.get("name", ""),
            transport_kind=TransportKind.parse(data.get("transport")),
            local=LocalProcessConfig(
                command=local.get("command", ""),
                args=list(local.get("args") or []),
                cwd=local.get("cwd"),
                env=dict(local.get("env") or {}),
            ) if local else None,
            remote=RemoteStreamConfig(
                url=remote.get("url", ""),
                headers=dict(remote.get("headers") or {}),
            ) if remote else None,
            description=data.get("description", ""),
        )
