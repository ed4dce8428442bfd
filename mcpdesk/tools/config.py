import json
import os
from typing import Any, Dict, List, Optional

from mcpdesk.errors import ConfigError
from mcpdesk.models.server import ServerIdentity, TransportKind

# Values that, wherever they appear, select the transport kind
TRANSPORT_KEYWORDS = {"stdio", "http", "sse", "streamable-http"}


def parse_server_config(text: str) -> ServerIdentity:
    """
    Build a validated ServerIdentity from a pasted JSON snippet.

    The snippet does not have to follow one layout; keys are picked up wherever
    they are nested, so both of these work:

        {"name": "calc", "command": "python", "args": ["calc.py"]}
        {"mcpServers": {"calc": {"command": "python", "args": ["calc.py"]}}}

    Raises:
        ConfigError: the text is not JSON, or the result is not a valid identity.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        raise ConfigError("Server configuration must be a JSON object")
    return server_from_dict(data)


def server_from_dict(data: Dict[str, Any], name: Optional[str] = None) -> ServerIdentity:
    fields: Dict[str, Any] = {
        "name": name or "",
        "description": "",
        "kind": TransportKind.LOCAL_PROCESS,
        "command": "",
        "args": [],
        "cwd": None,
        "env": {},
        "url": "",
        "headers": {},
    }
    _walk(data, None, fields)

    if fields["kind"] == TransportKind.REMOTE_STREAM:
        identity = ServerIdentity.http(
            fields["name"], fields["url"], headers=fields["headers"], description=fields["description"],
        )
    else:
        identity = ServerIdentity.stdio(
            fields["name"], fields["command"], args=fields["args"], cwd=fields["cwd"],
            env=fields["env"], description=fields["description"],
        )
    return identity.validate()


def _walk(data: Dict[str, Any], parent_key: Optional[str], fields: Dict[str, Any]) -> None:
    for key, value in data.items():
        if key in ("command", "cmd") and isinstance(value, str):
            fields["command"] = value
            if not fields["name"] and parent_key:
                fields["name"] = parent_key
        elif key == "path" and parent_key == "command" and not fields["command"]:
            fields["command"] = value
        elif key == "cwd":
            fields["cwd"] = value
        elif key in ("args", "arguments"):
            if not isinstance(value, list):
                raise ConfigError(f"'{key}' must be a list")
            fields["args"] = [str(a) for a in value]
        elif key in ("env", "environment"):
            if not isinstance(value, dict):
                raise ConfigError(f"'{key}' must be an object")
            fields["env"] = {str(k): str(v) for k, v in value.items()}
        elif key == "description":
            fields["description"] = str(value)
        elif key == "name":
            fields["name"] = str(value)
        elif isinstance(value, str) and value.startswith("http") and value not in TRANSPORT_KEYWORDS:
            fields["url"] = value
            fields["kind"] = TransportKind.REMOTE_STREAM
            if not fields["name"] and parent_key:
                fields["name"] = parent_key
        elif isinstance(value, str) and value in TRANSPORT_KEYWORDS:
            fields["kind"] = TransportKind.parse(value)
        elif key == "headers":
            if not isinstance(value, dict):
                raise ConfigError("'headers' must be an object")
            fields["headers"] = {str(k): str(v) for k, v in value.items()}
        elif isinstance(value, dict):
            _walk(value, key, fields)


def load_servers_config(config_path: str) -> List[ServerIdentity]:
    """
    Load server definitions from a JSON file. Accepted layouts:
      - a list of server objects
      - {"mcpServers": {"<name>": {...}, ...}}
      - a single server object
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Server config file not found: {config_path}")
    with open(config_path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}")

    if isinstance(data, list):
        return [server_from_dict(entry) for entry in data]
    if isinstance(data, dict) and isinstance(data.get("mcpServers"), dict):
        return [server_from_dict(entry, name=key) for key, entry in data["mcpServers"].items()]
    if isinstance(data, dict):
        return [server_from_dict(data)]
    raise ConfigError("Server config JSON must be a list or an object")
