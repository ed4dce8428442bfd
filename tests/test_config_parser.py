"""
Tests for server config parsing in mcpdesk.tools.config
"""
import json

import pytest

from mcpdesk.errors import ConfigError
from mcpdesk.models.server import TransportKind
from mcpdesk.tools.config import load_servers_config, parse_server_config, server_from_dict


class TestParseServerConfig:
    def test_flat_stdio(self):
        identity = parse_server_config('{"name": "calc", "command": "python", "args": ["calc.py"], "cwd": "/srv"}')
        assert identity.name == "calc"
        assert identity.transport_kind == TransportKind.LOCAL_PROCESS
        assert identity.local.command == "python"
        assert identity.local.args == ["calc.py"]
        assert identity.local.cwd == "/srv"

    def test_nested_key_becomes_name(self):
        text = json.dumps({"mcpServers": {"weather": {"command": "uv", "args": ["run", "weather.py"],
                                                       "env": {"API_KEY": "k"}}}})
        identity = parse_server_config(text)
        assert identity.name == "weather"
        assert identity.local.env == {"API_KEY": "k"}

    def test_command_path_spelling(self):
        identity = parse_server_config('{"name": "x", "command": {"path": "/usr/bin/node"}}')
        assert identity.local.command == "/usr/bin/node"

    def test_url_switches_to_remote(self):
        text = json.dumps({"servers": {"remote": {"url": "https://example.com/mcp", "headers": {"X-Key": "1"}}}})
        identity = parse_server_config(text)
        assert identity.name == "remote"
        assert identity.transport_kind == TransportKind.REMOTE_STREAM
        assert identity.remote.url == "https://example.com/mcp"
        assert identity.remote.headers == {"X-Key": "1"}

    def test_invalid_json(self):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            parse_server_config("{not json")

    def test_missing_command(self):
        with pytest.raises(ConfigError, match="command"):
            parse_server_config('{"name": "x", "description": "nothing to run"}')

    def test_bad_url(self):
        with pytest.raises(ConfigError, match="Invalid HTTP URL format"):
            parse_server_config('{"name": "x", "url": "http://example.com/api"}')

    def test_round_trips_serialized_identity(self):
        identity = parse_server_config('{"name": "calc", "command": "python", "args": ["calc.py"]}')
        assert server_from_dict(identity.to_dict()) == identity


class TestLoadServersConfig:
    def test_mcp_servers_layout(self, tmp_path):
        path = tmp_path / "mcp.json"
        path.write_text(json.dumps({"mcpServers": {
            "a": {"command": "python", "args": ["a.py"]},
            "b": {"url": "http://localhost:9000/sse"},
        }}))
        servers = load_servers_config(str(path))
        assert [s.name for s in servers] == ["a", "b"]
        assert servers[1].transport_kind == TransportKind.REMOTE_STREAM

    def test_list_layout(self, tmp_path):
        path = tmp_path / "servers.json"
        path.write_text(json.dumps([{"name": "a", "command": "python"}]))
        assert load_servers_config(str(path))[0].name == "a"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_servers_config(str(tmp_path / "nope.json"))
