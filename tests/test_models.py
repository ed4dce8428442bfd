"""
Tests for the data model in mcpdesk.models
"""
import pytest

from mcpdesk.errors import ConfigError
from mcpdesk.models import (
    ContentKind,
    InvocationOutcome,
    OutcomeStatus,
    ServerIdentity,
    TransportKind,
)


class TestTransportKind:
    @pytest.mark.parametrize("value,expected", [
        ("stdio", TransportKind.LOCAL_PROCESS),
        ("HTTP", TransportKind.REMOTE_STREAM),
        ("sse", TransportKind.REMOTE_STREAM),
        ("streamable-http", TransportKind.REMOTE_STREAM),
    ])
    def test_parse_aliases(self, value, expected):
        assert TransportKind.parse(value) == expected

    def test_parse_unknown(self):
        with pytest.raises(ConfigError, match="Unsupported transport type"):
            TransportKind.parse("carrier-pigeon")


class TestServerIdentity:
    def test_valid_stdio(self):
        identity = ServerIdentity.stdio("calc", "python", ["calc.py"], env={"DEBUG": "1"})
        assert identity.validate() is identity
        assert identity.local.env == {"DEBUG": "1"}

    def test_missing_command(self):
        with pytest.raises(ConfigError, match="command"):
            ServerIdentity.stdio("calc", "  ").validate()

    def test_missing_name(self):
        with pytest.raises(ConfigError, match="name is required"):
            ServerIdentity.stdio("", "python").validate()

    def test_missing_transport_block(self):
        identity = ServerIdentity(name="x", transport_kind=TransportKind.LOCAL_PROCESS)
        with pytest.raises(ConfigError, match="STDIO configuration is missing"):
            identity.validate()

    @pytest.mark.parametrize("url", [
        "http://localhost:8000/mcp",
        "https://example.com/api/v1/sse",
        "http://127.0.0.1:3000/mcp/",
    ])
    def test_valid_urls(self, url):
        ServerIdentity.http("remote", url).validate()

    @pytest.mark.parametrize("url", [
        "http://localhost:8000",
        "ftp://example.com/mcp",
        "http://example.com/mcp?x=1",
        "localhost:8000/mcp",
    ])
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigError, match="Invalid HTTP URL format"):
            ServerIdentity.http("remote", url).validate()

    def test_dict_round_trip(self):
        identity = ServerIdentity.stdio("calc", "uv", ["run", "calc.py"], cwd="/srv", description="Calculator")
        data = identity.to_dict()
        assert data["transport"] == "stdio"
        assert data["stdio"] == {"command": "uv", "args": ["run", "calc.py"], "cwd": "/srv"}
        assert ServerIdentity.from_dict(data) == identity


class TestInvocationOutcome:
    def test_image_requires_mime_type(self):
        with pytest.raises(ValueError):
            InvocationOutcome(OutcomeStatus.SUCCESS, ContentKind.IMAGE, "aGk=")

    def test_text_rejects_mime_type(self):
        with pytest.raises(ValueError):
            InvocationOutcome(OutcomeStatus.SUCCESS, ContentKind.TEXT, "hi", "text/plain")

    def test_transport_error(self):
        outcome = InvocationOutcome.transport_error("boom")
        assert outcome.status == OutcomeStatus.TRANSPORT_ERROR
        assert outcome.content_kind == ContentKind.TEXT
        assert outcome.is_failure and not outcome.is_success
        assert outcome.to_dict() == {"status": "error", "contentKind": "text", "payload": "boom"}
