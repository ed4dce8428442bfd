"""
Tests for the ConfigStore
"""
from mcpdesk.models.server import ServerIdentity
from mcpdesk.store import ConfigStore


class TestConfigStore:
    def test_upsert_and_get(self):
        backend = {}
        store = ConfigStore(backend, storage_key="servers")
        store.upsert(ServerIdentity.stdio("a", "python", ["a.py"]))
        store.upsert(ServerIdentity.http("b", "http://localhost/mcp"))

        assert [s.name for s in store.list()] == ["a", "b"]
        assert store.get("b").remote.url == "http://localhost/mcp"
        assert store.get("missing") is None
        assert backend["servers"][0]["stdio"]["command"] == "python"

    def test_upsert_replaces_in_place(self):
        store = ConfigStore()
        store.upsert(ServerIdentity.stdio("a", "python"))
        store.upsert(ServerIdentity.stdio("b", "python"))
        store.upsert(ServerIdentity.stdio("a", "node"))

        assert [s.name for s in store.list()] == ["a", "b"]
        assert store.get("a").local.command == "node"

    def test_remove(self):
        store = ConfigStore()
        store.upsert(ServerIdentity.stdio("a", "python"))
        store.remove("a")
        store.remove("never-existed")
        assert store.list() == []
        assert not store.exists("a")
