"""
Tests for the bounded per-server EventLog
"""
from mcpdesk.logging import EventLog


class TestEventLog:
    def test_newest_first(self):
        log = EventLog()
        log.append("s", "first")
        log.append("s", "second", '{"x": 1}', True)

        entries = log.read("s")
        assert [e.message for e in entries] == ["second", "first"]
        assert entries[0].is_error and entries[0].raw_data == '{"x": 1}'

    def test_fifo_eviction(self):
        log = EventLog(max_entries=100)
        for i in range(105):
            log.append("s", f"m{i}")

        entries = log.read("s")
        assert len(entries) == 100
        assert entries[0].message == "m104"
        assert entries[-1].message == "m5"

    def test_servers_are_independent(self):
        log = EventLog(max_entries=2)
        log.append("a", "1")
        log.append("b", "1")
        log.clear("a")
        assert log.read("a") == []
        assert len(log.read("b")) == 1
        assert log.read("missing") == []

    def test_clear_all(self):
        log = EventLog()
        log.append("a", "1")
        log.append("b", "1")
        log.clear_all()
        assert log.server_names() == []

    def test_listeners(self):
        log = EventLog()
        seen = []
        log.subscribe(seen.append)
        log.append("a", "1")
        log.clear("a")
        log.unsubscribe(seen.append)
        log.append("a", "2")
        assert seen == ["a", "a"]

    def test_failing_listener_does_not_break_append(self, capsys):
        log = EventLog()

        def broken(name):
            raise RuntimeError("listener bug")

        log.subscribe(broken)
        entry = log.append("a", "still recorded")
        assert log.read("a") == [entry]
        assert "[WARN]" in capsys.readouterr().err

    def test_to_dict(self):
        entry = EventLog().append("a", "hello", None, False)
        data = entry.to_dict()
        assert data["serverName"] == "a"
        assert data["isError"] is False
        assert "timestamp" in data
