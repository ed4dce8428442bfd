"""
Tests for DeskSettings
"""
import pytest

from mcpdesk.errors import ConfigError
from mcpdesk.settings import DeskSettings


class TestDeskSettings:
    def test_defaults(self):
        settings = DeskSettings.from_env({})
        assert settings.handshake_timeout == 5.0
        assert settings.min_latency == 0.2
        assert settings.max_log_entries == 100
        assert settings.debug is False

    def test_from_env(self):
        settings = DeskSettings.from_env({
            "MCPDESK_HANDSHAKE_TIMEOUT": "12.5",
            "MCPDESK_MIN_LATENCY": "0",
            "MCPDESK_MAX_LOG_ENTRIES": "20",
            "MCPDESK_STORAGE_KEY": "custom",
            "MCPDESK_DEBUG": "true",
        })
        assert settings.to_dict() == {
            "handshake_timeout": 12.5,
            "min_latency": 0.0,
            "max_log_entries": 20,
            "storage_key": "custom",
            "debug": True,
        }

    @pytest.mark.parametrize("value", ["soon", "-1"])
    def test_bad_values(self, value):
        with pytest.raises(ConfigError, match="MCPDESK_HANDSHAKE_TIMEOUT"):
            DeskSettings.from_env({"MCPDESK_HANDSHAKE_TIMEOUT": value})

    @pytest.mark.parametrize("value", ["0", "0.5"])
    def test_log_capacity_below_one(self, value):
        with pytest.raises(ConfigError, match="MCPDESK_MAX_LOG_ENTRIES must be at least 1"):
            DeskSettings.from_env({"MCPDESK_MAX_LOG_ENTRIES": value})
