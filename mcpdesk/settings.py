import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from mcpdesk.errors import ConfigError

# Handshake bound for a single transport attempt (seconds)
DEFAULT_HANDSHAKE_TIMEOUT = 5.0

# Results are never delivered faster than this (seconds)
DEFAULT_MIN_LATENCY = 0.2

DEFAULT_MAX_LOG_ENTRIES = 100

DEFAULT_STORAGE_KEY = "mcpdesk.servers"


@dataclass
class DeskSettings:
    """
    Runtime configuration shared by the negotiator, invoker, event log and store.

      - handshake_timeout (float): bound on the session handshake of one transport attempt.
        Process spawn is not included.
      - min_latency (float): minimum perceived latency of a tool call.
      - max_log_entries (int): per-server capacity of the event log (FIFO eviction).
      - storage_key (str): key under which server definitions live in the host store.
      - debug (bool): echo `[DEBUG]` diagnostics (including server stderr) to the console.

    Example:
        settings = DeskSettings(handshake_timeout=10.0, min_latency=0.0)
        desk = create_desk(settings=settings)
    """
    handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT
    min_latency: float = DEFAULT_MIN_LATENCY
    max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES
    storage_key: str = DEFAULT_STORAGE_KEY
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeskSettings":
        """
        Build settings from `MCPDESK_*` environment variables, falling back to defaults.
        """
        env = os.environ if environ is None else environ
        max_log_entries = int(_read_float(env, "MCPDESK_MAX_LOG_ENTRIES", DEFAULT_MAX_LOG_ENTRIES))
        if max_log_entries < 1:
            raise ConfigError(f"MCPDESK_MAX_LOG_ENTRIES must be at least 1, got {env.get('MCPDESK_MAX_LOG_ENTRIES')!r}")
        return cls(
            handshake_timeout=_read_float(env, "MCPDESK_HANDSHAKE_TIMEOUT", DEFAULT_HANDSHAKE_TIMEOUT),
            min_latency=_read_float(env, "MCPDESK_MIN_LATENCY", DEFAULT_MIN_LATENCY),
            max_log_entries=max_log_entries,
            storage_key=env.get("MCPDESK_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            debug=env.get("MCPDESK_DEBUG", "").strip().lower() in ("1", "true", "yes", "on"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _read_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{key} must not be negative, got {raw!r}")
    return value
