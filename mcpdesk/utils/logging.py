import sys
from typing import Optional, TextIO

_debug_enabled = False


def set_debug(enabled: bool) -> None:
    """Toggle `[DEBUG]` diagnostics (server stderr echo, transport details)."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


def debug_enabled() -> bool:
    return _debug_enabled


def log_message(level: str, message: str, stream: Optional[TextIO] = None) -> None:
    """
    Print a bracketed-level diagnostic line, e.g. "[WARN] ...", to stderr.
    DEBUG lines are dropped unless debug output is enabled.
    """
    level = level.upper()
    if level == "DEBUG" and not _debug_enabled:
        return
    print(f"[{level}] {message}", file=stream or sys.stderr)
