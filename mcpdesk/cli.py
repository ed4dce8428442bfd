#!/usr/bin/env python3
"""
mcpdesk Command Line Interface (CLI)

Lists configured servers, shows the tools a server exposes, calls a tool and
parses pasted server snippets.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from . import create_desk
from .errors import ConfigError
from .manager import ServerManager
from .models.server import ServerIdentity, TransportKind
from .models.tool import Tool
from .settings import DeskSettings
from .tools.arguments import coerce_argument, validate_arguments
from .tools.config import load_servers_config, parse_server_config
from .utils.helpers import json_serializer_default
from .utils.logging import set_debug

# Helper functions

def _load_servers(config_path: str) -> List[ServerIdentity]:
    try:
        return load_servers_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)


def _build_desk(args) -> ServerManager:
    try:
        settings = DeskSettings.from_env()
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)
    if args.timeout is not None:
        settings.handshake_timeout = args.timeout
    if args.debug:
        settings.debug = True
    return create_desk(settings=settings, servers=_load_servers(args.config))


def _describe_target(identity: ServerIdentity) -> str:
    if identity.transport_kind == TransportKind.REMOTE_STREAM and identity.remote:
        return identity.remote.url
    if identity.local:
        return " ".join([identity.local.command, *identity.local.args])
    return ""


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=json_serializer_default))


def _collect_arguments(tool: Tool, pairs: List[str], json_params: Optional[str]) -> Dict[str, Any]:
    """Merge --json parameters with key=value pairs, coercing each value to its parameter type."""
    arguments: Dict[str, Any] = {}
    if json_params:
        try:
            loaded = json.loads(json_params)
        except json.JSONDecodeError as e:
            raise ValueError(f"--json is not valid JSON: {e}")
        if not isinstance(loaded, dict):
            raise ValueError("--json must be a JSON object")
        arguments.update(loaded)
    for pair in pairs:
        key, sep, text = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        param = tool.get_parameter(key)
        arguments[key] = coerce_argument(param, text) if param else text
    return arguments

# --- Command Functions ---

def servers_command(args):
    """Prints the configured servers."""
    servers = _load_servers(args.config)
    if not servers:
        print("[INFO] No servers configured.", file=sys.stderr)
        return
    for identity in servers:
        print(f"{identity.name}\t{identity.transport_kind.value}\t{_describe_target(identity)}")


async def _tools(args) -> int:
    desk = _build_desk(args)
    result = await desk.connect(args.name)
    if not result.ok:
        print(f"[ERROR] {result.error}", file=sys.stderr)
        return 1
    try:
        _print_json([tool.to_dict() for tool in result.value])
    finally:
        await desk.shutdown()
    return 0


def tools_command(args):
    """Connects to a server and prints its normalized tools."""
    sys.exit(asyncio.run(_tools(args)))


async def _call(args) -> int:
    desk = _build_desk(args)
    result = await desk.connect(args.name)
    if not result.ok:
        print(f"[ERROR] {result.error}", file=sys.stderr)
        return 1
    try:
        tool = desk.get_tool(args.name, args.tool)
        if tool is None:
            print(f"[ERROR] Tool '{args.tool}' not found on {args.name}", file=sys.stderr)
            return 1
        try:
            arguments = _collect_arguments(tool, args.params, args.json)
        except ValueError as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            return 1
        errors = validate_arguments(tool, arguments)
        if errors:
            for param, message in errors.items():
                print(f"[ERROR] {param}: {message}", file=sys.stderr)
            return 1
        outcome = await desk.call_tool(args.name, args.tool, arguments)
        _print_json(outcome.to_dict())
        return 0 if outcome.is_success else 2
    finally:
        await desk.shutdown()


def call_command(args):
    """Calls one tool and prints the classified outcome."""
    sys.exit(asyncio.run(_call(args)))


def parse_command(args):
    """Runs the server config parser on a snippet file, or stdin for '-'."""
    if args.file == "-":
        text = sys.stdin.read()
    else:
        try:
            with open(args.file, "r") as f:
                text = f.read()
        except OSError as e:
            print(f"[ERROR] Cannot read {args.file}: {e}", file=sys.stderr)
            sys.exit(1)
    try:
        identity = parse_server_config(text)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)
    _print_json(identity.to_dict())

# --- Argument Parser Setup ---

def main(argv: Optional[List[str]] = None):
    """Main CLI entrypoint using argparse."""
    parser = argparse.ArgumentParser(
        description="mcpdesk: browse and call tools on MCP servers",
        formatter_class=argparse.RawTextHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run", required=True)

    # --- Common arguments ---
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument("--config", "-c", default="mcp.json", help="Servers JSON file (default: mcp.json)")
    common_parser.add_argument("--timeout", type=float, help="Handshake timeout in seconds per transport attempt")
    common_parser.add_argument("--debug", action="store_true", help="Print [DEBUG] diagnostics, including server stderr")

    servers_parser = subparsers.add_parser("servers", help="List configured servers", parents=[common_parser])
    servers_parser.set_defaults(func=servers_command)

    tools_parser = subparsers.add_parser("tools", help="Connect to a server and list its tools", parents=[common_parser])
    tools_parser.add_argument("name", help="Server name")
    tools_parser.set_defaults(func=tools_command)

    call_parser = subparsers.add_parser("call", help="Call a tool", parents=[common_parser])
    call_parser.add_argument("name", help="Server name")
    call_parser.add_argument("tool", help="Tool name")
    call_parser.add_argument("params", nargs="*", help="Arguments as key=value")
    call_parser.add_argument("--json", "-j", help="Arguments as a JSON object (merged before key=value pairs)")
    call_parser.set_defaults(func=call_command)

    parse_parser = subparsers.add_parser("parse", help="Parse a pasted server config snippet")
    parse_parser.add_argument("file", help="Snippet file, or '-' for stdin")
    parse_parser.set_defaults(func=parse_command)

    args = parser.parse_args(argv)
    if getattr(args, "debug", False):
        set_debug(True)
    args.func(args)

if __name__ == "__main__":
    main()
