"""
Local-process transport: the tool server runs as a child process and speaks
JSON-RPC over its stdin/stdout, one message per line.

The process is spawned by :class:`LocalProcessStrategy` before the handshake starts,
so the handshake timeout never covers process startup. Its stderr is drained for the
lifetime of the channel and echoed as `[DEBUG]` diagnostics; the last lines are kept
for failure reports.
"""
import asyncio
import contextlib
import os
from collections import deque
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Deque, Dict, List, Mapping, Optional

import anyio
from fastmcp.client.transports import ClientTransport
from mcp import ClientSession
from mcp.shared.message import SessionMessage
from mcp.types import JSONRPCMessage
from pydantic import ValidationError

from mcpdesk.errors import ConfigError
from mcpdesk.models.server import ServerIdentity
from mcpdesk.transports.channel import Channel
from mcpdesk.utils.logging import log_message

# Package runners that ignore the OS working directory but accept a flag for it
KNOWN_DIRECTORY_RUNNERS: Dict[str, str] = {
    "uv": "--directory",
}

STDERR_TAIL_LINES = 20

# Pipe buffer limit; tool lists and results can be large single-line messages
STREAM_LIMIT = 16 * 1024 * 1024

# Grace period for the child to exit after terminate() (seconds)
TERMINATE_TIMEOUT = 5.0


@dataclass
class SpawnSpec:
    command: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)


def runner_name(command: str) -> str:
    name = os.path.basename(command.replace("\\", "/")).lower()
    if name.endswith(".exe"):
        name = name[:-4]
    return name


def rewrite_for_runner(command: str, args: List[str], cwd: Optional[str]):
    """
    Move the working directory into the argument list for runners like `uv`.

    Returns (args, cwd). When the command is a known runner and a working directory is
    given, the runner's directory flag is injected in front of the arguments and the
    working directory is dropped from the spawn options.
    """
    flag = KNOWN_DIRECTORY_RUNNERS.get(runner_name(command))
    if not cwd or flag is None:
        return list(args), cwd
    if flag in args:
        return list(args), None
    return [flag, cwd, *args], None


def merge_environment(overlay: Optional[Mapping[str, str]],
                      base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Overlay user variables on the inherited environment. The inherited PATH is kept
    unless the overlay provides a non-empty replacement.
    """
    env = dict(os.environ if base is None else base)
    for key, value in (overlay or {}).items():
        if key.upper() == "PATH" and not value:
            continue
        env[key] = str(value)
    return env


def build_spawn_spec(identity: ServerIdentity, base_env: Optional[Mapping[str, str]] = None) -> SpawnSpec:
    config = identity.local
    if config is None or not config.command:
        raise ConfigError("STDIO configuration must include a command", identity.name)
    args, cwd = rewrite_for_runner(config.command, list(config.args), config.cwd)
    return SpawnSpec(
        command=config.command,
        args=args,
        cwd=cwd,
        env=merge_environment(config.env, base_env),
    )


class LocalProcessTransport(ClientTransport):
    """
    fastmcp transport over an already-running child process.

    Bridges the process pipes into the memory streams `mcp.ClientSession` consumes.
    """
    def __init__(self, process: asyncio.subprocess.Process, server_name: str = ""):
        self.process = process
        self.server_name = server_name

    @contextlib.asynccontextmanager
    async def connect_session(self, **session_kwargs) -> AsyncIterator[ClientSession]:
        read_send, read_recv = anyio.create_memory_object_stream(0)
        write_send, write_recv = anyio.create_memory_object_stream(0)
        async with anyio.create_task_group() as tg:
            tg.start_soon(self._pump_stdout, read_send)
            tg.start_soon(self._pump_stdin, write_recv)
            try:
                async with ClientSession(read_recv, write_send, **session_kwargs) as session:
                    yield session
            finally:
                tg.cancel_scope.cancel()

    async def _pump_stdout(self, read_send) -> None:
        stdout = self.process.stdout
        async with read_send:
            while True:
                line = await stdout.readline()
                if not line:
                    break
                if not line.strip():
                    continue
                try:
                    message = JSONRPCMessage.model_validate_json(line)
                except ValidationError as exc:
                    await read_send.send(exc)
                    continue
                await read_send.send(SessionMessage(message))

    async def _pump_stdin(self, write_recv) -> None:
        stdin = self.process.stdin
        async with write_recv:
            async for session_message in write_recv:
                payload = session_message.message.model_dump_json(by_alias=True, exclude_none=True)
                stdin.write((payload + "\n").encode("utf-8"))
                await stdin.drain()

    def __repr__(self):
        return f"<LocalProcessTransport(server={self.server_name!r}, pid={self.process.pid})>"


class LocalProcessChannel(Channel):
    """Channel that also owns the child process and its stderr reader."""

    def __init__(self, process: asyncio.subprocess.Process, server_name: str, spec: SpawnSpec):
        super().__init__(LocalProcessTransport(process, server_name), label="stdio")
        self.process = process
        self.server_name = server_name
        self.spec = spec
        self.stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        self._stderr_task = asyncio.create_task(
            self._drain_stderr(), name=f"stderr-reader-{server_name}"
        )

    async def _drain_stderr(self) -> None:
        stream = self.process.stderr
        if stream is None:
            return
        while True:
            try:
                line = await stream.readline()
            except ValueError as e:
                log_message("WARN", f"{self.server_name}: stopped reading stderr: {e}")
                break
            if not line:
                break
            text = line.decode("utf-8", errors="replace").rstrip()
            self.stderr_tail.append(text)
            log_message("DEBUG", f"{self.server_name} stderr: {text}")

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "command": [self.spec.command, *self.spec.args],
            "cwd": self.spec.cwd,
            "pid": self.process.pid,
            "returncode": self.process.returncode,
            "stderr": list(self.stderr_tail),
        }

    async def close(self) -> None:
        if self.is_closed:
            return
        try:
            await super().close()
        finally:
            await self._terminate()

    async def _terminate(self) -> None:
        if self.process.returncode is None:
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(self.process.wait(), TERMINATE_TIMEOUT)
            except asyncio.TimeoutError:
                log_message("WARN", f"{self.server_name}: process did not exit, killing it")
                self.process.kill()
                await self.process.wait()
        # Let the reader collect the final stderr lines, then stop it
        try:
            await asyncio.wait_for(asyncio.shield(self._stderr_task), 1.0)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            self._stderr_task.cancel()


class LocalProcessStrategy:
    """Spawn the configured executable and wrap it in a :class:`LocalProcessChannel`."""

    label = "stdio"

    def __init__(self, base_env: Optional[Mapping[str, str]] = None):
        self.base_env = base_env

    async def open(self, identity: ServerIdentity) -> LocalProcessChannel:
        spec = build_spawn_spec(identity, self.base_env)
        log_message("DEBUG", f"{identity.name}: spawning {spec.command} {spec.args} (cwd={spec.cwd})")
        process = await asyncio.create_subprocess_exec(
            spec.command,
            *spec.args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=spec.cwd,
            env=spec.env,
            limit=STREAM_LIMIT,
        )
        return LocalProcessChannel(process, identity.name, spec)
