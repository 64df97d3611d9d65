"""
Control socket client.

Daemons such as ovs-vswitchd answer `ovs-appctl` style commands as JSON-RPC
over a unix socket named `<run_dir>/<daemon>.<pid>.ctl`.
"""
from __future__ import annotations

import json
import os
import socket
import time
from typing import Optional, Sequence

import structlog

from ..exceptions import ControlSocketError

logger = structlog.get_logger(__name__)

_UNIX_PREFIX = "unix:"


class UnixctlClient:
    """One-shot JSON-RPC client for a daemon control socket."""

    def __init__(self, path: str, timeout: float = 2.0) -> None:
        self.path = path[len(_UNIX_PREFIX):] if path.startswith(_UNIX_PREFIX) else path
        self.timeout = timeout
        self._next_id = 0

    def query(self, command: str, args: Optional[Sequence[str]] = None) -> str:
        """Send `command` and return the text result, stripped of trailing newlines."""
        request_id = self._next_id
        self._next_id += 1
        payload = {"method": command, "params": list(args or []), "id": request_id}

        deadline = time.monotonic() + self.timeout
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(self.timeout)
                sock.connect(self.path)
                sock.sendall(json.dumps(payload).encode("utf-8"))
                response = self._read_response(sock, deadline)
        except socket.timeout as e:
            raise ControlSocketError(
                f"the '{command}' command timed out after {self.timeout}s", socket=self.path
            ) from e
        except OSError as e:
            raise ControlSocketError(
                f"failed to connect to socket {self.path}: {e}", socket=self.path
            ) from e

        if response.get("error"):
            raise ControlSocketError(
                f"the '{command}' command failed: {response['error']}", socket=self.path
            )
        result = response.get("result")
        if not isinstance(result, str):
            raise ControlSocketError(
                f"the '{command}' command returned an unexpected result", socket=self.path
            )
        return result.rstrip("\n")

    def _read_response(self, sock: socket.socket, deadline: float) -> dict:
        decoder = json.JSONDecoder()
        buff = b""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("deadline exceeded")
            sock.settimeout(remaining)
            chunk = sock.recv(4096)
            if not chunk:
                break
            buff += chunk
            try:
                obj, _ = decoder.raw_decode(buff.decode("utf-8", errors="replace").lstrip())
            except ValueError:
                continue
            if isinstance(obj, dict):
                return obj
            break
        raise ControlSocketError("control socket closed without a response", socket=self.path)


def read_pid_file(path: str) -> int:
    """Return the PID stored in a daemon pid file."""
    with open(path, "r", encoding="utf-8") as f:
        line = f.readline().strip()
    try:
        pid = int(line)
    except ValueError as e:
        raise ControlSocketError(f"pid file {path} does not contain a pid: {line!r}", path=path) from e
    if pid <= 0:
        raise ControlSocketError(f"pid file {path} contains an invalid pid: {pid}", path=path)
    return pid


def control_socket_path(run_dir: str, daemon: str, pid: int) -> str:
    return f"{_UNIX_PREFIX}{os.path.join(run_dir, f'{daemon}.{pid}.ctl')}"


def discover_control_socket(run_dir: str, daemon: str, pid_file: str) -> str:
    """Derive the control socket of a running daemon from its pid file."""
    pid = read_pid_file(pid_file)
    path = control_socket_path(run_dir, daemon, pid)
    logger.debug("control_socket_discovered", daemon=daemon, pid=pid, socket=path)
    return path


def query_version(sock: str, timeout: float) -> str:
    """Ask a daemon for its version string over the control socket."""
    client = UnixctlClient(sock, timeout=timeout)
    response = client.query("version")
    if not response.strip():
        raise ControlSocketError("the 'version' command returned no data", socket=client.path)
    return response


__all__ = [
    "UnixctlClient",
    "control_socket_path",
    "discover_control_socket",
    "query_version",
    "read_pid_file",
]
