import json
import os
import socketserver
import tempfile
import threading

import pytest

from ovs_inventory.exceptions import ControlSocketError
from ovs_inventory.ovsdb.appctl import (
    UnixctlClient,
    control_socket_path,
    discover_control_socket,
    query_version,
    read_pid_file,
)


class _UnixctlHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        raw = self.request.recv(4096)
        request = json.loads(raw.decode("utf-8"))
        self.server.requests.append(request)
        reply = self.server.reply
        if reply is None:
            # Never answer.
            self.server.release.wait(5)
            return
        response = dict(reply, id=request["id"])
        payload = json.dumps(response).encode("utf-8")
        # Split the reply to exercise incremental decoding.
        self.request.sendall(payload[:5])
        self.request.sendall(payload[5:])


class _UnixctlServer(socketserver.ThreadingMixIn, socketserver.UnixStreamServer):
    daemon_threads = True


@pytest.fixture
def unixctl_server():
    servers = []
    tmpdir = tempfile.TemporaryDirectory(prefix="ovsctl")

    def _start(reply):
        path = os.path.join(tmpdir.name, f"ovs-vswitchd.{len(servers) + 1}.ctl")
        server = _UnixctlServer(path, _UnixctlHandler)
        server.reply = reply
        server.requests = []
        server.release = threading.Event()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return server, path

    yield _start

    for server in servers:
        server.release.set()
        server.shutdown()
        server.server_close()
    tmpdir.cleanup()


def test_query_returns_result_text(unixctl_server):
    server, path = unixctl_server({"result": "ovs-vswitchd (Open vSwitch) 3.5.1\n", "error": None})
    client = UnixctlClient(f"unix:{path}", timeout=2)
    assert client.query("version") == "ovs-vswitchd (Open vSwitch) 3.5.1"
    assert server.requests == [{"method": "version", "params": [], "id": 0}]


def test_query_version_helper(unixctl_server):
    _, path = unixctl_server({"result": "ovs-vswitchd (Open vSwitch) 2.17.9\n", "error": None})
    assert query_version(path, 2) == "ovs-vswitchd (Open vSwitch) 2.17.9"


def test_empty_version_reply_is_an_error(unixctl_server):
    _, path = unixctl_server({"result": "\n", "error": None})
    with pytest.raises(ControlSocketError):
        query_version(path, 2)


def test_error_reply(unixctl_server):
    _, path = unixctl_server({"result": None, "error": "\"versio\" is not a valid command"})
    with pytest.raises(ControlSocketError) as exc:
        UnixctlClient(path, timeout=2).query("versio")
    assert "not a valid command" in str(exc.value)


def test_timeout(unixctl_server):
    _, path = unixctl_server(None)
    with pytest.raises(ControlSocketError) as exc:
        UnixctlClient(path, timeout=0.2).query("version")
    assert "timed out" in str(exc.value)


def test_unreachable_socket(tmp_path):
    with pytest.raises(ControlSocketError) as exc:
        UnixctlClient(str(tmp_path / "missing.ctl"), timeout=1).query("version")
    assert "failed to connect" in str(exc.value)


def test_pid_file_discovery(tmp_path):
    pid_file = tmp_path / "ovs-vswitchd.pid"
    pid_file.write_text("1234\n")
    assert read_pid_file(str(pid_file)) == 1234
    assert discover_control_socket("/var/run/openvswitch", "ovs-vswitchd", str(pid_file)) == (
        "unix:/var/run/openvswitch/ovs-vswitchd.1234.ctl"
    )


@pytest.mark.parametrize("content", ["", "abc\n", "0\n", "-5\n"])
def test_bad_pid_file(tmp_path, content):
    pid_file = tmp_path / "ovs-vswitchd.pid"
    pid_file.write_text(content)
    with pytest.raises(ControlSocketError):
        read_pid_file(str(pid_file))


def test_control_socket_path():
    assert control_socket_path("/run/ovn", "ovn-northd", 202) == "unix:/run/ovn/ovn-northd.202.ctl"
