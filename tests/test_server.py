import socket
import tempfile
import threading
import os

import pytest

from minisqlnet.server import (
    INADDR_ANY,
    PORT_DEFAULT,
    Connection,
    MessageTooLongError,
    Server,
    ServerParam,
    read_message,
    send_message,
)
from minisqlnet.session import Session


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def _read_reply(sock):
    buf = b""
    while not buf.endswith(b"\0"):
        chunk = sock.recv(4096)
        if not chunk:
            break
        buf += chunk
    return buf


def test_read_message_strips_terminator(pair):
    a, b = pair
    a.sendall(b"select * from t;\0")
    assert read_message(b) == b"select * from t;"


def test_read_message_discards_after_terminator(pair):
    a, b = pair
    a.sendall(b"first\0second")
    assert read_message(b) == b"first"


def test_read_message_across_several_sends(pair):
    a, b = pair
    a.sendall(b"hel")
    t = threading.Timer(0.05, lambda: a.sendall(b"lo\0"))
    t.start()
    assert read_message(b) == b"hello"
    t.join()


def test_read_message_peer_closed(pair):
    a, b = pair
    a.sendall(b"partial")
    a.close()
    assert read_message(b) is None


def test_read_message_exact_limit(pair):
    a, b = pair
    a.sendall(b"abc\0")
    assert read_message(b, limit=4) == b"abc"


def test_read_message_too_long(pair):
    a, b = pair
    a.sendall(b"abcd\0")
    with pytest.raises(MessageTooLongError):
        read_message(b, limit=4)


def test_read_message_too_long_without_terminator(pair):
    a, b = pair
    a.sendall(b"abcdefgh")
    with pytest.raises(MessageTooLongError):
        read_message(b, limit=4)


def test_send_message_roundtrip(pair):
    a, b = pair
    assert send_message(a, b"reply\0") == 6
    assert read_message(b) == b"reply"


def test_send_message_empty(pair):
    a, _ = pair
    assert send_message(a, b"") == 0


def test_server_param_defaults():
    param = ServerParam()
    assert param.port == PORT_DEFAULT
    assert param.listen_addr == INADDR_ANY
    assert param.use_unix_socket is False
    assert param.unix_socket_path == ""


def test_connection_send_and_receive(pair):
    a, b = pair
    conn = Connection(b, "peer")
    a.sendall(b"show tables;\0")
    assert conn.receive() == "show tables;"
    assert conn.send("ok\0") == 3
    assert _read_reply(a) == b"ok\0"


def test_connection_session_copied_from_default(pair):
    _, b = pair
    conn = Connection(b, "peer")
    assert conn.session == Session.default_session().copy()
    assert conn.session is not Session.default_session()


def test_connection_close_is_idempotent(pair):
    _, b = pair
    closed = []
    conn = Connection(b, "peer", on_close=closed.append)
    conn.close()
    conn.close()
    assert conn.closed
    assert closed == [conn]


def _echo(conn, request):
    conn.send(request.upper().encode() + b"\0")


def _start_tcp(handler=_echo):
    server = Server(ServerParam(listen_addr=0x7F000001, port=0), handler)
    server.start()
    thread = threading.Thread(target=server.serve, daemon=True)
    thread.start()
    return server, thread


def test_server_tcp_round_trip_and_shutdown():
    server, thread = _start_tcp()
    host, port = server.address
    assert host == "127.0.0.1"
    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(b"hello\0")
        assert _read_reply(client) == b"HELLO\0"
        client.sendall(b"again\0")
        assert _read_reply(client) == b"AGAIN\0"
    server.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert server.started is False


def test_server_handler_sees_request_text():
    seen = []

    def handler(conn, request):
        seen.append(request)
        conn.send(b"done\0")

    server, thread = _start_tcp(handler)
    try:
        with socket.create_connection(server.address, timeout=5) as client:
            client.sendall(b"desc t;\0")
            assert _read_reply(client) == b"done\0"
    finally:
        server.shutdown()
        thread.join(timeout=5)
    assert seen == ["desc t;"]


def test_server_unix_socket_round_trip():
    directory = tempfile.mkdtemp(prefix="s", dir="/tmp")
    path = os.path.join(directory, "srv.sock")
    server = Server(ServerParam(unix_socket_path=path, use_unix_socket=True), _echo)
    server.start()
    thread = threading.Thread(target=server.serve, daemon=True)
    thread.start()
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as client:
            client.settimeout(5)
            client.connect(path)
            client.sendall(b"sync\0")
            assert _read_reply(client) == b"SYNC\0"
    finally:
        server.shutdown()
        thread.join(timeout=5)
        if os.path.exists(path):
            os.unlink(path)
        os.rmdir(directory)
    assert not thread.is_alive()


def test_server_start_twice_raises():
    server = Server(ServerParam(listen_addr=0x7F000001, port=0))
    server.start()
    try:
        with pytest.raises(RuntimeError):
            server.start()
    finally:
        server.shutdown()
    assert server.started is False


def test_address_before_start_raises():
    with pytest.raises(RuntimeError):
        Server().address