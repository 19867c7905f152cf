"""Network front end: accepts clients and exchanges NUL-terminated messages."""

from __future__ import annotations

import contextlib
import logging
import selectors
import socket
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .session import Session

_log = logging.getLogger(__name__)

PORT_DEFAULT = 6789
MAX_CONNECTION_NUM_DEFAULT = 8192
SOCKET_BUFFER_SIZE = 8192
INADDR_ANY = 0

_MESSAGE_END = b"\0"
_SEND_ATTEMPTS = 3

_LISTEN = "listen"
_WAKE = "wake"


class MessageTooLongError(Exception):
    """A request did not fit in the receive buffer."""


@dataclass
class ServerParam:
    """How and where the server listens.

    ``listen_addr`` is an IPv4 address as a host-order integer;
    ``INADDR_ANY`` accepts every address.
    """

    listen_addr: int = INADDR_ANY
    max_connection_num: int = MAX_CONNECTION_NUM_DEFAULT
    port: int = PORT_DEFAULT
    unix_socket_path: str = ""
    use_unix_socket: bool = False


def _wait_readable(sock: socket.socket) -> None:
    with selectors.DefaultSelector() as sel:
        sel.register(sock, selectors.EVENT_READ)
        sel.select()


def read_message(sock: socket.socket, limit: int = SOCKET_BUFFER_SIZE) -> Optional[bytes]:
    """Read one message up to its NUL terminator and return it without the terminator.

    Bytes received after the terminator are discarded. Returns ``None``
    when the peer closes before a complete message arrived; raises
    :class:`MessageTooLongError` when the message and its terminator
    need more than *limit* bytes.
    """
    buf = bytearray()
    while True:
        try:
            chunk = sock.recv(limit)
        except BlockingIOError:
            _wait_readable(sock)
            continue
        if not chunk:
            return None
        end = chunk.find(_MESSAGE_END)
        if end >= 0:
            buf += chunk[:end]
            if len(buf) + 1 > limit:
                raise MessageTooLongError(f"message exceeds the limit of {limit} bytes")
            return bytes(buf)
        buf += chunk
        if len(buf) >= limit:
            raise MessageTooLongError(f"message exceeds the limit of {limit} bytes")


def send_message(sock: socket.socket, data: bytes) -> int:
    """Write *data* in at most three attempts and return how many bytes went out.

    Framing is the caller's business. Raises ``OSError`` when writing fails.
    """
    if not data:
        return 0
    view = memoryview(data)
    written = 0
    for _ in range(_SEND_ATTEMPTS):
        if written >= len(data):
            break
        written += sock.send(view[written:])
    if written < len(data):
        _log.warning("Not all data has been sent back to client")
    return written


class Connection:
    """One accepted client with its session."""

    def __init__(
        self,
        sock: socket.socket,
        addr: str,
        limit: int = SOCKET_BUFFER_SIZE,
        session: Optional[Session] = None,
        on_close: Optional[Callable[[Connection], None]] = None,
    ) -> None:
        self.sock = sock
        self.addr = addr
        self.limit = limit
        self.session = session if session is not None else Session.default_session().copy()
        self._on_close = on_close
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the connection has been closed."""
        return self._closed

    def receive(self) -> Optional[str]:
        """The next request, or ``None`` when the peer has closed."""
        with self._lock:
            data = read_message(self.sock, self.limit)
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")

    def send(self, data: Union[bytes, str]) -> int:
        """Send raw bytes; the connection is closed if writing fails."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            with self._lock:
                return send_message(self.sock, data)
        except OSError:
            _log.error("Failed to send data back to client %s", self.addr)
            self.close()
            raise

    def close(self) -> None:
        """Close the connection; closing again does nothing."""
        if self._closed:
            return
        self._closed = True
        _log.info("Close connection of %s.", self.addr)
        if self._on_close is not None:
            self._on_close(self)
        with contextlib.suppress(OSError):
            self.sock.close()

    def __repr__(self) -> str:
        return f"Connection({self.addr!r})"


Handler = Callable[[Connection, str], None]


class Server:
    """Listens for clients and passes each request to *handler*.

    The handler runs on the serving thread and answers through
    :meth:`Connection.send`.
    """

    def __init__(self, param: Optional[ServerParam] = None, handler: Optional[Handler] = None) -> None:
        self.param = param if param is not None else ServerParam()
        self.handler = handler
        self._listen_sock: Optional[socket.socket] = None
        self._selector: Optional[selectors.BaseSelector] = None
        self._wake_r: Optional[socket.socket] = None
        self._wake_w: Optional[socket.socket] = None
        self._connections: dict[int, Connection] = {}
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._serving = False
        self.started = False

    @property
    def address(self):
        """The address the listening socket is bound to."""
        if self._listen_sock is None:
            raise RuntimeError("server is not started")
        return self._listen_sock.getsockname()

    @property
    def connections(self) -> list[Connection]:
        """The open client connections."""
        return list(self._connections.values())

    def start(self) -> None:
        """Bind and listen; raises ``OSError`` when that fails."""
        if self.started:
            raise RuntimeError("server already started")
        if self.param.use_unix_socket:
            sock = self._open_unix_socket()
            _log.info("Listen on unix socket: %s", self.param.unix_socket_path)
        else:
            sock = self._open_tcp_socket()
            _log.info("Listen on port %d", sock.getsockname()[1])
        self._listen_sock = sock
        self._selector = selectors.DefaultSelector()
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._selector.register(sock, selectors.EVENT_READ, _LISTEN)
        self._selector.register(self._wake_r, selectors.EVENT_READ, _WAKE)
        self._stop.clear()
        self.started = True
        _log.info("Server start success")

    def _open_tcp_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setblocking(False)
            host = socket.inet_ntoa((self.param.listen_addr & 0xFFFFFFFF).to_bytes(4, "big"))
            sock.bind((host, self.param.port))
            sock.listen(self.param.max_connection_num)
        except OSError:
            sock.close()
            raise
        return sock

    def _open_unix_socket(self) -> socket.socket:
        path = self.param.unix_socket_path
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.setblocking(False)
            with contextlib.suppress(FileNotFoundError):
                socket_path_unlink(path)
            sock.bind(path)
            sock.listen(self.param.max_connection_num)
        except OSError:
            sock.close()
            raise
        return sock

    def serve(self) -> None:
        """Start if needed and dispatch events until :meth:`shutdown` is called."""
        with self._lock:
            if not self.started:
                self.start()
            self._serving = True
        try:
            while not self._stop.is_set():
                assert self._selector is not None
                for key, _ in self._selector.select():
                    if self._stop.is_set():
                        break
                    if key.data == _LISTEN:
                        self._accept()
                    elif key.data == _WAKE:
                        self._drain_wake()
                    else:
                        self._receive(key.data)
        finally:
            with self._lock:
                self._serving = False
                self._cleanup()

    def shutdown(self) -> None:
        """Stop serving and close every connection and the listening socket."""
        _log.info("Server shutting down")
        with self._lock:
            self._stop.set()
            if self._serving:
                if self._wake_w is not None:
                    with contextlib.suppress(OSError):
                        self._wake_w.send(b"x")
            else:
                self._cleanup()

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _drain_wake(self) -> None:
        assert self._wake_r is not None
        with contextlib.suppress(BlockingIOError, OSError):
            self._wake_r.recv(64)

    def _accept(self) -> None:
        assert self._listen_sock is not None
        try:
            client, peer = self._listen_sock.accept()
        except BlockingIOError:
            return
        except OSError as exc:
            _log.error("Failed to accept client's connection, %s", exc)
            return
        try:
            client.setblocking(True)
            if self.param.use_unix_socket:
                addr = self.param.unix_socket_path
            else:
                client.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                addr = f"{peer[0]}:{peer[1]}"
        except OSError as exc:
            _log.error("Failed to set up client socket, %s", exc)
            client.close()
            return
        conn = Connection(client, addr, on_close=self._forget)
        self._connections[client.fileno()] = conn
        assert self._selector is not None
        self._selector.register(client, selectors.EVENT_READ, conn)
        _log.info("Accepted connection from %s", addr)

    def _forget(self, conn: Connection) -> None:
        for fd, known in list(self._connections.items()):
            if known is conn:
                del self._connections[fd]
        if self._selector is not None:
            with contextlib.suppress(KeyError, ValueError, OSError):
                self._selector.unregister(conn.sock)

    def _receive(self, conn: Connection) -> None:
        try:
            request = conn.receive()
        except MessageTooLongError:
            _log.warning("The length of sql exceeds the limitation %d", conn.limit)
            conn.close()
            return
        except OSError as exc:
            _log.error("Failed to read socket of %s, %s", conn.addr, exc)
            conn.close()
            return
        if request is None:
            _log.info("The peer has been closed %s", conn.addr)
            conn.close()
            return
        _log.info("receive command(size=%d): %s", len(request), request)
        if self.handler is None:
            return
        try:
            self.handler(conn, request)
        except Exception:
            _log.exception("Request handler failed for %s", conn.addr)

    def _cleanup(self) -> None:
        for conn in list(self._connections.values()):
            conn.close()
        self._connections.clear()
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        for sock in (self._listen_sock, self._wake_r, self._wake_w):
            if sock is not None:
                with contextlib.suppress(OSError):
                    sock.close()
        self._listen_sock = self._wake_r = self._wake_w = None
        if self.started:
            _log.info("Server quit")
        self.started = False


def socket_path_unlink(path: str) -> None:
    """Remove a stale socket file left at *path*."""
    import os

    os.unlink(path)