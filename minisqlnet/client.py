"""Interactive command-line client that sends SQL lines to the server."""

from __future__ import annotations

import argparse
import codecs
import re
import socket
import sys
from typing import Iterable, Iterator, Optional, TextIO

from .server import PORT_DEFAULT

PROMPT = "miniob > "
MAX_MEM_BUFFER_SIZE = 8192
DEFAULT_HOST = "127.0.0.1"

_MESSAGE_END = b"\0"
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def is_exit_command(cmd: str) -> bool:
    """Whether *cmd* starts with ``exit`` or ``bye``, ignoring case."""
    return cmd[:4].lower() == "exit" or cmd[:3].lower() == "bye"


def is_blank(text: str) -> bool:
    """Whether *text* holds nothing but whitespace."""
    return not text.strip()


def connect_unix(path: str) -> socket.socket:
    """Connect to the server over a unix socket; raises ``OSError`` on failure."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(path)
    except OSError:
        sock.close()
        raise
    return sock


def connect_tcp(host: str, port: int) -> socket.socket:
    """Connect to the server over IPv4 TCP; raises ``OSError`` on failure."""
    address = socket.gethostbyname(host)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((address, port))
    except OSError:
        sock.close()
        raise
    return sock


def _requests(lines: Iterable[str]) -> Iterator[str]:
    """Lines cut into pieces that fit the input buffer, as line reading does."""
    size = MAX_MEM_BUFFER_SIZE - 1
    for line in lines:
        while len(line) > size:
            yield line[:size]
            line = line[size:]
        if line:
            yield line


def _prompt(out: TextIO) -> None:
    out.write(PROMPT)
    out.flush()


def _print_response(sock: socket.socket, out: TextIO) -> bool:
    """Copy one response to *out*; False when the connection is gone."""
    decoder = codecs.getincrementaldecoder("utf-8")("replace")
    while True:
        try:
            chunk = sock.recv(MAX_MEM_BUFFER_SIZE)
        except OSError as exc:
            out.write(decoder.decode(b"", final=True))
            sys.stderr.write(f"Connection was broken: {exc}\n")
            return False
        if not chunk:
            out.write(decoder.decode(b"", final=True))
            out.write("Connection has been closed\n")
            return False
        end = chunk.find(_MESSAGE_END)
        if end >= 0:
            out.write(decoder.decode(chunk[:end], final=True))
            return True
        out.write(decoder.decode(chunk))


def run_session(sock: socket.socket, lines: Iterable[str], out: TextIO) -> None:
    """Send each non-blank line and print each response until exit or disconnect.

    Raises ``OSError`` when a request cannot be sent.
    """
    _prompt(out)
    for line in _requests(lines):
        if is_blank(line):
            _prompt(out)
            continue
        if is_exit_command(line):
            break
        sock.sendall(line.encode("utf-8") + _MESSAGE_END)
        if not _print_response(sock, out):
            break
        _prompt(out)


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="obclient", add_help=False)
    parser.add_argument("-s", dest="unix_socket_path", default=None)
    parser.add_argument("-h", dest="host", default=DEFAULT_HOST)
    parser.add_argument("-p", dest="port", type=_atoi, default=PORT_DEFAULT)
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the client; returns the process exit status."""
    args = _parse_args(argv)
    try:
        if args.unix_socket_path is not None:
            sock = connect_unix(args.unix_socket_path)
        else:
            sock = connect_tcp(args.host, args.port)
    except OSError as exc:
        if args.unix_socket_path is not None:
            sys.stderr.write(
                f"failed to connect to server. unix socket path "
                f"'{args.unix_socket_path}'. error {exc}\n"
            )
        else:
            sys.stderr.write(f"Failed to connect. errmsg={exc.errno}:{exc}\n")
        return 1

    with sock:
        try:
            run_session(sock, sys.stdin, sys.stdout)
        except OSError as exc:
            sys.stderr.write(f"send error: {exc.errno}:{exc} \n")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())