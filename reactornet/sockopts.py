"""Socket option helpers, listen-backlog discovery and socket creation."""

from __future__ import annotations

import contextlib
import errno
import socket
from typing import Iterator, Union

SockLike = Union[socket.socket, int]

_SOMAXCONN_PATH = "/proc/sys/net/core/somaxconn"
_MAX_BACKLOG = (1 << 16) - 1


@contextlib.contextmanager
def _as_socket(sock: SockLike) -> Iterator[socket.socket]:
    """Yield a socket object for ``sock``, borrowing a raw descriptor without closing it."""
    if isinstance(sock, socket.socket):
        yield sock
        return
    borrowed = socket.socket(fileno=sock)
    try:
        yield borrowed
    finally:
        borrowed.detach()


def _setsockopt(sock: SockLike, level: int, option: int, value: int) -> None:
    with _as_socket(sock) as s:
        s.setsockopt(level, option, value)


def set_no_delay(sock: SockLike, no_delay: int) -> None:
    """Turn Nagle's algorithm off (non-zero) or on (zero) for a TCP socket."""
    _setsockopt(sock, socket.IPPROTO_TCP, socket.TCP_NODELAY, no_delay)


def set_recv_buffer(sock: SockLike, size: int) -> None:
    """Set the size of the kernel receive buffer."""
    _setsockopt(sock, socket.SOL_SOCKET, socket.SO_RCVBUF, size)


def set_send_buffer(sock: SockLike, size: int) -> None:
    """Set the size of the kernel send buffer."""
    _setsockopt(sock, socket.SOL_SOCKET, socket.SO_SNDBUF, size)


def set_reuseport(sock: SockLike, reuse_port: int) -> None:
    """Set SO_REUSEADDR and SO_REUSEPORT to ``reuse_port``."""
    _setsockopt(sock, socket.SOL_SOCKET, socket.SO_REUSEADDR, reuse_port)
    reuseport = getattr(socket, "SO_REUSEPORT", None)
    if reuseport is None:
        raise OSError(errno.ENOPROTOOPT, "SO_REUSEPORT is not supported on this platform")
    _setsockopt(sock, socket.SOL_SOCKET, reuseport, reuse_port)


def set_ipv6_only(sock: SockLike, ipv6_only: int) -> None:
    """Restrict an IPv6 socket to IPv6 traffic (non-zero) or allow IPv4 too (zero)."""
    _setsockopt(sock, socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, ipv6_only)


def set_keep_alive(sock: SockLike, secs: int) -> None:
    """Enable TCP keep-alive probes with an idle time and interval of ``secs`` seconds."""
    if secs <= 0:
        raise ValueError("invalid time duration")
    _setsockopt(sock, socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

    keepintvl = getattr(socket, "TCP_KEEPINTVL", None)
    if keepintvl is not None:
        try:
            _setsockopt(sock, socket.IPPROTO_TCP, keepintvl, secs)
        except OSError as exc:
            # Some older systems lack this option; the idle time alone still applies.
            if exc.errno != errno.ENOPROTOOPT:
                raise

    idle = getattr(socket, "TCP_KEEPIDLE", None)
    if idle is None:
        idle = getattr(socket, "TCP_KEEPALIVE", None)
    if idle is None:
        raise OSError(errno.ENOPROTOOPT, "TCP keep-alive idle time is not supported on this platform")
    _setsockopt(sock, socket.IPPROTO_TCP, idle, secs)


def max_listener_backlog() -> int:
    """Return the system's maximum listen backlog, capped to 65535.

    The kernel limit is read where the system publishes it; otherwise
    ``socket.SOMAXCONN`` is returned.
    """
    try:
        with open(_SOMAXCONN_PATH, encoding="ascii") as fh:
            line = fh.readline()
    except (OSError, UnicodeDecodeError):
        return socket.SOMAXCONN
    if not line.endswith("\n"):
        return socket.SOMAXCONN
    fields = line.split()
    if not fields:
        return socket.SOMAXCONN
    try:
        n = int(fields[0])
    except ValueError:
        return socket.SOMAXCONN
    if n == 0:
        return socket.SOMAXCONN
    return min(n, _MAX_BACKLOG)


def sys_socket(family: int, sotype: int, proto: int) -> socket.socket:
    """Create a non-blocking socket that is closed on exec."""
    sock = socket.socket(family, sotype, proto)
    try:
        sock.set_inheritable(False)
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


def sys_block_socket(family: int, sotype: int, proto: int) -> socket.socket:
    """Create a blocking socket that is closed on exec."""
    sock = socket.socket(family, sotype, proto)
    try:
        sock.set_inheritable(False)
    except OSError:
        sock.close()
        raise
    return sock