"""Create listening, connected and datagram sockets from network and address strings."""

from __future__ import annotations

import ipaddress
import os
import socket
from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple, Optional, Tuple, Union

from .sockopts import max_listener_backlog, set_ipv6_only, sys_block_socket, sys_socket

_LISTENER_BACKLOG_MAX_SIZE = max_listener_backlog()

_NETWORKS = {
    "tcp": ("tcp", "tcp4", "tcp6"),
    "udp": ("udp", "udp4", "udp6"),
}
_UNIX_NETWORKS = ("unix", "unixgram", "unixpacket")

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class UnsupportedProtocolError(Exception):
    """Raised when a network name is not one this package can serve."""

    def __init__(self, message: str = "only unix, tcp/tcp4/tcp6, udp/udp4/udp6 are supported") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class SocketOption:
    """A socket option setter and the value to pass to it."""

    set_sockopt: Callable[[socket.socket, int], object]
    opt: int

    def apply(self, sock: socket.socket) -> None:
        """Set this option on ``sock``."""
        self.set_sockopt(sock, self.opt)


def _host_string(ip: Optional[str], zone: str) -> str:
    if ip is None:
        return ""
    return f"{ip}%{zone}" if zone else ip


def _join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


@dataclass(frozen=True)
class TCPAddr:
    """A TCP endpoint; ``ip`` is None for the unspecified address."""

    ip: Optional[str]
    port: int
    zone: str = ""

    @property
    def network(self) -> str:
        return "tcp"

    def __str__(self) -> str:
        return _join_host_port(_host_string(self.ip, self.zone), self.port)


@dataclass(frozen=True)
class UDPAddr:
    """A UDP endpoint; ``ip`` is None for the unspecified address."""

    ip: Optional[str]
    port: int
    zone: str = ""

    @property
    def network(self) -> str:
        return "udp"

    def __str__(self) -> str:
        return _join_host_port(_host_string(self.ip, self.zone), self.port)


@dataclass(frozen=True)
class UnixAddr:
    """A Unix domain socket endpoint."""

    name: str
    net: str = "unix"

    @property
    def network(self) -> str:
        return self.net

    def __str__(self) -> str:
        return self.name


class _Endpoint(NamedTuple):
    sockaddr: tuple
    family: int
    ip: Optional[str]
    port: int
    zone: str
    ipv6only: bool


def _split_host_port(addr: str) -> Tuple[str, str]:
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {addr!r}")
        rest = addr[end + 1:]
        if not rest.startswith(":"):
            raise ValueError(f"missing port in address {addr!r}")
        return addr[1:end], rest[1:]
    i = addr.rfind(":")
    if i < 0:
        raise ValueError(f"missing port in address {addr!r}")
    host = addr[:i]
    if ":" in host:
        raise ValueError(f"too many colons in address {addr!r}")
    return host, addr[i + 1:]


def _parse_port(port: str, kind: str) -> int:
    if port == "":
        return 0
    if port.isdigit():
        n = int(port)
        if n > 65535:
            raise ValueError(f"invalid port {port!r}")
        return n
    try:
        return socket.getservbyname(port, kind)
    except OSError:
        raise ValueError(f"unknown port {kind}/{port}") from None


def _lookup_host(host: str, version: str, sotype: int) -> IPAddress:
    family = {"4": socket.AF_INET, "6": socket.AF_INET6}.get(version, socket.AF_UNSPEC)
    infos = socket.getaddrinfo(host, None, family, sotype)
    addrs = [ipaddress.ip_address(info[4][0].partition("%")[0]) for info in infos]
    if not addrs:
        raise ValueError(f"no suitable address found for {host!r}")
    if version == "":
        for candidate in addrs:
            if candidate.version == 4:
                return candidate
    return addrs[0]


def _resolve_ip(host: str, version: str, sotype: int) -> Optional[IPAddress]:
    if not host:
        return None
    try:
        ip: IPAddress = ipaddress.ip_address(host)
    except ValueError:
        ip = _lookup_host(host, version, sotype)
    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if (version == "4" and ip.version != 4) or (version == "6" and ip.version != 6):
        raise ValueError(f"no suitable address found for {host!r}")
    return ip


def _resolve(proto: str, addr: str, kind: str) -> _Endpoint:
    if proto not in _NETWORKS[kind]:
        raise UnsupportedProtocolError(f"only {kind}/{kind}4/{kind}6 are supported")
    sotype = socket.SOCK_STREAM if kind == "tcp" else socket.SOCK_DGRAM
    host, port_str = _split_host_port(addr)
    host, _, zone = host.partition("%")
    port = _parse_port(port_str, kind)
    version = proto[len(kind):]
    ip = _resolve_ip(host, version, sotype)

    effective = version if ip is None else str(ip.version)
    ip_str = None if ip is None else str(ip)
    if effective == "4":
        return _Endpoint((ip_str or "0.0.0.0", port), socket.AF_INET, ip_str, port, "", False)

    scope = socket.if_nametoindex(zone) if zone else 0
    return _Endpoint(
        (ip_str or "::", port, 0, scope),
        socket.AF_INET6,
        ip_str,
        port,
        zone,
        effective == "6",
    )


def _prepare(sock: socket.socket, ep: _Endpoint, sockopts: Iterable[SocketOption]) -> None:
    if ep.family == socket.AF_INET6 and ep.ipv6only:
        set_ipv6_only(sock, 1)
    for sockopt in sockopts:
        sockopt.apply(sock)


def tcp_socket(
    proto: str, addr: str, sockopts: Iterable[SocketOption] = ()
) -> Tuple[socket.socket, TCPAddr]:
    """Create a non-blocking TCP socket listening on ``addr``."""
    ep = _resolve(proto, addr, "tcp")
    sock = sys_socket(ep.family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        _prepare(sock, ep, sockopts)
        sock.bind(ep.sockaddr)
        sock.listen(_LISTENER_BACKLOG_MAX_SIZE)
    except Exception:
        sock.close()
        raise
    return sock, TCPAddr(ep.ip, ep.port, ep.zone)


def udp_socket(
    proto: str, addr: str, sockopts: Iterable[SocketOption] = ()
) -> Tuple[socket.socket, UDPAddr]:
    """Create a non-blocking UDP socket bound to ``addr`` with broadcast allowed."""
    ep = _resolve(proto, addr, "udp")
    sock = sys_socket(ep.family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        if ep.family == socket.AF_INET6 and ep.ipv6only:
            set_ipv6_only(sock, 1)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        for sockopt in sockopts:
            sockopt.apply(sock)
        sock.bind(ep.sockaddr)
    except Exception:
        sock.close()
        raise
    return sock, UDPAddr(ep.ip, ep.port, ep.zone)


def unix_socket(
    proto: str, addr: str, sockopts: Iterable[SocketOption] = ()
) -> Tuple[socket.socket, UnixAddr]:
    """Create a non-blocking Unix stream socket listening on the path ``addr``."""
    if proto not in _UNIX_NETWORKS:
        raise UnsupportedProtocolError(f"unknown network {proto!r}")
    if proto != "unix":
        raise UnsupportedProtocolError("only unix is supported")
    family = getattr(socket, "AF_UNIX", None)
    if family is None:
        raise UnsupportedProtocolError("unix sockets are not supported on this platform")
    sock = sys_socket(family, socket.SOCK_STREAM, 0)
    try:
        for sockopt in sockopts:
            sockopt.apply(sock)
        sock.bind(addr)
        sock.listen(_LISTENER_BACKLOG_MAX_SIZE)
    except Exception:
        sock.close()
        raise
    return sock, UnixAddr(addr, proto)


def tcp_connect(
    proto: str, addr: str, sockopts: Iterable[SocketOption] = ()
) -> Tuple[socket.socket, TCPAddr, tuple]:
    """Connect to ``addr``; return the now non-blocking socket, the peer address and its sockaddr."""
    ep = _resolve(proto, addr, "tcp")
    sock = sys_block_socket(ep.family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        _prepare(sock, ep, sockopts)
        sock.connect(ep.sockaddr)
        sock.setblocking(False)
    except Exception:
        sock.close()
        raise
    return sock, TCPAddr(ep.ip, ep.port, ep.zone), ep.sockaddr


def _inet6_parts(sockaddr) -> Tuple[str, int, str]:
    host = str(ipaddress.ip_address(sockaddr[0].partition("%")[0]))
    scope = sockaddr[3] if len(sockaddr) > 3 else 0
    return host, sockaddr[1], ip6_zone_to_string(scope)


def _inet4_parts(sockaddr) -> Tuple[str, int]:
    return str(ipaddress.ip_address(sockaddr[0])), sockaddr[1]


def sockaddr_to_tcp_or_unix_addr(family: int, sockaddr) -> Union[TCPAddr, UnixAddr, None]:
    """Convert a socket-module address to a TCPAddr or UnixAddr, or None if unsupported."""
    if family == socket.AF_INET:
        return TCPAddr(*_inet4_parts(sockaddr))
    if family == socket.AF_INET6:
        return TCPAddr(*_inet6_parts(sockaddr))
    if family == getattr(socket, "AF_UNIX", object()):
        name = os.fsdecode(sockaddr) if isinstance(sockaddr, bytes) else sockaddr
        return UnixAddr(name, "unix")
    return None


def sockaddr_to_udp_addr(family: int, sockaddr) -> Optional[UDPAddr]:
    """Convert a socket-module address to a UDPAddr, or None if unsupported."""
    if family == socket.AF_INET:
        return UDPAddr(*_inet4_parts(sockaddr))
    if family == socket.AF_INET6:
        return UDPAddr(*_inet6_parts(sockaddr))
    return None


def ip6_zone_to_string(zone: int) -> str:
    """Return the interface name for an IPv6 scope id, its decimal form, or "" for zero."""
    if zone == 0:
        return ""
    indextoname = getattr(socket, "if_indextoname", None)
    if indextoname is not None:
        try:
            return indextoname(zone)
        except OSError:
            pass
    return str(zone)