import select
import socket

import pytest

from reactornet.sockets import (
    SocketOption,
    TCPAddr,
    UDPAddr,
    UnixAddr,
    UnsupportedProtocolError,
    ip6_zone_to_string,
    sockaddr_to_tcp_or_unix_addr,
    sockaddr_to_udp_addr,
    tcp_connect,
    tcp_socket,
    udp_socket,
    unix_socket,
)


def _wait_readable(sock, timeout=5.0):
    readable, _, _ = select.select([sock], [], [], timeout)
    return bool(readable)


def test_tcp_socket_listens_and_accepts():
    listener, addr = tcp_socket("tcp4", "127.0.0.1:0")
    try:
        assert addr == TCPAddr("127.0.0.1", 0)
        assert listener.family == socket.AF_INET
        assert listener.getblocking() is False
        port = listener.getsockname()[1]
        with socket.create_connection(("127.0.0.1", port), timeout=5):
            assert _wait_readable(listener) is True
            conn, _ = listener.accept()
            conn.close()
    finally:
        listener.close()


def test_tcp_socket_applies_options_in_order():
    seen = []
    opts = [
        SocketOption(lambda s, v: seen.append(("a", v)), 7),
        SocketOption(lambda s, v: seen.append(("b", v)), 9),
    ]
    listener, _ = tcp_socket("tcp", "127.0.0.1:0", opts)
    listener.close()
    assert seen == [("a", 7), ("b", 9)]


def test_tcp_socket_option_failure_propagates():
    def failing(sock, value):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        tcp_socket("tcp4", "127.0.0.1:0", [SocketOption(failing, 1)])


def test_tcp_mapped_ipv4_literal_uses_ipv4():
    listener, addr = tcp_socket("tcp", "[::ffff:127.0.0.1]:0")
    try:
        assert addr.ip == "127.0.0.1"
        assert listener.family == socket.AF_INET
    finally:
        listener.close()


def test_tcp6_rejects_ipv4_address():
    with pytest.raises(ValueError):
        tcp_socket("tcp6", "127.0.0.1:0")


def test_unknown_network_rejected():
    with pytest.raises(UnsupportedProtocolError):
        tcp_socket("sctp", "127.0.0.1:0")
    with pytest.raises(UnsupportedProtocolError):
        udp_socket("tcp", "127.0.0.1:0")


def test_missing_port_and_bad_port():
    with pytest.raises(ValueError):
        tcp_socket("tcp4", "127.0.0.1")
    with pytest.raises(ValueError):
        tcp_socket("tcp4", "127.0.0.1:70000")
    with pytest.raises(ValueError):
        tcp_socket("tcp4", "a:b:0")


def test_tcp_connect_returns_nonblocking_socket():
    listener, _ = tcp_socket("tcp4", "127.0.0.1:0")
    try:
        port = listener.getsockname()[1]
        client, addr, sockaddr = tcp_connect("tcp4", f"127.0.0.1:{port}")
        try:
            assert client.getblocking() is False
            assert addr == TCPAddr("127.0.0.1", port)
            assert sockaddr == ("127.0.0.1", port)
            assert str(addr) == f"127.0.0.1:{port}"
        finally:
            client.close()
    finally:
        listener.close()


def test_udp_socket_receives_datagram_and_allows_broadcast():
    server, addr = udp_socket("udp4", "127.0.0.1:0")
    try:
        assert addr == UDPAddr("127.0.0.1", 0)
        assert bool(server.getsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST)) is True
        port = server.getsockname()[1]
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as client:
            client.sendto(b"ping", ("127.0.0.1", port))
            assert _wait_readable(server) is True
            data, _ = server.recvfrom(64)
        assert data == b"ping"
    finally:
        server.close()


def test_udp_empty_host_is_unspecified():
    server, addr = udp_socket("udp4", ":0")
    try:
        assert addr.ip is None
        assert str(addr) == ":0"
        assert server.getsockname()[0] == "0.0.0.0"
    finally:
        server.close()


def test_unix_socket_listens(tmp_path):
    path = tmp_path / "s.sock"
    listener, addr = unix_socket("unix", str(path))
    try:
        assert addr == UnixAddr(str(path), "unix")
        assert str(addr) == str(path)
        assert path.exists()
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as client:
            client.connect(str(path))
            assert _wait_readable(listener) is True
            conn, _ = listener.accept()
            conn.close()
    finally:
        listener.close()


def test_unix_socket_rejects_other_networks(tmp_path):
    with pytest.raises(UnsupportedProtocolError):
        unix_socket("unixgram", str(tmp_path / "g.sock"))
    with pytest.raises(UnsupportedProtocolError):
        unix_socket("tcp", str(tmp_path / "t.sock"))


def test_addr_string_forms():
    assert str(TCPAddr(None, 9000)) == ":9000"
    assert str(TCPAddr("fe80::1", 80, "eth0")) == "[fe80::1%eth0]:80"
    assert TCPAddr("10.0.0.1", 80).network == "tcp"
    assert UDPAddr("10.0.0.1", 80).network == "udp"


def test_sockaddr_conversions():
    assert sockaddr_to_tcp_or_unix_addr(socket.AF_INET, ("10.0.0.1", 80)) == TCPAddr("10.0.0.1", 80)
    v6 = sockaddr_to_tcp_or_unix_addr(socket.AF_INET6, ("::1", 80, 0, 0))
    assert v6 == TCPAddr("::1", 80, "")
    assert str(v6) == "[::1]:80"
    assert sockaddr_to_tcp_or_unix_addr(socket.AF_UNIX, b"/tmp/x.sock") == UnixAddr("/tmp/x.sock", "unix")
    assert sockaddr_to_tcp_or_unix_addr(-1, ("10.0.0.1", 80)) is None


def test_sockaddr_to_udp_addr():
    assert sockaddr_to_udp_addr(socket.AF_INET, ("10.0.0.2", 53)) == UDPAddr("10.0.0.2", 53)
    assert sockaddr_to_udp_addr(socket.AF_UNIX, "/tmp/x.sock") is None


def test_ip6_zone_to_string():
    assert ip6_zone_to_string(0) == ""
    assert ip6_zone_to_string(987654) == "987654"