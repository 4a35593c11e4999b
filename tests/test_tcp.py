import socket
import threading
from contextlib import contextmanager
from unittest import mock

import pytest

from ddnsclient.errors import DdnsError, ErrorCode
from ddnsclient.tcp import (
    DEFAULT_TIMEOUT,
    HTTP_DEFAULT_PORT,
    ForceFamily,
    TcpSocket,
)


@contextmanager
def serve_once(handler):
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    srv.settimeout(5)

    def run():
        try:
            conn, _ = srv.accept()
        except OSError:
            return
        with conn:
            handler(conn)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    try:
        yield srv.getsockname()[1]
    finally:
        thread.join(5)
        srv.close()


def echo_upper(conn):
    data = conn.recv(1024)
    conn.sendall(data.upper())


def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_defaults():
    tcp = TcpSocket("127.0.0.1")
    assert tcp.port == 0
    assert tcp.timeout == DEFAULT_TIMEOUT == 5000
    assert tcp.connected is False


@pytest.mark.parametrize("port", [-1, 65536, 70000])
def test_bad_port_rejected(port):
    with pytest.raises(DdnsError) as info:
        TcpSocket("127.0.0.1", port)
    assert info.value.code == ErrorCode.TCP_BAD_PARAMETER


def test_max_port_accepted():
    tcp = TcpSocket("127.0.0.1", 65535)
    assert tcp.port == 65535


def test_bad_port_assignment_keeps_old_value():
    tcp = TcpSocket("127.0.0.1", 8080)
    with pytest.raises(DdnsError):
        tcp.port = 99999
    assert tcp.port == 8080


def test_send_without_connect():
    with pytest.raises(DdnsError) as info:
        TcpSocket("127.0.0.1", 1).send(b"x")
    assert info.value.code == ErrorCode.TCP_OBJECT_NOT_INITIALIZED


def test_recv_without_connect():
    with pytest.raises(DdnsError) as info:
        TcpSocket("127.0.0.1", 1).recv(10)
    assert info.value.code == ErrorCode.TCP_OBJECT_NOT_INITIALIZED


def test_no_remote_host_sets_default_port_only():
    tcp = TcpSocket()
    tcp.connect("test")
    assert tcp.connected is False
    assert tcp.port == HTTP_DEFAULT_PORT == 80


def test_echo_round_trip():
    with serve_once(echo_upper) as port:
        with TcpSocket("127.0.0.1", port) as tcp:
            tcp.connect("test")
            assert tcp.connected
            tcp.send(b"hello")
            assert tcp.recv(8192) == b"HELLO"
        assert tcp.connected is False


def test_recv_reads_until_close():
    payload = bytes(range(250))

    def handler(conn):
        conn.sendall(payload)

    with serve_once(handler) as port:
        tcp = TcpSocket("127.0.0.1", port)
        tcp.connect()
        assert tcp.recv(1000) == payload
        tcp.close()


def test_recv_stops_at_max_len():
    payload = b"a" * 300

    def handler(conn):
        conn.sendall(payload)

    with serve_once(handler) as port:
        tcp = TcpSocket("127.0.0.1", port)
        tcp.connect()
        data = tcp.recv(120)
        tcp.close()
    assert data == payload[:120]


def test_recv_of_empty_reply_is_error():
    def handler(conn):
        pass

    with serve_once(handler) as port:
        tcp = TcpSocket("127.0.0.1", port)
        tcp.connect()
        with pytest.raises(DdnsError) as info:
            tcp.recv(100)
        tcp.close()
    assert info.value.code == ErrorCode.TCP_RECV_ERROR


def test_connect_twice_keeps_connection():
    with serve_once(echo_upper) as port:
        tcp = TcpSocket("127.0.0.1", port)
        tcp.connect()
        first = tcp.sock
        tcp.connect()
        assert tcp.sock is first
        tcp.send(b"abc")
        assert tcp.recv(100) == b"ABC"
        tcp.close()


@pytest.mark.parametrize("force", [ForceFamily.AUTO, ForceFamily.IPV4])
def test_refused_connection(force):
    tcp = TcpSocket("127.0.0.1", closed_port(), 2000)
    with pytest.raises(DdnsError) as info:
        tcp.connect("test", force)
    assert info.value.code == ErrorCode.TCP_CONNECT_FAILED
    assert tcp.connected is False


def test_forced_family_falls_back_to_auto():
    with serve_once(echo_upper) as port:
        tcp = TcpSocket("127.0.0.1", port)
        tcp.connect("test", ForceFamily.IPV6)
        assert tcp.connected
        tcp.send(b"fallback")
        assert tcp.recv(100) == b"FALLBACK"
        tcp.close()


def test_unresolvable_host():
    err = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    with mock.patch("socket.getaddrinfo", side_effect=err):
        tcp = TcpSocket("example.com")
        with pytest.raises(DdnsError) as info:
            tcp.connect("test")
    assert info.value.code == ErrorCode.TCP_INVALID_REMOTE_ADDR
    assert tcp.connected is False
    assert tcp.port == HTTP_DEFAULT_PORT