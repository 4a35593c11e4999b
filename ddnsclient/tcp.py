"""Blocking TCP client connection with address-family fallback."""

from __future__ import annotations

import socket
from enum import IntEnum, IntFlag

from .errors import DdnsError, ErrorCode
from .logger import Logger, Priority

DEFAULT_TIMEOUT = 5000  # msec
MAX_PORT = 65535
READ_CHUNK_SIZE = 100
HTTP_DEFAULT_PORT = 80

_default_logger = Logger()


class ProxyType(IntEnum):
    """Kind of local proxy a provider may be reached through."""

    NO_PROXY = 0
    SOCKS4 = 1
    SOCKS4A = 2
    SOCKS5 = 3
    SOCKS5_HOSTNAME = 4
    HTTP_CONNECT = 5


class ForceFamily(IntFlag):
    """Address family to force when resolving the remote host."""

    AUTO = 0
    IPV4 = 1
    IPV6 = 2


class TcpSocket:
    """A client TCP connection to ``remote_host:port``.

    The timeout is given in milliseconds and applies to connect, send and
    receive.  Leaving the service number at 0 selects the HTTP default
    when connecting.
    """

    def __init__(self, remote_host=None, port=0, timeout=DEFAULT_TIMEOUT):
        self.remote_host = remote_host
        self._port = 0
        self.port = port
        self.timeout = timeout
        self.proxy_type = ProxyType.NO_PROXY
        self.proxy_host = None
        self.proxy_port = 0
        self.sock = None
        self.logger = _default_logger

    @property
    def port(self):
        """Remote port number, 0 to 65535."""
        return self._port

    @port.setter
    def port(self, value):
        value = int(value)
        if value < 0 or value > MAX_PORT:
            raise DdnsError(ErrorCode.TCP_BAD_PARAMETER, f"invalid port {value}")
        self._port = value

    @property
    def connected(self):
        """True while a connection is open."""
        return self.sock is not None

    def connect(self, msg="", force=ForceFamily.AUTO):
        """Connect to the remote host, trying each resolved address in turn.

        When a forced address family fails, the connection is retried with
        automatic family selection.  Without a remote host nothing is done.
        """
        if self.sock is not None:
            return
        if self.port == 0:
            self.port = HTTP_DEFAULT_PORT
        if not self.remote_host:
            return
        force = ForceFamily(force)
        try:
            self._open(msg, force)
        except DdnsError:
            self.close()
            if force:
                self.connect(msg, ForceFamily.AUTO)
                return
            raise

    def _open(self, msg, force):
        log = self.logger.log
        family = socket.AF_UNSPEC
        if force & ForceFamily.IPV6:
            family = socket.AF_INET6
        if force & ForceFamily.IPV4:
            family = socket.AF_INET

        try:
            infos = socket.getaddrinfo(self.remote_host, str(self.port), family,
                                       socket.SOCK_STREAM, 0, socket.AI_NUMERICSERV)
        except (socket.gaierror, UnicodeError) as exc:
            if not force:
                log(Priority.WARNING, "Failed resolving hostname %s: %s", self.remote_host, exc)
            raise DdnsError(ErrorCode.TCP_INVALID_REMOTE_ADDR,
                            f"cannot resolve {self.remote_host}") from exc
        if not infos:
            raise DdnsError(ErrorCode.TCP_INVALID_REMOTE_ADDR,
                            f"no addresses for {self.remote_host}")

        last_error = None
        for tries, (fam, _type, _proto, _canon, addr) in enumerate(infos):
            remaining = tries + 1 < len(infos)
            try:
                sock = socket.socket(fam, socket.SOCK_STREAM)
            except OSError as exc:
                if not force:
                    log(Priority.ERR, "Error creating client socket: %s", exc)
                raise DdnsError(ErrorCode.TCP_SOCKET_CREATE_ERROR, str(exc)) from exc

            try:
                host = socket.getnameinfo(addr, socket.NI_NUMERICHOST)[0]
            except (socket.gaierror, OSError) as exc:
                sock.close()
                last_error = exc
                continue

            sock.settimeout(self.timeout / 1000 if self.timeout > 0 else None)
            log(Priority.INFO, "%s, %sconnecting to %s([%s]:%d)", msg,
                "re" if tries else "", self.remote_host, host, self.port)
            try:
                sock.connect(addr)
            except OSError as exc:
                sock.close()
                last_error = exc
                if remaining and not force:
                    log(Priority.INFO, "Failed connecting to that server: %s", exc)
                continue

            self.sock = sock
            return

        if not force:
            log(Priority.WARNING, "Failed connecting to %s: %s", self.remote_host, last_error)
        raise DdnsError(ErrorCode.TCP_CONNECT_FAILED,
                        f"cannot connect to {self.remote_host}: {last_error}")

    def close(self):
        """Close the connection, if open."""
        if self.sock is not None:
            try:
                self.sock.close()
            finally:
                self.sock = None

    def send(self, data):
        """Send all of *data*."""
        if self.sock is None:
            raise DdnsError(ErrorCode.TCP_OBJECT_NOT_INITIALIZED)
        if isinstance(data, str):
            data = data.encode("latin-1")
        try:
            self.sock.sendall(data)
        except OSError as exc:
            self.logger.log(Priority.WARNING,
                            "Network error while sending query/update: %s", exc)
            raise DdnsError(ErrorCode.TCP_SEND_ERROR, str(exc)) from exc

    def recv(self, max_len):
        """Read up to *max_len* bytes, until the peer closes the connection.

        Raises DdnsError when the peer closes before sending anything.
        """
        if self.sock is None:
            raise DdnsError(ErrorCode.TCP_OBJECT_NOT_INITIALIZED)
        received = bytearray()
        while len(received) < max_len:
            size = min(READ_CHUNK_SIZE, max_len - len(received))
            try:
                data = self.sock.recv(size)
            except (BlockingIOError, InterruptedError):
                continue
            except OSError as exc:
                self.logger.log(Priority.WARNING,
                                "Network error while waiting for reply: %s", exc)
                raise DdnsError(ErrorCode.TCP_RECV_ERROR, str(exc)) from exc
            if not data:
                if not received:
                    raise DdnsError(ErrorCode.TCP_RECV_ERROR,
                                    "connection closed without a reply")
                break
            received += data
        return bytes(received)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()