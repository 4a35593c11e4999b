"""HTTP/1.x client transactions over plain TCP or TLS."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import DdnsError, ErrorCode
from .tcp import ForceFamily, TcpSocket
from .tlsconn import SecureConnection

HTTP_DEFAULT_TIMEOUT = 10000  # msec
HTTP_DEFAULT_PORT = 80
HTTPS_DEFAULT_PORT = 443
RESPONSE_BUFFER_SIZE = 8192

_SCAN_SPACE = " \t\n\v\f\r"
_STATUS_CODE = re.compile(r"[+-]\d{1,3}|\d{1,4}")
_STATUS_PREFIX = "HTTP/1."
_HEADER_END = "\r\n\r\n"
_MAX_STATUS_DESC = 255


@dataclass
class HttpResponse:
    """A received response: the raw text, status line parts and body."""

    raw: str
    status: int = 0
    status_desc: str = ""
    body: str = ""


def _skip_space(text, pos):
    while pos < len(text) and text[pos] in _SCAN_SPACE:
        pos += 1
    return pos


def _scan_status_line(text):
    """Return (status, description) from the status line, or None."""
    start = len(_STATUS_PREFIX)
    if not text.startswith(_STATUS_PREFIX) or len(text) <= start:
        return None
    pos = _skip_space(text, start + 1)
    match = _STATUS_CODE.match(text, pos)
    if not match:
        return None
    pos = _skip_space(text, match.end())
    end = pos
    limit = min(len(text), pos + _MAX_STATUS_DESC)
    while end < limit and text[end] not in "\r\n":
        end += 1
    if end == pos:
        return None
    return int(match.group()), text[pos:end]


def parse_response(raw):
    """Split a raw response into status code, status text and body.

    Without a blank line after the headers the body is the whole response.
    A status line that cannot be read leaves the status at 0.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("latin-1")
    text = raw.split("\0", 1)[0]
    response = HttpResponse(raw=raw, body=text)

    index = text.find(_HEADER_END)
    if index >= 0:
        response.body = text[index + len(_HEADER_END):]

    scanned = _scan_status_line(text)
    if scanned is not None:
        response.status, response.status_desc = scanned
    return response


def check_status(status):
    """Return *status* if it is 200, otherwise raise a DdnsError.

    401 and 403 mean an authentication failure, 5xx means retry later and
    anything else is a plain failure.
    """
    if status == 200:
        return status
    if status in (401, 403):
        raise DdnsError(ErrorCode.DDNS_RSP_AUTH_FAIL, f"HTTP status {status}")
    if 500 <= status < 600:
        raise DdnsError(ErrorCode.DDNS_RSP_RETRY_LATER, f"HTTP status {status}")
    raise DdnsError(ErrorCode.DDNS_RSP_NOTOK, f"HTTP status {status}")


class HttpClient:
    """A connection to one HTTP or HTTPS server carrying request/response pairs."""

    def __init__(self, remote_host=None, port=0, ssl_enabled=False, timeout=None,
                 settings=None):
        if timeout is None:
            self.tcp = TcpSocket(remote_host, port)
        else:
            self.tcp = TcpSocket(remote_host, port, timeout)
        self.connection = SecureConnection(self.tcp, ssl_enabled, settings)
        self.initialized = False

    @property
    def remote_host(self):
        """Name of the server."""
        return self.tcp.remote_host

    @remote_host.setter
    def remote_host(self, value):
        self.tcp.remote_host = value

    @property
    def port(self):
        """Server port; 0 picks the default for the protocol on open."""
        return self.tcp.port

    @port.setter
    def port(self, value):
        self.tcp.port = value

    @property
    def timeout(self):
        """Network timeout in milliseconds."""
        return self.tcp.timeout

    @timeout.setter
    def timeout(self, value):
        self.tcp.timeout = value

    @property
    def ssl_enabled(self):
        """True when the connection uses TLS."""
        return self.connection.ssl_enabled

    def open(self, msg="", force=ForceFamily.AUTO):
        """Connect to the server; a timeout of 0 is replaced by the default."""
        if self.tcp.timeout == 0:
            self.tcp.timeout = HTTP_DEFAULT_TIMEOUT
        try:
            self.connection.open(msg, force)
        except DdnsError:
            self.initialized = True
            self.close()
            raise
        self.initialized = True

    def close(self):
        """Close the connection, if open."""
        if not self.initialized:
            return
        self.initialized = False
        self.connection.close()

    def transaction(self, request, max_len=RESPONSE_BUFFER_SIZE):
        """Send *request* and read up to *max_len* bytes of response."""
        if not self.initialized:
            raise DdnsError(ErrorCode.HTTP_OBJECT_NOT_INITIALIZED)
        self.connection.send(request)
        raw = self.connection.recv(max_len)
        return parse_response(raw)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()