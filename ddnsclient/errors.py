"""Error codes shared across the client and the exception that carries them."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric result codes reported by the client."""

    OK = 0
    ERROR = 1
    INVALID_POINTER = 2
    OUT_OF_MEMORY = 3
    BUFFER_OVERFLOW = 4
    PIDFILE_EXISTS_ALREADY = 5

    TCP_SOCKET_CREATE_ERROR = 10
    TCP_BAD_PARAMETER = 11
    TCP_INVALID_REMOTE_ADDR = 12
    TCP_CONNECT_FAILED = 13
    TCP_SEND_ERROR = 14
    TCP_RECV_ERROR = 15
    TCP_OBJECT_NOT_INITIALIZED = 16

    HTTP_OBJECT_NOT_INITIALIZED = 22

    HTTPS_NO_TRUSTED_CA_STORE = 31
    HTTPS_OUT_OF_MEMORY = 32
    HTTPS_FAILED_CONNECT = 33
    HTTPS_FAILED_GETTING_CERT = 34
    HTTPS_SEND_ERROR = 36
    HTTPS_RECV_ERROR = 37
    HTTPS_SNI_ERROR = 38
    HTTPS_INVALID_REQUEST = 39

    DDNS_INVALID_CHECKIP_RSP = 42
    DDNS_INVALID_OPTION = 45
    DDNS_RSP_NOHOST = 47
    DDNS_RSP_NOTOK = 48
    DDNS_RSP_RETRY_LATER = 49
    DDNS_RSP_AUTH_FAIL = 50
    DDNS_RSP_TOO_FREQUENT = 51

    OS_INVALID_IP_ADDRESS = 61
    OS_FORK_FAILURE = 62
    OS_CHANGE_PERSONA_FAILURE = 63
    OS_INVALID_UID = 64
    OS_INVALID_GID = 65
    OS_INSTALL_SIGHANDLER_FAILED = 66

    FILE_IO_ACCESS_ERROR = 73
    FILE_IO_MISSING_FILE = 74

    RESTART = 255


class DdnsError(Exception):
    """Raised when an operation fails; carries an :class:`ErrorCode`."""

    def __init__(self, code, message=None):
        try:
            code = ErrorCode(code)
        except ValueError:
            code = int(code)
        self.code = code
        if message is None:
            if isinstance(code, ErrorCode):
                message = code.name.replace("_", " ").lower()
            else:
                message = f"error code {code}"
        self.message = message
        super().__init__(message)