"""Optional TLS layer over a TCP connection."""

from __future__ import annotations

import ssl
from dataclasses import dataclass, field

from .errors import DdnsError, ErrorCode
from .logger import Priority
from .tcp import ForceFamily

HTTPS_DEFAULT_PORT = 443

_CERT_NOT_YET_VALID = 9


@dataclass
class TlsSettings:
    """Certificate handling for HTTPS connections.

    ``ca_trust_file`` overrides the system trust store, ``secure`` enables
    strict certificate validation and ``broken_rtc`` accepts certificates
    that are not yet valid, for systems without a reliable clock.
    """

    ca_trust_file: str | None = None
    secure: bool = True
    broken_rtc: bool = False
    fallback_ca_files: tuple = field(default=(
        "/etc/ssl/certs/ca-certificates.crt",
        "/etc/pki/tls/certs/ca-bundle.crt",
    ))


def _format_name(rdns):
    return "".join(f"/{key}={value}" for rdn in rdns for key, value in rdn)


class SecureConnection:
    """A TCP connection that speaks TLS when ``ssl_enabled`` is set."""

    def __init__(self, tcp, ssl_enabled=False, settings=None):
        self.tcp = tcp
        self.ssl_enabled = bool(ssl_enabled)
        self.settings = settings if settings is not None else TlsSettings()
        self.connected = False
        self._ssl = None

    @property
    def logger(self):
        return self.tcp.logger

    def _fail(self, code, message):
        self.close()
        raise DdnsError(code, message)

    def _load_ca(self, ctx):
        settings = self.settings
        if settings.ca_trust_file:
            self.logger.log(Priority.DEBUG, "Using CA PEM bundle: %s", settings.ca_trust_file)
            try:
                ctx.load_verify_locations(cafile=settings.ca_trust_file)
            except (OSError, ssl.SSLError) as exc:
                raise DdnsError(ErrorCode.HTTPS_NO_TRUSTED_CA_STORE, str(exc)) from exc
            return
        try:
            ctx.set_default_verify_paths()
            return
        except ssl.SSLError:
            pass
        for cafile in settings.fallback_ca_files:
            try:
                ctx.load_verify_locations(cafile=cafile)
                return
            except (OSError, ssl.SSLError):
                continue
        raise DdnsError(ErrorCode.HTTPS_NO_TRUSTED_CA_STORE, "no trusted CA store found")

    def _make_context(self, verify):
        try:
            ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        except (ssl.SSLError, ValueError) as exc:
            raise DdnsError(ErrorCode.HTTPS_OUT_OF_MEMORY, str(exc)) from exc
        ctx.options |= ssl.OP_NO_COMPRESSION
        if not verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        self._load_ca(ctx)
        return ctx

    def _handshake(self, ctx):
        raw = self.tcp.sock
        if raw is None:
            raise DdnsError(ErrorCode.HTTPS_FAILED_CONNECT, "not connected")
        server_name = self.tcp.remote_host
        try:
            return ctx.wrap_socket(raw, server_hostname=server_name)
        except ssl.SSLCertVerificationError:
            raise
        except (ValueError, UnicodeError) as exc:
            raise DdnsError(ErrorCode.HTTPS_SNI_ERROR, str(exc)) from exc
        except (ssl.SSLError, OSError) as exc:
            self.logger.log(Priority.ERR, "SSL handshake with %s failed: %s", server_name, exc)
            raise DdnsError(ErrorCode.HTTPS_FAILED_CONNECT, str(exc)) from exc

    def _connect_tls(self, msg, force, verify):
        self.tcp.connect(msg, force)
        self.logger.log(Priority.INFO, "%s, initiating HTTPS ...", msg)
        return self._handshake(self._make_context(verify))

    def open(self, msg="", force=ForceFamily.AUTO):
        """Connect, and when TLS is enabled perform the handshake."""
        if not self.ssl_enabled:
            self.tcp.connect(msg, force)
            return

        if self.tcp.port == 0:
            self.tcp.port = HTTPS_DEFAULT_PORT
        verified = self.settings.secure
        try:
            try:
                wrapped = self._connect_tls(msg, force, verified)
            except ssl.SSLCertVerificationError as exc:
                self.logger.log(Priority.ERR, "Certificate verification error:num=%d:%s",
                                exc.verify_code, exc.verify_message)
                if not (self.settings.broken_rtc and exc.verify_code == _CERT_NOT_YET_VALID):
                    raise DdnsError(ErrorCode.HTTPS_FAILED_CONNECT, str(exc)) from exc
                self.close()
                verified = False
                wrapped = self._connect_tls(msg, force, verified)
        except DdnsError:
            self.close()
            raise

        self._ssl = wrapped
        self.connected = True
        cipher = wrapped.cipher()
        self.logger.log(Priority.INFO, "SSL connection using %s", cipher[0] if cipher else "?")

        if not wrapped.getpeercert(binary_form=True):
            self._fail(ErrorCode.HTTPS_FAILED_GETTING_CERT, "no peer certificate")

        if verified:
            self.logger.log(Priority.DEBUG, "Certificate OK")
            info = wrapped.getpeercert() or {}
            self.logger.log(Priority.INFO, "SSL server cert subject: %s",
                            _format_name(info.get("subject", ())))
            self.logger.log(Priority.INFO, "SSL server cert issuer: %s",
                            _format_name(info.get("issuer", ())))

    def close(self):
        """Close the TLS session, if any, and the TCP connection."""
        if self._ssl is not None:
            try:
                self._ssl.close()
            except OSError:
                pass
            self._ssl = None
        self.connected = False
        self.tcp.close()

    def send(self, data):
        """Send all of *data*."""
        if not self.ssl_enabled:
            self.tcp.send(data)
            return
        if isinstance(data, str):
            data = data.encode("latin-1")
        if self._ssl is None:
            raise DdnsError(ErrorCode.HTTPS_SEND_ERROR, "TLS session not open")
        try:
            self._ssl.sendall(data)
        except OSError as exc:
            self.logger.log(Priority.WARNING, "Failed sending HTTPS request: %s", exc)
            raise DdnsError(ErrorCode.HTTPS_SEND_ERROR, str(exc)) from exc
        self.logger.log(Priority.DEBUG, "Successfully sent HTTPS request!")

    def recv(self, max_len):
        """Read up to *max_len* bytes, until the peer ends the session."""
        if not self.ssl_enabled:
            return self.tcp.recv(max_len)
        if self._ssl is None:
            raise DdnsError(ErrorCode.HTTPS_RECV_ERROR, "TLS session not open")
        received = bytearray()
        while len(received) < max_len:
            try:
                data = self._ssl.recv(max_len - len(received))
            except ssl.SSLWantReadError:
                continue
            except (ssl.SSLZeroReturnError, ssl.SSLEOFError):
                break
            except OSError as exc:
                self.logger.log(Priority.WARNING, "Failed receiving HTTPS response: %s", exc)
                raise DdnsError(ErrorCode.HTTPS_RECV_ERROR, str(exc)) from exc
            if not data:
                break
            received += data
        self.logger.log(Priority.DEBUG, "Successfully received HTTPS response (%d/%d bytes)!",
                        len(received), max_len)
        return bytes(received)