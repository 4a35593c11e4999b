"""RFC 1521 base64 encoding and decoding."""

from __future__ import annotations

import base64
import binascii

_WHITESPACE = b" \t\n\r\f\v"


class Base64Error(ValueError):
    """Raised when input is not valid base64."""


def encode(data):
    """Encode *data* (bytes or str) and return the base64 text."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(bytes(data)).decode("ascii")


def decode(data):
    """Decode base64 *data* (str or bytes), ignoring surrounding whitespace."""
    if isinstance(data, str):
        try:
            data = data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise Base64Error("invalid character in input") from exc
    raw = bytes(data).strip(_WHITESPACE)
    try:
        return base64.b64decode(raw, validate=True)
    except binascii.Error as exc:
        raise Base64Error(f"invalid base64 input: {exc}") from exc