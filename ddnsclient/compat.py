"""Small helpers for numbers, strings and directories."""

from __future__ import annotations

import os
import re
from pathlib import Path

_INT32_MAX = 2**31 - 1
_NUMBER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def atonum(text):
    """Convert *text* to a natural number in 0..2**31-1.

    Raises ValueError when the text is missing, not a whole number, or out
    of range.
    """
    if text is None:
        raise ValueError("no number given")
    match = _NUMBER.fullmatch(text)
    if not match:
        raise ValueError(f"invalid number: {text!r}")
    value = int(match.group(1))
    if value < 0:
        raise ValueError(f"number too small: {text!r}")
    if value > _INT32_MAX:
        raise ValueError(f"number too large: {text!r}")
    return value


def fexist(path):
    """Return True if *path* exists in the file system."""
    if path is None:
        return False
    return os.access(path, os.F_OK)


def string_valid(text):
    """Return True for a non-empty string."""
    return bool(text)


def string_match(a, b):
    """Relaxed, case-insensitive comparison over the shorter length."""
    n = min(len(a), len(b))
    return a[:n].lower() == b[:n].lower()


def string_compare(a, b):
    """Strict comparison."""
    return a == b


def mkpath(path, mode):
    """Create *path* and every missing parent directory with *mode*.

    Does nothing if *path* already exists. Raises ValueError for a missing
    path and OSError when a directory cannot be created.
    """
    if path is None:
        raise ValueError("no path given")
    target = Path(path)
    if target.exists():
        return
    parent = target.parent
    if parent != target:
        try:
            mkpath(parent, mode)
        except OSError:
            pass
    target.mkdir(mode)


def makepath(path):
    """Create every component of *path* with the default mode."""
    mkpath(path, 0o777)