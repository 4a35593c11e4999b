"""Logging to syslog or a stream, filtered by priority."""

from __future__ import annotations

import re
import sys
from enum import IntEnum

try:
    import syslog
except ImportError:  # pragma: no cover - non-POSIX platforms
    syslog = None


class Priority(IntEnum):
    """Syslog priorities."""

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


NOPRI = 0x10

_PRIORITY_NAMES = (
    ("alert", Priority.ALERT),
    ("crit", Priority.CRIT),
    ("debug", Priority.DEBUG),
    ("emerg", Priority.EMERG),
    ("err", Priority.ERR),
    ("error", Priority.ERR),
    ("info", Priority.INFO),
    ("none", NOPRI),
    ("notice", Priority.NOTICE),
    ("panic", Priority.EMERG),
    ("warn", Priority.WARNING),
    ("warning", Priority.WARNING),
)

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def _prefix_match(a, b):
    n = min(len(a), len(b))
    return a[:n].lower() == b[:n].lower()


def _atoi(text):
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class Logger:
    """Writes messages to syslog once opened, otherwise to a stream."""

    def __init__(self, stream=None):
        self._stream = stream
        self.level = int(Priority.NOTICE)
        self._enabled = False

    @property
    def enabled(self):
        """True while syslog output is active."""
        return self._enabled

    def open(self, ident, use_syslog, background):
        """Start logging to syslog under *ident*."""
        if syslog is None:
            raise OSError("syslog is not available on this platform")
        opts = syslog.LOG_PID | syslog.LOG_NDELAY
        if not background and not use_syslog:
            opts |= getattr(syslog, "LOG_PERROR", 0)
        syslog.openlog(ident, opts, syslog.LOG_USER)
        syslog.setlogmask(syslog.LOG_UPTO(self.level))
        self._enabled = True

    def close(self):
        """Stop logging to syslog."""
        if self._enabled:
            syslog.closelog()
            self._enabled = False

    def set_level(self, name):
        """Set the level by name, name prefix or number.

        Raises ValueError for the number -1.
        """
        for label, value in _PRIORITY_NAMES:
            if _prefix_match(label, name):
                self.level = int(value)
                return
        value = _atoi(name)
        if value == -1:
            raise ValueError(f"invalid log level: {name!r}")
        self.level = value

    def log(self, prio, fmt, *args):
        """Log a printf-style message at priority *prio*."""
        message = fmt % args if args else fmt
        if self._enabled and self.level != NOPRI:
            syslog.syslog(int(prio), message)
        elif prio <= self.level:
            stream = self._stream if self._stream is not None else sys.stderr
            stream.write(message + "\n")