"""Operating-system helpers: signals, hook scripts and PID/cache checks."""

from __future__ import annotations

import os
import re
import signal
import subprocess
from enum import IntEnum

from .compat import mkpath
from .errors import DdnsError, ErrorCode
from .logger import Logger, Priority

DEFAULT_RUNDIR = "/var/run"

_logger = Logger()
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class Command(IntEnum):
    """Request delivered to the main loop, usually by a signal."""

    NO_CMD = 0
    STOP = 1
    RESTART = 2
    FORCED_UPDATE = 3
    CHECK_NOW = 4


_SIGNAL_COMMANDS = {
    signal.SIGHUP: Command.RESTART,
    signal.SIGINT: Command.STOP,
    signal.SIGTERM: Command.STOP,
    signal.SIGUSR1: Command.FORCED_UPDATE,
    signal.SIGUSR2: Command.CHECK_NOW,
}


class SignalHandler:
    """Turns HUP, INT, TERM, USR1 and USR2 into a pending :class:`Command`."""

    def __init__(self):
        self.command = Command.NO_CMD

    def handle(self, signo, frame=None):
        """Record the command that belongs to *signo*; others are ignored."""
        command = _SIGNAL_COMMANDS.get(signo)
        if command is not None:
            self.command = command

    def install(self, watch_children=False):
        """Install this handler and ignore SIGPIPE.

        With *watch_children* SIGCHLD is ignored too, so finished hook
        scripts are reaped automatically.
        """
        try:
            for signo in _SIGNAL_COMMANDS:
                signal.signal(signo, self.handle)
            signal.signal(signal.SIGPIPE, signal.SIG_IGN)
        except (OSError, ValueError) as exc:
            _logger.log(Priority.WARNING, "Failed installing signal handler: %s", exc)
            raise DdnsError(ErrorCode.OS_INSTALL_SIGHANDLER_FAILED, str(exc)) from exc

        if watch_children:
            try:
                signal.signal(signal.SIGCHLD, signal.SIG_IGN)
            except (OSError, ValueError) as exc:
                _logger.log(Priority.WARNING, "Failed installing signal handler: %s", exc)


def shell_execute(cmd, ip, hostname, event, error=0, iface=None):
    """Start *cmd* with /bin/sh, passing update details in the environment.

    Returns the started process without waiting for it.
    """
    env = dict(os.environ)
    env["INADYN_IP"] = str(ip)
    env["INADYN_HOSTNAME"] = str(hostname)
    env["INADYN_EVENT"] = str(event)
    env["INADYN_ERROR"] = str(int(error))
    env["INADYN_ERROR_MESSAGE"] = DdnsError(error).message
    if iface:
        env["INADYN_IFACE"] = str(iface)
    try:
        return subprocess.Popen(["/bin/sh", "-c", cmd], env=env)
    except OSError as exc:
        raise DdnsError(ErrorCode.OS_FORK_FAILURE, str(exc)) from exc


def pid_alive(pid):
    """Return True unless no process with *pid* exists."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def pid_from_file(path):
    """Return the PID stored at the start of *path*, or 0."""
    try:
        with open(path, encoding="latin-1") as fh:
            line = fh.readline(19)
    except OSError:
        return 0
    match = _LEADING_INT.match(line)
    return int(match.group(1)) if match else 0


def pidfile_path(name, rundir=DEFAULT_RUNDIR):
    """Return the PID file path for *name*, or None when *name* is empty."""
    if not name:
        return None
    if name.startswith("/"):
        return name
    return f"{rundir}/{name}.pid"


def check_perms(cache_dir, pidfile_name, prognm, rundir=DEFAULT_RUNDIR):
    """Prepare the cache and PID file directories.

    Only warns when the cache directory is not writable.  Raises DdnsError
    when the PID file belongs to another running process.  Returns the PID
    file path, or None without one.
    """
    os.umask(0o022)

    try:
        mkpath(cache_dir, 0o755)
        writable = os.access(cache_dir, os.W_OK)
        reason = "permission denied"
    except FileExistsError:
        writable = os.access(cache_dir, os.W_OK)
        reason = "permission denied"
    except (OSError, ValueError) as exc:
        writable = False
        reason = str(exc)
    if not writable:
        _logger.log(Priority.WARNING, "No write permission to %s: %s", cache_dir, reason)
        _logger.log(Priority.WARNING,
                    "Cannot guarantee DDNS server won't lock you out for excessive updates.")

    path = pidfile_path(pidfile_name, rundir)
    if path is None:
        return None

    if os.path.exists(path):
        pid = pid_from_file(path)
        if pid > 0 and pid != os.getpid() and pid_alive(pid):
            _logger.log(Priority.ERR, "PID file %s already exists, %s already running?",
                        path, prognm)
            raise DdnsError(ErrorCode.PIDFILE_EXISTS_ALREADY,
                            f"PID file {path} already exists")

    pid_dir = os.path.dirname(path) or "."
    if not os.path.exists(pid_dir):
        try:
            mkpath(pid_dir, 0o755)
        except FileExistsError:
            pass
        except OSError:
            _logger.log(Priority.ERR, "No write permission to %s, aborting.", pid_dir)

    return path