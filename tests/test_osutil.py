import os
import signal
import subprocess

import pytest

from ddnsclient.errors import DdnsError, ErrorCode
from ddnsclient.osutil import (
    Command,
    SignalHandler,
    check_perms,
    pid_alive,
    pid_from_file,
    pidfile_path,
    shell_execute,
)

_HANDLED = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM, signal.SIGUSR1,
            signal.SIGUSR2, signal.SIGPIPE)


@pytest.fixture
def restore_signals():
    saved = {signo: signal.getsignal(signo) for signo in _HANDLED}
    yield
    for signo, handler in saved.items():
        signal.signal(signo, handler)


@pytest.fixture
def restore_umask():
    old = os.umask(0o022)
    yield
    os.umask(old)


@pytest.mark.parametrize("signo,command", [
    (signal.SIGHUP, Command.RESTART),
    (signal.SIGINT, Command.STOP),
    (signal.SIGTERM, Command.STOP),
    (signal.SIGUSR1, Command.FORCED_UPDATE),
    (signal.SIGUSR2, Command.CHECK_NOW),
])
def test_handle_maps_signals(signo, command):
    handler = SignalHandler()
    handler.handle(signo, None)
    assert handler.command == command


def test_handle_ignores_other_signals():
    handler = SignalHandler()
    handler.handle(signal.SIGALRM, None)
    assert handler.command == Command.NO_CMD


def test_install_receives_signal(restore_signals):
    handler = SignalHandler()
    handler.install()
    os.kill(os.getpid(), signal.SIGUSR2)
    assert handler.command == Command.CHECK_NOW
    assert signal.getsignal(signal.SIGPIPE) == signal.SIG_IGN


def test_shell_execute_sets_environment(tmp_path):
    out = tmp_path / "out.txt"
    cmd = ('printf "%s|%s|%s|%s|%s" "$INADYN_IP" "$INADYN_HOSTNAME" '
           '"$INADYN_EVENT" "$INADYN_ERROR" "$INADYN_IFACE" > ' + str(out))
    proc = shell_execute(cmd, "192.0.2.1", "host.example.com", "update", 0, "eth0")
    assert proc.wait(10) == 0
    assert out.read_text() == "192.0.2.1|host.example.com|update|0|eth0"


def test_shell_execute_error_message(tmp_path):
    out = tmp_path / "msg.txt"
    proc = shell_execute('printf "%s" "$INADYN_ERROR_MESSAGE" > ' + str(out),
                         "192.0.2.1", "h", "error", int(ErrorCode.DDNS_RSP_NOTOK))
    assert proc.wait(10) == 0
    assert out.read_text() == DdnsError(ErrorCode.DDNS_RSP_NOTOK).message


def test_pid_alive_self():
    assert pid_alive(os.getpid()) is True


def test_pid_alive_reaped_child():
    proc = subprocess.Popen(["/bin/sh", "-c", "exit 0"])
    proc.wait(10)
    assert pid_alive(proc.pid) is False


def test_pid_from_file(tmp_path):
    path = tmp_path / "a.pid"
    path.write_text("1234\n")
    assert pid_from_file(str(path)) == 1234


def test_pid_from_file_leading_space_and_garbage(tmp_path):
    path = tmp_path / "b.pid"
    path.write_text("  42abc\n")
    assert pid_from_file(str(path)) == 42
    path.write_text("abc\n")
    assert pid_from_file(str(path)) == 0


def test_pid_from_missing_file(tmp_path):
    assert pid_from_file(str(tmp_path / "none.pid")) == 0


def test_pidfile_path():
    assert pidfile_path("foo", "/run") == "/run/foo.pid"
    assert pidfile_path("/tmp/x.pid", "/run") == "/tmp/x.pid"
    assert pidfile_path("", "/run") is None


def test_check_perms_creates_directories(tmp_path, restore_umask):
    cache = tmp_path / "cache" / "deep"
    rundir = tmp_path / "run" / "sub"
    path = check_perms(str(cache), "prog", "prog", str(rundir))
    assert path == f"{rundir}/prog.pid"
    assert cache.is_dir()
    assert rundir.is_dir()


def test_check_perms_no_pidfile(tmp_path, restore_umask):
    assert check_perms(str(tmp_path / "c"), "", "prog", str(tmp_path)) is None


def test_check_perms_own_pid_is_fine(tmp_path, restore_umask):
    pidfile = tmp_path / "self.pid"
    pidfile.write_text(f"{os.getpid()}\n")
    assert check_perms(str(tmp_path / "c"), str(pidfile), "prog") == str(pidfile)


def test_check_perms_running_process(tmp_path, restore_umask):
    proc = subprocess.Popen(["/bin/sh", "-c", "sleep 30"])
    try:
        pidfile = tmp_path / "other.pid"
        pidfile.write_text(f"{proc.pid}\n")
        with pytest.raises(DdnsError) as info:
            check_perms(str(tmp_path / "c"), str(pidfile), "prog")
        assert info.value.code == ErrorCode.PIDFILE_EXISTS_ALREADY
    finally:
        proc.kill()
        proc.wait(10)


def test_check_perms_stale_pidfile(tmp_path, restore_umask):
    proc = subprocess.Popen(["/bin/sh", "-c", "exit 0"])
    proc.wait(10)
    pidfile = tmp_path / "stale.pid"
    pidfile.write_text(f"{proc.pid}\n")
    assert check_perms(str(tmp_path / "c"), str(pidfile), "prog") == str(pidfile)