"""PTY shell loop that feeds bash output through the command tracker."""

from __future__ import annotations

import fcntl
import logging
import os
import select
import signal
import struct
import sys
import termios
import tty

from neuroshell.context import NeuroContext, get_global_context
from neuroshell.shell.constants import BOLD, CYAN, READ_SIZE, RESET, SHELL_SESSION_NAME
from neuroshell.shell.hooks import write_bash_rcfile
from neuroshell.shell.osc133 import is_command_complete
from neuroshell.shell.tracker import CommandTracker, ProcessResult

log = logging.getLogger(__name__)


def _winsize(fd: int) -> tuple[int, int, int, int]:
    """Return (rows, cols, xpixel, ypixel) for the given tty fd."""
    return struct.unpack("HHHH", fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\x00" * 8))


def _set_winsize(fd: int, rows: int, cols: int, xp: int = 0, yp: int = 0) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, xp, yp))


def _supports_color() -> bool:
    """Return whether ANSI color output should be used."""
    if os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _shell_status_line() -> bytes:
    """Return a one-line banner shown when the wrapped shell starts."""
    message = "neuroshell active (Ctrl-D to exit)\r\n"
    if _supports_color():
        return f"{BOLD}{CYAN}{message}{RESET}".encode()
    return message.encode()


def record_finished_command(
    context: NeuroContext, tracker: CommandTracker, session_name: str
) -> None:
    """Copy a finished command's exit code, output and duration into *context*.

    Sets ``_status``, ``_error``, ``_output`` and ``_elapsed`` (milliseconds).
    """
    info = tracker.get_session_info(session_name)
    output = "".join(tracker.get_output_buffer(session_name) or [])
    output = output.replace("\r\n", "\n").strip("\n")
    status = info.last_exit_code
    context.begin_command()
    context.record_command_result(
        status=status,
        error="" if status == 0 else f"exit status {status}",
        output=output,
    )
    elapsed = ""
    if info.last_command_duration is not None:
        elapsed = str(int(info.last_command_duration.total_seconds() * 1000))
    context.set_system_variable("_elapsed", elapsed)
    log.debug("command finished with status %d in %s ms", status, elapsed or "?")


def handle_chunk(
    data: bytes,
    context: NeuroContext,
    tracker: CommandTracker,
    session_name: str = SHELL_SESSION_NAME,
) -> ProcessResult:
    """Push one PTY chunk through the tracker, recording completed commands."""
    result = tracker.process_output(session_name, data)
    if any(is_command_complete(seq) for seq in result.sequences):
        record_finished_command(context, tracker, session_name)
    return result


def shell_loop(context: NeuroContext | None = None) -> int:
    """Run bash in a PTY, showing clean output and recording each command."""
    if not sys.stdin.isatty():
        print("Error: stdin must be a terminal", file=sys.stderr)
        return 1
    if not hasattr(os, "fork"):
        print("Error: interactive shell mode requires a POSIX environment", file=sys.stderr)
        return 1

    context = context or get_global_context()
    tracker = CommandTracker()
    tracker.create_session(SHELL_SESSION_NAME)

    rcfile = write_bash_rcfile()
    master_fd, slave_fd = os.openpty()

    # Match the slave PTY size to the real terminal.
    rows, cols, xp, yp = _winsize(sys.stdin.fileno())
    _set_winsize(slave_fd, rows, cols, xp, yp)

    pid = os.fork()
    if pid == 0:
        # Child process: exec bash attached to the slave PTY.
        os.close(master_fd)
        os.setsid()
        fcntl.ioctl(slave_fd, termios.TIOCSCTTY, 0)
        os.dup2(slave_fd, 0)
        os.dup2(slave_fd, 1)
        os.dup2(slave_fd, 2)
        if slave_fd > 2:
            os.close(slave_fd)
        os.execvp("bash", ["bash", "--rcfile", rcfile, "-i"])
        os._exit(1)

    # Parent process: shuttle bytes between real terminal and PTY.
    os.close(slave_fd)

    # Forward window-resize signals to the child.
    def _on_winch(_signum, _frame):
        try:
            r, c, xp, yp = _winsize(sys.stdin.fileno())
            _set_winsize(master_fd, r, c, xp, yp)
            os.kill(pid, signal.SIGWINCH)
        except OSError:
            pass

    signal.signal(signal.SIGWINCH, _on_winch)

    # Put the real terminal into raw mode so keystrokes pass through directly.
    old_attrs = termios.tcgetattr(sys.stdin.fileno())
    tty.setraw(sys.stdin.fileno())

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    os.write(stdout_fd, _shell_status_line())

    try:
        while True:
            try:
                rfds, _, _ = select.select([stdin_fd, master_fd], [], [])
            except (OSError, ValueError):
                break

            # Stdin -> PTY master (user keystrokes)
            if stdin_fd in rfds:
                try:
                    data = os.read(stdin_fd, 1024)
                except OSError:
                    break
                if not data:
                    break
                os.write(master_fd, data)

            # PTY master -> stdout, with markers stripped
            if master_fd in rfds:
                try:
                    data = os.read(master_fd, READ_SIZE)
                except OSError:
                    break
                if not data:
                    break
                result = handle_chunk(data, context, tracker)
                if result.new_output:
                    os.write(stdout_fd, result.new_output.encode())
    finally:
        termios.tcsetattr(sys.stdin.fileno(), termios.TCSAFLUSH, old_attrs)
        try:
            os.unlink(rcfile)
        except OSError:
            pass

    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)
