"""Output and error-state capture for the current and previous command."""

from __future__ import annotations

import threading


class OutputCaptureSubcontext:
    """Holds the output of the running command and of the one before it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = ""
        self._last = ""

    def reset_output(self) -> None:
        """Move current output to last; call before each command runs."""
        with self._lock:
            self._last = self._current
            self._current = ""

    def capture_output(self, output: str) -> None:
        with self._lock:
            self._current = output

    def current_output(self) -> str:
        with self._lock:
            return self._current

    def last_output(self) -> str:
        with self._lock:
            return self._last


class ErrorStateSubcontext:
    """Exit status and error message of the running and previous command.

    Status is a string; ``"0"`` means success.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: tuple[str, str] = ("0", "")
        self._last: tuple[str, str] = ("0", "")

    def reset_error_state(self) -> None:
        with self._lock:
            self._last = self._current
            self._current = ("0", "")

    def set_error_state(self, status: str, error: str) -> None:
        with self._lock:
            self._current = (status, error)

    def current_error_state(self) -> tuple[str, str]:
        with self._lock:
            return self._current

    def last_error_state(self) -> tuple[str, str]:
        with self._lock:
            return self._last
