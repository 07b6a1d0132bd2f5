"""Stack subcontext: the execution stack and try/silent block boundaries."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from neuroshell.errors import BoundaryMismatchError

log = logging.getLogger(__name__)


@dataclass
class TryBlockContext:
    id: str
    start_depth: int
    error_captured: bool = False


@dataclass
class SilentBlockContext:
    id: str
    start_depth: int


class StackSubcontext:
    """LIFO command stack plus nested try and silent block markers.

    A boundary records the stack size at the time it is pushed so the
    interpreter can unwind commands queued inside a failed try block.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stack: list[str] = []
        self._try_blocks: list[TryBlockContext] = []
        self._try_depth = 0
        self._silent_blocks: list[SilentBlockContext] = []
        self._silent_depth = 0

    # Commands

    def push_command(self, command: str) -> None:
        with self._lock:
            self._stack.append(command)

    def push_commands(self, commands: list[str]) -> None:
        """Push *commands* in order; the last one ends up on top."""
        with self._lock:
            self._stack.extend(commands)

    def pop_command(self) -> str | None:
        with self._lock:
            return self._stack.pop() if self._stack else None

    def peek_command(self) -> str | None:
        with self._lock:
            return self._stack[-1] if self._stack else None

    def clear_stack(self) -> None:
        with self._lock:
            self._stack = []

    def stack_size(self) -> int:
        with self._lock:
            return len(self._stack)

    def is_stack_empty(self) -> bool:
        with self._lock:
            return not self._stack

    def peek_stack(self) -> list[str]:
        """Return the stack contents from top to bottom."""
        with self._lock:
            return list(reversed(self._stack))

    # Try blocks

    def push_error_boundary(self, try_id: str) -> None:
        with self._lock:
            self._try_blocks.append(TryBlockContext(try_id, len(self._stack)))
            self._try_depth += 1

    def pop_error_boundary(self, try_id: str | None = None) -> None:
        """Close the innermost try block.

        Raises:
            BoundaryMismatchError: If *try_id* is given and is not the
                innermost open try block.
        """
        with self._lock:
            if not self._try_blocks:
                return
            current = self._try_blocks[-1].id
            if try_id is not None and try_id != current:
                raise BoundaryMismatchError(
                    f"cannot close try block {try_id}: innermost is {current}"
                )
            self._try_blocks.pop()
            self._try_depth -= 1

    def in_try_block(self) -> bool:
        with self._lock:
            return bool(self._try_blocks)

    def current_try_id(self) -> str:
        with self._lock:
            return self._try_blocks[-1].id if self._try_blocks else ""

    def current_try_depth(self) -> int:
        with self._lock:
            return self._try_depth

    def set_try_error_captured(self) -> None:
        with self._lock:
            if self._try_blocks:
                self._try_blocks[-1].error_captured = True

    def is_try_error_captured(self) -> bool:
        with self._lock:
            return bool(self._try_blocks) and self._try_blocks[-1].error_captured

    def discard_try_block_commands(self) -> list[str]:
        """Drop commands pushed since the innermost try block opened.

        Returns the discarded commands in pop order (top first).
        """
        with self._lock:
            if not self._try_blocks:
                return []
            start = self._try_blocks[-1].start_depth
            discarded = self._stack[start:]
            del self._stack[start:]
        if discarded:
            log.debug("discarded %d commands from try block", len(discarded))
        return list(reversed(discarded))

    # Silent blocks

    def push_silent_boundary(self, silent_id: str) -> None:
        with self._lock:
            self._silent_blocks.append(SilentBlockContext(silent_id, len(self._stack)))
            self._silent_depth += 1

    def pop_silent_boundary(self, silent_id: str | None = None) -> None:
        with self._lock:
            if not self._silent_blocks:
                return
            current = self._silent_blocks[-1].id
            if silent_id is not None and silent_id != current:
                raise BoundaryMismatchError(
                    f"cannot close silent block {silent_id}: innermost is {current}"
                )
            self._silent_blocks.pop()
            self._silent_depth -= 1

    def in_silent_block(self) -> bool:
        with self._lock:
            return bool(self._silent_blocks)

    def current_silent_id(self) -> str:
        with self._lock:
            return self._silent_blocks[-1].id if self._silent_blocks else ""

    def current_silent_depth(self) -> int:
        with self._lock:
            return self._silent_depth
