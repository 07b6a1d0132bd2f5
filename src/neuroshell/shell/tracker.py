"""Per-session command tracking on top of StreamParser."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from neuroshell.context.identity import Clock, SystemClock
from neuroshell.errors import NotFoundError
from neuroshell.shell.osc133 import CommandState, get_command_state
from neuroshell.shell.parser import ParseResult, StreamParser

log = logging.getLogger(__name__)

_RUNNING_STATES = (CommandState.COMMAND_START, CommandState.OUTPUT_START)
_COMPLETE_STATES = (CommandState.COMMAND_END, CommandState.PROMPT_START, CommandState.IDLE)


@dataclass
class SessionState:
    session_name: str
    current_state: CommandState = CommandState.IDLE
    last_exit_code: int = 0
    command_started: datetime | None = None
    command_ended: datetime | None = None
    output_buffer: list[str] = field(default_factory=list)
    is_active: bool = True
    parser: StreamParser = field(default_factory=StreamParser)


@dataclass
class ProcessResult(ParseResult):
    session_name: str = ""
    state_changed: bool = False


@dataclass(frozen=True)
class SessionInfo:
    session_name: str
    current_state: CommandState
    last_exit_code: int
    command_started: datetime | None
    command_ended: datetime | None
    last_command_duration: timedelta | None
    is_active: bool
    output_lines: int
    is_running: bool


class CommandTracker:
    """Tracks command boundaries, timing and output for named shell sessions.

    Each session owns its own parser.  One lock guards the session map and
    every session's fields; callers must still feed a given session's
    chunks from a single thread, in order.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionState] = {}

    def _require(self, name: str) -> SessionState:
        state = self._sessions.get(name)
        if state is None:
            raise NotFoundError(f"session {name} not found")
        return state

    def create_session(self, name: str) -> SessionState:
        """Start tracking *name*, replacing any existing session of that name."""
        state = SessionState(session_name=name)
        with self._lock:
            self._sessions[name] = state
        return state

    def get_session(self, name: str) -> SessionState | None:
        with self._lock:
            return self._sessions.get(name)

    def remove_session(self, name: str) -> bool:
        with self._lock:
            return self._sessions.pop(name, None) is not None

    def process_output(self, name: str, data: bytes | str) -> ProcessResult:
        """Parse a chunk of *name*'s output and update its bookkeeping.

        Every marker in the chunk is applied in order, so a chunk carrying
        both the command-start and command-end markers still records the
        start time.  Only text produced while a command runs is added to
        the output buffer; prompts and typed input are not.
        """
        now = self._clock.now()
        with self._lock:
            state = self._require(name)
            result = state.parser.parse_output(data)
            previous = state.current_state
            text = result.new_output

            current = previous
            pos = 0
            for seq, offset in zip(result.sequences, result.offsets):
                if current in _RUNNING_STATES and offset > pos:
                    state.output_buffer.append(text[pos:offset])
                pos = offset
                entered = get_command_state(seq.type)
                if entered is CommandState.COMMAND_START and current is not entered:
                    state.command_started = now
                    state.output_buffer = []
                elif entered is CommandState.COMMAND_END and current is not entered:
                    state.command_ended = now
                    state.last_exit_code = seq.exit_code
                current = entered
            if current in _RUNNING_STATES and pos < len(text):
                state.output_buffer.append(text[pos:])
            state.current_state = result.state

        if previous is not result.state:
            log.debug("session %s: %s -> %s", name, previous, result.state)
        return ProcessResult(
            output=result.output,
            new_output=result.new_output,
            sequences=result.sequences,
            offsets=result.offsets,
            state=result.state,
            is_complete=result.is_complete,
            exit_code=result.exit_code,
            has_new_output=result.has_new_output,
            session_name=name,
            state_changed=previous is not result.state,
        )

    def is_command_running(self, name: str) -> bool:
        with self._lock:
            state = self._sessions.get(name)
            return state is not None and state.current_state in _RUNNING_STATES

    def is_command_complete(self, name: str) -> bool:
        with self._lock:
            state = self._sessions.get(name)
            return state is not None and state.current_state in _COMPLETE_STATES

    def get_last_exit_code(self, name: str) -> int | None:
        with self._lock:
            state = self._sessions.get(name)
            return state.last_exit_code if state is not None else None

    def get_output_buffer(self, name: str) -> list[str] | None:
        with self._lock:
            state = self._sessions.get(name)
            return list(state.output_buffer) if state is not None else None

    def clear_output_buffer(self, name: str) -> None:
        with self._lock:
            self._require(name).output_buffer = []

    def get_session_info(self, name: str) -> SessionInfo:
        with self._lock:
            return _session_info(self._require(name))

    def list_sessions(self) -> list[SessionInfo]:
        with self._lock:
            return [_session_info(self._sessions[name]) for name in sorted(self._sessions)]

    def reset(self, name: str) -> None:
        """Return *name* to Idle, dropping timing, output and parser state."""
        with self._lock:
            state = self._require(name)
            state.current_state = CommandState.IDLE
            state.last_exit_code = 0
            state.command_started = None
            state.command_ended = None
            state.output_buffer = []
            state.parser.reset()


def _session_info(state: SessionState) -> SessionInfo:
    duration = None
    if state.command_started is not None and state.command_ended is not None:
        duration = state.command_ended - state.command_started
    return SessionInfo(
        session_name=state.session_name,
        current_state=state.current_state,
        last_exit_code=state.last_exit_code,
        command_started=state.command_started,
        command_ended=state.command_ended,
        last_command_duration=duration,
        is_active=state.is_active,
        output_lines=len(state.output_buffer),
        is_running=state.current_state in _RUNNING_STATES,
    )
