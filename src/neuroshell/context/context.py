"""NeuroContext: the shared state behind script execution.

The context owns every table (variables, chat sessions, models, execution
stack, queue, command registry) and exposes narrow subcontexts over them.
Each table carries its own lock and no subcontext calls into another one
while holding its lock.
"""

from __future__ import annotations

import logging
import platform
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from neuroshell.context.capture import ErrorStateSubcontext, OutputCaptureSubcontext
from neuroshell.context.configuration import ConfigurationSubcontext
from neuroshell.context.identity import (
    Clock,
    FixedClock,
    IdGenerator,
    RandomIdGenerator,
    SequentialIdGenerator,
    SystemClock,
)
from neuroshell.context.interpolation import interpolate
from neuroshell.context.lru_cache import VariableLRUCache
from neuroshell.context.model import ModelSubcontext
from neuroshell.context.name_index import NameIndex
from neuroshell.context.registry import CommandInfo, CommandRegistrySubcontext
from neuroshell.context.session import SessionSubcontext
from neuroshell.context.stack import StackSubcontext
from neuroshell.context.variables import VariableSubcontext
from neuroshell.errors import InvalidNameError, NotFoundError, SystemVariableError
from neuroshell.models import ChatSession, ModelConfig, NeuroConfig

log = logging.getLogger(__name__)

SYSTEM_PREFIXES = ("@", "#", "_")

TEST_SYSTEM_VALUES: dict[str, str] = {
    "@os": "test-os/test-arch",
}


@dataclass
class SessionTable:
    """Chat sessions keyed by id, plus the name index and active pointer."""

    sessions: dict[str, ChatSession] = field(default_factory=dict)
    names: NameIndex = field(default_factory=NameIndex)
    active_id: str = ""
    lock: threading.RLock = field(default_factory=threading.RLock)


@dataclass
class ModelTable:
    """Model configs keyed by id, plus the name index and active pointer."""

    models: dict[str, ModelConfig] = field(default_factory=dict)
    names: NameIndex = field(default_factory=NameIndex)
    active_id: str = ""
    lock: threading.RLock = field(default_factory=threading.RLock)


class NeuroContext:
    """Variables, sessions, models and execution state for one shell."""

    def __init__(
        self,
        settings: NeuroConfig | None = None,
        *,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
    ):
        settings = settings or NeuroConfig()
        self._state_lock = threading.Lock()
        self._test_mode = settings.test_mode
        self._clock_override = clock
        self._ids_override = id_generator
        self._test_ids = SequentialIdGenerator()
        self._system_clock = SystemClock()
        self._fixed_clock = FixedClock()
        self._random_ids = RandomIdGenerator()

        self._variables = VariableLRUCache(settings.variable_cache_size)
        self.session_table = SessionTable()
        self.model_table = ModelTable()

        self._queue_lock = threading.Lock()
        self._execution_queue: list[str] = []
        self._metadata_lock = threading.Lock()
        self._script_metadata: dict[str, Any] = {}

        self.configuration = ConfigurationSubcontext(settings, self.is_test_mode)
        self.variables = VariableSubcontext(self)
        self.sessions = SessionSubcontext(self)
        self.models = ModelSubcontext(self)
        self.stack = StackSubcontext()
        self.output = OutputCaptureSubcontext()
        self.error_state = ErrorStateSubcontext()
        self.registry = CommandRegistrySubcontext()

    # Test mode, time and ids

    def is_test_mode(self) -> bool:
        with self._state_lock:
            return self._test_mode

    def set_test_mode(self, enabled: bool) -> None:
        with self._state_lock:
            if enabled and not self._test_mode:
                self._test_ids.reset()
            self._test_mode = enabled
        log.debug("test mode %s", "enabled" if enabled else "disabled")

    @property
    def clock(self) -> Clock:
        if self._clock_override is not None:
            return self._clock_override
        return self._fixed_clock if self.is_test_mode() else self._system_clock

    def now(self) -> datetime:
        return self.clock.now()

    def new_id(self) -> str:
        if self._ids_override is not None:
            return self._ids_override.new_id()
        generator = self._test_ids if self.is_test_mode() else self._random_ids
        return generator.new_id()

    # Variables

    def get_variable(self, name: str) -> str:
        """Return the value of *name*; unknown names resolve to ``""``."""
        computed = self._computed_variable(name)
        if computed is not None:
            return computed
        value = self._variables.get(name)
        return value if value is not None else ""

    def set_variable(self, name: str, value: str) -> None:
        """Set a user variable.

        Raises:
            InvalidNameError: If *name* is empty.
            SystemVariableError: If *name* is an ``@``/``#`` name or a
                non-whitelisted ``_`` name.
        """
        if not name:
            raise InvalidNameError("variable name cannot be empty")
        if name.startswith(("@", "#")):
            raise SystemVariableError(name)
        if name.startswith("_") and not self.configuration.is_allowed_global_variable(name):
            raise SystemVariableError(name)
        self._variables.set(name, value)

    def set_system_variable(self, name: str, value: str) -> None:
        """Set an ``@``, ``#`` or ``_`` variable; for internal callers only."""
        if not name.startswith(SYSTEM_PREFIXES):
            raise InvalidNameError(
                "set_system_variable can only set system variables "
                f"(prefixed with @, #, or _), got: {name}"
            )
        self._variables.set(name, value)

    def get_all_variables(self) -> dict[str, str]:
        """Return stored variables merged with the computed system variables."""
        result = self._variables.get_all()
        for name in self.computed_variable_names():
            value = self._computed_variable(name)
            if value is not None:
                result[name] = value
        return result

    def interpolate_variables(self, text: str) -> str:
        return interpolate(text, self.get_variable)

    @property
    def variable_cache(self) -> VariableLRUCache:
        return self._variables

    @staticmethod
    def computed_variable_names() -> list[str]:
        return [
            "@pwd",
            "@user",
            "@home",
            "@date",
            "@time",
            "@os",
            "#session_id",
            "#session_name",
            "#message_count",
            "#test_mode",
            "#active_model_id",
            "#active_model_name",
        ]

    def _computed_variable(self, name: str) -> str | None:
        if name.startswith("@"):
            return self._system_value(name)
        if name.startswith("#"):
            return self._metadata_value(name)
        # Only ASCII digits select history; "²" and friends are ordinary names.
        if name.isascii() and name.isdigit():
            return self._history_value(int(name), chronological=False)
        if name.startswith(".") and name.isascii() and name[1:].isdigit():
            return self._history_value(int(name[1:]), chronological=True)
        return None

    def _system_value(self, name: str) -> str | None:
        test_mode = self.is_test_mode()
        if name == "@pwd":
            return str(self.configuration.working_dir())
        if name == "@user":
            return self.configuration.user_name()
        if name == "@home":
            return self.configuration.home_dir()
        if name in ("@date", "@time"):
            now = self.now()
            if not test_mode:
                now = now.astimezone()
            return now.strftime("%Y-%m-%d" if name == "@date" else "%H:%M:%S")
        if name == "@os":
            if test_mode:
                return TEST_SYSTEM_VALUES["@os"]
            return f"{sys.platform}/{platform.machine()}"
        return None

    def _metadata_value(self, name: str) -> str | None:
        if name == "#test_mode":
            return "true" if self.is_test_mode() else "false"
        if name in ("#session_id", "#session_name", "#message_count"):
            try:
                session = self.sessions.get_active_session()
            except NotFoundError:
                return "0" if name == "#message_count" else ""
            if name == "#session_id":
                return session.id
            if name == "#session_name":
                return session.name
            return str(len(session.messages))
        if name in ("#active_model_id", "#active_model_name"):
            model_id = self.models.active_model_id()
            if name == "#active_model_id":
                return model_id
            if not model_id:
                return ""
            try:
                return self.models.get_model(model_id).name
            except NotFoundError:
                return ""
        return None

    def _history_value(self, n: int, *, chronological: bool) -> str:
        try:
            if chronological:
                return self.sessions.get_nth_chronological_message(n)
            return self.sessions.get_nth_recent_message(n)
        except (NotFoundError, ValueError) as exc:
            log.debug("message history lookup %d failed: %s", n, exc)
            return ""

    # Environment

    def get_env(self, name: str) -> str:
        return self.configuration.get_env(name)

    def set_env_variable(self, name: str, value: str) -> None:
        self.configuration.set_env_variable(name, value)

    # Execution queue (FIFO)

    def queue_command(self, command: str) -> None:
        with self._queue_lock:
            self._execution_queue.append(command)

    def dequeue_command(self) -> str | None:
        with self._queue_lock:
            if not self._execution_queue:
                return None
            return self._execution_queue.pop(0)

    def peek_queue(self) -> list[str]:
        with self._queue_lock:
            return list(self._execution_queue)

    def queue_size(self) -> int:
        with self._queue_lock:
            return len(self._execution_queue)

    def clear_queue(self) -> None:
        with self._queue_lock:
            self._execution_queue = []

    # Execution stack (LIFO), delegated to the stack subcontext

    def push_command(self, command: str) -> None:
        self.stack.push_command(command)

    def pop_command(self) -> str | None:
        return self.stack.pop_command()

    # Command registry

    def register_command_with_info(self, info: CommandInfo) -> None:
        self.registry.register_command_with_info(info)

    def is_command_registered(self, name: str) -> bool:
        return self.registry.is_command_registered(name)

    # Script metadata

    def set_script_metadata(self, key: str, value: Any) -> None:
        with self._metadata_lock:
            self._script_metadata[key] = value

    def get_script_metadata(self, key: str) -> Any | None:
        with self._metadata_lock:
            return self._script_metadata.get(key)

    def clear_script_metadata(self) -> None:
        with self._metadata_lock:
            self._script_metadata = {}

    # Command lifecycle

    def begin_command(self) -> None:
        """Rotate current output and error state to "last" before a command runs."""
        self.output.reset_output()
        self.error_state.reset_error_state()

    def record_command_result(
        self, status: int | str = 0, error: str = "", output: str | None = None
    ) -> None:
        """Store a finished command's status, error and output in ``_``-variables."""
        status_text = str(status)
        self.error_state.set_error_state(status_text, error)
        self.set_system_variable("_status", status_text)
        self.set_system_variable("_error", error)
        if output is not None:
            self.output.capture_output(output)
            self.set_system_variable("_output", output)
