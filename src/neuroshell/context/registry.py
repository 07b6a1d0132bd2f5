"""Registry of command names and their help text, filled by the dispatcher."""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CommandInfo:
    name: str
    description: str = ""
    usage: str = ""


class CommandRegistrySubcontext:
    """Known command names for autocomplete and help."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._commands: set[str] = set()
        self._help: dict[str, CommandInfo] = {}

    def register_command(self, name: str) -> None:
        with self._lock:
            self._commands.add(name)

    def register_command_with_info(self, info: CommandInfo) -> None:
        with self._lock:
            self._commands.add(info.name)
            self._help[info.name] = info

    def unregister_command(self, name: str) -> None:
        with self._lock:
            self._commands.discard(name)
            self._help.pop(name, None)

    def is_command_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._commands

    def registered_commands(self) -> list[str]:
        with self._lock:
            return sorted(self._commands)

    def get_command_help_info(self, name: str) -> CommandInfo | None:
        with self._lock:
            return self._help.get(name)

    def all_command_help_info(self) -> dict[str, CommandInfo]:
        with self._lock:
            return dict(self._help)
