"""Variable subcontext, name analysis and script parameter variables."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from neuroshell.config import ALLOWED_GLOBAL_VARIABLES
from neuroshell.errors import InvalidNameError

if TYPE_CHECKING:
    from neuroshell.context.context import NeuroContext

log = logging.getLogger(__name__)

SCRIPT_PARAMETER_NAMES = ("_0", "_1", "_*", "_@")


class VariableType(enum.Enum):
    USER = "user"
    SYSTEM = "system"
    COMMAND = "command"
    METADATA = "metadata"


@dataclass(frozen=True)
class VariableInfo:
    name: str
    type: VariableType
    is_system: bool
    is_read_only: bool
    description: str


def is_system_variable(name: str) -> bool:
    return name.startswith(("@", "#", "_"))


def validate_variable_name(name: str) -> None:
    """Raise ``InvalidNameError`` unless *name* can be set from a script."""
    if not name:
        raise InvalidNameError("variable name cannot be empty")
    if any(c.isspace() for c in name):
        raise InvalidNameError("variable name cannot contain whitespace")
    if name.startswith(("@", "#")):
        raise InvalidNameError("variable name cannot start with system prefixes @ or #")
    if name.startswith("_") and name not in ALLOWED_GLOBAL_VARIABLES:
        raise InvalidNameError("variable name cannot start with _ unless whitelisted")


def analyze_variable(name: str) -> VariableInfo:
    """Classify *name* by its prefix."""
    if name.startswith("@"):
        return VariableInfo(
            name, VariableType.SYSTEM, True, True, "System variable (e.g., @pwd, @user, @date)"
        )
    if name.startswith("#"):
        return VariableInfo(
            name,
            VariableType.METADATA,
            True,
            True,
            "Metadata variable (e.g., #session_id, #message_count)",
        )
    if name.startswith("_"):
        return VariableInfo(
            name,
            VariableType.COMMAND,
            True,
            name not in ALLOWED_GLOBAL_VARIABLES,
            "Command output or configuration variable",
        )
    return VariableInfo(name, VariableType.USER, False, False, "User-defined variable")


class VariableSubcontext:
    """Variable access for services that need nothing else from the context."""

    def __init__(self, context: NeuroContext):
        self._ctx = context

    def get_variable(self, name: str) -> str:
        return self._ctx.get_variable(name)

    def set_variable(self, name: str, value: str) -> None:
        self._ctx.set_variable(name, value)

    def set_system_variable(self, name: str, value: str) -> None:
        self._ctx.set_system_variable(name, value)

    def get_all_variables(self) -> dict[str, str]:
        return self._ctx.get_all_variables()

    def interpolate_variables(self, text: str) -> str:
        return self._ctx.interpolate_variables(text)

    def get_env(self, name: str) -> str:
        return self._ctx.get_env(name)

    def set_env_variable(self, name: str, value: str) -> None:
        self._ctx.set_env_variable(name, value)

    def setup_script_parameters(
        self, command_name: str, body: str, named_args: dict[str, str] | None = None
    ) -> None:
        """Expose a script command's arguments as variables.

        Sets ``_0`` to the command name, ``_1`` and ``_*`` to the message
        body, each named argument under its own name, and ``_@`` to the
        space-joined ``key=value`` pairs.
        """
        named_args = named_args or {}
        self._ctx.set_system_variable("_0", command_name)
        self._ctx.set_system_variable("_1", body)
        self._ctx.set_system_variable("_*", body)
        for key, value in named_args.items():
            if is_system_variable(key):
                self._ctx.set_system_variable(key, value)
            else:
                self._ctx.set_variable(key, value)
        self._ctx.set_system_variable(
            "_@", " ".join(f"{key}={value}" for key, value in named_args.items())
        )
        log.debug("script parameters set for %s (%d named)", command_name, len(named_args))

    def cleanup_script_parameters(self) -> None:
        """Blank the positional parameters; named arguments are left in place."""
        for name in SCRIPT_PARAMETER_NAMES:
            self._ctx.set_system_variable(name, "")
