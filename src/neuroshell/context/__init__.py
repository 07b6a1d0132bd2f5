"""Shared context: variables, sessions, models and execution state."""

from neuroshell.context.capture import ErrorStateSubcontext, OutputCaptureSubcontext
from neuroshell.context.configuration import ConfigurationSubcontext
from neuroshell.context.context import NeuroContext
from neuroshell.context.interpolation import interpolate
from neuroshell.context.lru_cache import CacheStats, VariableLRUCache
from neuroshell.context.model import ModelSubcontext
from neuroshell.context.registry import CommandInfo, CommandRegistrySubcontext
from neuroshell.context.session import SessionSubcontext
from neuroshell.context.singleton import (
    get_global_context,
    reset_global_context,
    set_global_context,
)
from neuroshell.context.stack import SilentBlockContext, StackSubcontext, TryBlockContext
from neuroshell.context.variables import (
    VariableInfo,
    VariableSubcontext,
    VariableType,
    analyze_variable,
    validate_variable_name,
)

__all__ = [
    "CacheStats",
    "CommandInfo",
    "CommandRegistrySubcontext",
    "ConfigurationSubcontext",
    "ErrorStateSubcontext",
    "ModelSubcontext",
    "NeuroContext",
    "OutputCaptureSubcontext",
    "SessionSubcontext",
    "SilentBlockContext",
    "StackSubcontext",
    "TryBlockContext",
    "VariableInfo",
    "VariableLRUCache",
    "VariableSubcontext",
    "VariableType",
    "analyze_variable",
    "get_global_context",
    "interpolate",
    "reset_global_context",
    "set_global_context",
    "validate_variable_name",
]
