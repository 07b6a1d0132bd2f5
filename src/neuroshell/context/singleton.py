"""Process-wide NeuroContext accessor.

Only the outermost command-dispatch layer should use these; everything
below it takes a context argument.
"""

from __future__ import annotations

import threading

from neuroshell.context.context import NeuroContext

_global_context: NeuroContext | None = None
_global_lock = threading.Lock()


def get_global_context() -> NeuroContext:
    """Return the global context, creating a default one on first use."""
    global _global_context
    with _global_lock:
        if _global_context is None:
            _global_context = NeuroContext()
        return _global_context


def set_global_context(context: NeuroContext | None) -> None:
    global _global_context
    with _global_lock:
        _global_context = context


def reset_global_context() -> None:
    """Drop the global context; the next ``get_global_context`` builds a new one."""
    set_global_context(None)
