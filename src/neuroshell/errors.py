"""Exceptions raised by the neuroshell core."""

from __future__ import annotations


class NotFoundError(LookupError):
    """Raised when a session, model, message or tracked shell session is missing."""


class InvalidNameError(ValueError):
    """Raised when a session, model or variable name fails validation."""


class DuplicateNameError(ValueError):
    """Raised when a name is already bound to another session or model."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} with name '{name}' already exists")
        self.kind = kind
        self.name = name


class UnsupportedProviderError(ValueError):
    """Raised when a model references a provider outside the allow-list."""

    def __init__(self, provider: str):
        super().__init__(f"unsupported provider: {provider}")
        self.provider = provider


class SystemVariableError(ValueError):
    """Raised when the user path tries to write a protected variable."""

    def __init__(self, name: str):
        super().__init__(f"cannot set system variable: {name}")
        self.name = name


class BoundaryMismatchError(RuntimeError):
    """Raised when a try/silent boundary is popped out of nesting order."""


class PersistenceError(OSError):
    """Raised when a session file cannot be read, written or decoded."""
