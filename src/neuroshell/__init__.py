"""neuroshell - session context and shell-integration core for NeuroShell."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("neuroshell")
except PackageNotFoundError:
    __version__ = "0.0.0"
