"""Configuration subcontext: config values, environment access and paths."""

from __future__ import annotations

import getpass
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from neuroshell import config as config_module
from neuroshell.models import NeuroConfig

log = logging.getLogger(__name__)

# Values returned by get_env in test mode when no override is set.
TEST_ENV_DEFAULTS: dict[str, str] = {
    "OPENAI_API_KEY": "test-openai-key",
    "ANTHROPIC_API_KEY": "test-anthropic-key",
    "GOOGLE_API_KEY": "test-google-key",
    "EDITOR": "test-editor",
    "USER": "testuser",
    "HOME": "/home/testuser",
}


class ConfigurationSubcontext:
    """Config map, allowed globals, env lookups and directories.

    Environment reads and writes are redirected to an in-memory override
    table while the owning context is in test mode, so tests never see or
    mutate the real process environment.
    """

    def __init__(self, settings: NeuroConfig, is_test_mode: Callable[[], bool]):
        self._is_test_mode = is_test_mode
        self._lock = threading.Lock()
        self._config_map: dict[str, str] = {}
        self._test_env_overrides: dict[str, str] = {}
        self._test_working_dir: Path | None = None
        self._config_dir_override: Path | None = None
        self._default_command = settings.default_command
        self._allowed_globals = tuple(config_module.ALLOWED_GLOBAL_VARIABLES)

    # Config map

    def get_config_value(self, key: str) -> str | None:
        with self._lock:
            return self._config_map.get(key)

    def set_config_value(self, key: str, value: str) -> None:
        with self._lock:
            self._config_map[key] = value

    def config_map(self) -> dict[str, str]:
        with self._lock:
            return dict(self._config_map)

    # Allowed globals / default command

    def is_allowed_global_variable(self, name: str) -> bool:
        return name in self._allowed_globals

    def allowed_global_variables(self) -> list[str]:
        return list(self._allowed_globals)

    @property
    def default_command(self) -> str:
        with self._lock:
            return self._default_command

    @default_command.setter
    def default_command(self, command: str) -> None:
        with self._lock:
            self._default_command = command

    # Environment

    def get_env(self, key: str) -> str:
        """Return an environment value, canned or overridden in test mode."""
        if not self._is_test_mode():
            return os.environ.get(key, "")
        with self._lock:
            if key in self._test_env_overrides:
                return self._test_env_overrides[key]
        return TEST_ENV_DEFAULTS.get(key, "")

    def set_env_variable(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("environment variable name cannot be empty")
        if self._is_test_mode():
            self.set_test_env_override(key, value)
            return
        os.environ[key] = value
        log.debug("set environment variable %s", key)

    def set_test_env_override(self, key: str, value: str) -> None:
        with self._lock:
            self._test_env_overrides[key] = value

    def clear_test_env_override(self, key: str) -> None:
        with self._lock:
            self._test_env_overrides.pop(key, None)

    def test_env_overrides(self) -> dict[str, str]:
        with self._lock:
            return dict(self._test_env_overrides)

    # Paths and identity

    def set_config_dir(self, path: Path | str | None) -> None:
        """Pin the config directory, e.g. to a temp dir; ``None`` restores the default."""
        with self._lock:
            self._config_dir_override = Path(path) if path is not None else None

    def user_config_dir(self) -> Path:
        with self._lock:
            override = self._config_dir_override
        if override is not None:
            return override
        return config_module.user_config_dir(test_mode=self._is_test_mode())

    def sessions_dir(self) -> Path:
        return self.user_config_dir() / "sessions"

    def set_test_working_dir(self, path: Path | str | None) -> None:
        with self._lock:
            self._test_working_dir = Path(path) if path is not None else None

    def working_dir(self) -> Path:
        if self._is_test_mode():
            with self._lock:
                return self._test_working_dir or config_module.TEST_WORKING_DIR
        return Path.cwd()

    def home_dir(self) -> str:
        if self._is_test_mode():
            return self.get_env("HOME")
        return str(Path.home())

    def user_name(self) -> str:
        if self._is_test_mode():
            return self.get_env("USER")
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return os.environ.get("USER", "")

    # Providers

    def supported_providers(self) -> list[str]:
        return list(config_module.PROVIDERS)

    def is_valid_provider(self, provider: str) -> bool:
        return provider in config_module.PROVIDERS
