"""Configuration for neuroshell."""

import json
import logging
import os
import secrets
import stat
from pathlib import Path
from typing import Any

from neuroshell.models import NeuroConfig, ProviderInfo

log = logging.getLogger(__name__)

__all__ = [
    "ALLOWED_GLOBAL_VARIABLES",
    "CONFIG_DIR",
    "CONFIG_FILE",
    "PROVIDERS",
    "TEST_CONFIG_DIR",
    "TEST_WORKING_DIR",
    "NeuroConfig",
    "load_config",
    "save_config",
    "sessions_dir",
    "user_config_dir",
]


def _default_config_dir() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "neuroshell"


CONFIG_DIR = _default_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.json"
TEST_CONFIG_DIR = Path("/tmp/neuroshell-test-config")
TEST_WORKING_DIR = Path("/tmp/neuroshell-test-workdir")
BOOLEAN_TRUE_STRINGS = {"1", "true", "yes", "on"}
BOOLEAN_FALSE_STRINGS = {"0", "false", "no", "off"}

PROVIDERS: dict[str, ProviderInfo] = {
    "openai": {"env_key": "OPENAI_API_KEY", "label": "OpenAI"},
    "anthropic": {"env_key": "ANTHROPIC_API_KEY", "label": "Anthropic"},
    "openrouter": {"env_key": "OPENROUTER_API_KEY", "label": "OpenRouter"},
    "moonshot": {"env_key": "MOONSHOT_API_KEY", "label": "Moonshot"},
    "gemini": {"env_key": "GOOGLE_API_KEY", "label": "Gemini"},
}

# Underscore variables that scripts may assign with the regular set path.
ALLOWED_GLOBAL_VARIABLES: tuple[str, ...] = (
    "_style",
    "_reply_way",
    "_echo_command",
    "_render_markdown",
    "_default_command",
    "_stream",
    "_editor",
    "_session_autosave",
    "_completion_mode",
    "_prompt_lines_count",
    "_prompt_line1",
    "_prompt_line2",
    "_prompt_line3",
    "_prompt_line4",
    "_prompt_line5",
)


def user_config_dir(*, test_mode: bool = False) -> Path:
    """Return the directory holding neuroshell's config and saved sessions."""
    return TEST_CONFIG_DIR if test_mode else CONFIG_DIR


def sessions_dir(*, test_mode: bool = False) -> Path:
    """Return the directory where session JSON files are stored."""
    return user_config_dir(test_mode=test_mode) / "sessions"


def load_config() -> NeuroConfig:
    """Load config from file, with env var overrides.

    Reads ``config.json`` from the neuroshell config directory and applies
    environment variable overrides (``NEURO_TEST_MODE``,
    ``NEURO_VARIABLE_CACHE_SIZE`` and ``NEURO_DEFAULT_COMMAND``).  Falls back
    to defaults when the file is absent or contains invalid JSON.

    Returns:
        The resolved ``NeuroConfig`` instance.
    """
    raw_config: dict[str, Any] = {}

    _ensure_config_dir_permissions(create=False)
    _ensure_config_file_permissions()

    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                loaded = json.load(f)
        except json.JSONDecodeError as exc:
            log.warning(
                "invalid config JSON in %s (%s); falling back to defaults",
                CONFIG_FILE,
                exc,
            )
        else:
            if isinstance(loaded, dict):
                raw_config = loaded
            log.debug("loaded config from %s", CONFIG_FILE)

    config = NeuroConfig.model_validate(raw_config)

    # Env var overrides
    if test_mode_raw := os.environ.get("NEURO_TEST_MODE"):
        normalized = test_mode_raw.strip().lower()
        if normalized in BOOLEAN_TRUE_STRINGS:
            config.test_mode = True
        elif normalized in BOOLEAN_FALSE_STRINGS:
            config.test_mode = False
    if cache_size_raw := os.environ.get("NEURO_VARIABLE_CACHE_SIZE"):
        try:
            config.variable_cache_size = int(cache_size_raw)
        except ValueError:
            log.warning("ignoring non-integer NEURO_VARIABLE_CACHE_SIZE=%r", cache_size_raw)
    if default_command := os.environ.get("NEURO_DEFAULT_COMMAND"):
        config.default_command = default_command

    return config


def save_config(config: NeuroConfig) -> None:
    """Save config to file.

    Writes ``config.json`` atomically (temp file + rename) with 0o600
    permissions so the file is only readable by the owner.

    Args:
        config: Configuration to persist.

    Raises:
        OSError: If the config directory or file cannot be created or written.
    """
    _ensure_config_dir_permissions(create=True)
    temp_file = CONFIG_DIR / f".{CONFIG_FILE.name}.{os.getpid()}.{secrets.token_hex(8)}.tmp"
    fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(config.model_dump(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_file, CONFIG_FILE)
    except Exception:
        temp_file.unlink(missing_ok=True)
        raise
    log.debug("saved config to %s", CONFIG_FILE)


def _ensure_config_dir_permissions(*, create: bool) -> None:
    """Ensure the config directory exists and is owner-only."""
    if create:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True, mode=0o700)

    if not CONFIG_DIR.exists():
        return

    current_mode = stat.S_IMODE(CONFIG_DIR.stat().st_mode)
    if current_mode & 0o077:
        CONFIG_DIR.chmod(0o700)
        log.warning(
            "updated config directory permissions for %s from %o to 700",
            CONFIG_DIR,
            current_mode,
        )


def _ensure_config_file_permissions() -> None:
    """Ensure the config file is not readable/writable by group or others."""
    if not CONFIG_FILE.exists():
        return

    current_mode = stat.S_IMODE(CONFIG_FILE.stat().st_mode)
    if current_mode & 0o077:
        CONFIG_FILE.chmod(0o600)
        log.warning(
            "updated config file permissions for %s from %o to 600",
            CONFIG_FILE,
            current_mode,
        )
