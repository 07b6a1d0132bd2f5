"""Configuration model for neuroshell."""

from typing import TypedDict

from pydantic import BaseModel, Field

DEFAULT_VARIABLE_CACHE_SIZE = 10000
DEFAULT_COMMAND = "echo"


class ProviderInfo(TypedDict):
    """Metadata for a supported model provider."""

    env_key: str
    label: str


class NeuroConfig(BaseModel):
    """Runtime configuration for neuroshell."""

    test_mode: bool = Field(
        default=False,
        description=(
            "When True, system variables, ids and timestamps return fixed values so "
            "interpolated output is reproducible. Overridden by NEURO_TEST_MODE."
        ),
    )
    variable_cache_size: int = Field(
        default=DEFAULT_VARIABLE_CACHE_SIZE,
        description=(
            "Maximum number of unpinned variables kept before least-recently-used "
            "eviction. Non-positive values fall back to the default."
        ),
    )
    default_command: str = Field(
        default=DEFAULT_COMMAND,
        description="Command used for input lines that do not start with a backslash.",
    )
