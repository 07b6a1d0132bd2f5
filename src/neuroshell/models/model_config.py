"""Model configuration records."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """A named provider/base-model pairing with its call parameters."""

    id: str
    name: str = Field(description="Unique user-facing name; no whitespace.")
    provider: str = Field(description="Provider key, e.g. 'openai' or 'anthropic'.")
    base_model: str = Field(description="Provider model identifier, e.g. 'gpt-4'.")
    parameters: dict[str, Any] = Field(default_factory=dict)
    description: str = ""
    catalog_id: str = ""
    created_at: datetime
    updated_at: datetime
