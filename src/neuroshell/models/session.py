"""Chat session models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class Message(BaseModel):
    """A single message in a chat session."""

    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class ChatSession(BaseModel):
    """A named conversation with its system prompt and message history."""

    id: str
    name: str
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    is_active: bool = False
