"""Data models for neuroshell."""

from neuroshell.models.model_config import ModelConfig
from neuroshell.models.neuro_config import NeuroConfig, ProviderInfo
from neuroshell.models.session import DEFAULT_SYSTEM_PROMPT, ChatSession, Message

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "ChatSession",
    "Message",
    "ModelConfig",
    "NeuroConfig",
    "ProviderInfo",
]
