"""Unit tests for neuroshell.models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from neuroshell.models import (
    DEFAULT_SYSTEM_PROMPT,
    ChatSession,
    Message,
    ModelConfig,
    NeuroConfig,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestNeuroConfig:
    """Tests for NeuroConfig model."""

    def test_defaults(self):
        """Test that an empty config uses production defaults."""
        config = NeuroConfig()
        assert config.test_mode is False
        assert config.variable_cache_size == 10000
        assert config.default_command == "echo"

    def test_rejects_non_integer_cache_size(self):
        """Test that a non-numeric cache size raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            NeuroConfig(variable_cache_size="lots")
        assert exc_info.value.errors()[0]["loc"] == ("variable_cache_size",)

    def test_ignores_unknown_keys(self):
        """Test that keys from newer config files do not break loading."""
        config = NeuroConfig.model_validate({"test_mode": True, "future_option": 1})
        assert config.test_mode is True


class TestMessage:
    """Tests for Message model."""

    def test_valid_roles(self):
        for role in ("user", "assistant"):
            assert Message(id="m1", role=role, content="hi", timestamp=NOW).role == role

    def test_invalid_role_raises_validation_error(self):
        """Test that only user and assistant messages are stored."""
        with pytest.raises(ValidationError) as exc_info:
            Message(id="m1", role="system", content="hi", timestamp=NOW)
        assert exc_info.value.errors()[0]["loc"] == ("role",)


class TestChatSession:
    """Tests for ChatSession model."""

    def test_defaults(self):
        session = ChatSession(id="s1", name="work", created_at=NOW, updated_at=NOW)
        assert session.system_prompt == DEFAULT_SYSTEM_PROMPT
        assert session.messages == []
        assert session.is_active is False

    def test_json_round_trip(self):
        """Test that a session survives the on-disk JSON format unchanged."""
        session = ChatSession(
            id="s1",
            name="work",
            messages=[Message(id="m1", role="user", content="hello", timestamp=NOW)],
            created_at=NOW,
            updated_at=NOW,
            is_active=True,
        )
        restored = ChatSession.model_validate_json(session.model_dump_json(indent=2))
        assert restored == session

    def test_missing_name_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            ChatSession(id="s1", created_at=NOW, updated_at=NOW)
        assert exc_info.value.errors()[0]["type"] == "missing"


class TestModelConfig:
    """Tests for ModelConfig model."""

    def test_parameters_default_to_empty(self):
        model = ModelConfig(
            id="x",
            name="fast",
            provider="openai",
            base_model="gpt-4o-mini",
            created_at=NOW,
            updated_at=NOW,
        )
        assert model.parameters == {}
        assert model.catalog_id == ""

    def test_required_fields(self):
        """Test that provider and base_model must be present."""
        with pytest.raises(ValidationError) as exc_info:
            ModelConfig(id="x", name="fast", created_at=NOW, updated_at=NOW)
        locs = {err["loc"] for err in exc_info.value.errors()}
        assert locs == {("provider",), ("base_model",)}
