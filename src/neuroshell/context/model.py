"""Model subcontext: named model configurations and the active model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from neuroshell.errors import (
    DuplicateNameError,
    InvalidNameError,
    NotFoundError,
    UnsupportedProviderError,
)
from neuroshell.models import ModelConfig

if TYPE_CHECKING:
    from neuroshell.context.context import NeuroContext

log = logging.getLogger(__name__)

MAX_MODEL_NAME_LENGTH = 100
DEFAULT_MODEL_ID = "default-gpt-4"
DEFAULT_MODEL_PARAMETERS: dict[str, Any] = {"temperature": 0.7, "max_tokens": 1000}


def validate_model_name(name: str) -> None:
    """Raise ``InvalidNameError`` if *name* cannot name a model."""
    if not name:
        raise InvalidNameError("model name cannot be empty")
    if " " in name:
        raise InvalidNameError("model name cannot contain spaces")
    if len(name) > MAX_MODEL_NAME_LENGTH:
        raise InvalidNameError(
            f"model name cannot exceed {MAX_MODEL_NAME_LENGTH} characters"
        )
    if any(c in name for c in "\n\r\t"):
        raise InvalidNameError("model name cannot contain newlines or tabs")


class ModelSubcontext:
    """Model configuration operations over the context's model table."""

    def __init__(self, context: NeuroContext):
        self._ctx = context
        self._table = context.model_table

    def _require(self, model_id: str) -> ModelConfig:
        model = self._table.models.get(model_id)
        if model is None:
            raise NotFoundError(f"model with ID '{model_id}' not found")
        return model

    def create_model(
        self,
        name: str,
        provider: str,
        base_model: str,
        parameters: dict[str, Any] | None = None,
        description: str = "",
        catalog_id: str = "",
    ) -> ModelConfig:
        """Create a model configuration and make it the active model.

        Raises:
            InvalidNameError: If the name is invalid or a required field is empty.
            DuplicateNameError: If the name is taken.
            UnsupportedProviderError: If *provider* is not supported.
        """
        validate_model_name(name)
        if not provider:
            raise InvalidNameError("provider is required")
        if not base_model:
            raise InvalidNameError("base_model is required")
        if not self._ctx.configuration.is_valid_provider(provider):
            raise UnsupportedProviderError(provider)

        model_id = self._ctx.new_id()
        now = self._ctx.now()
        model = ModelConfig(
            id=model_id,
            name=name,
            provider=provider,
            base_model=base_model,
            parameters=dict(parameters or {}),
            description=description,
            catalog_id=catalog_id,
            created_at=now,
            updated_at=now,
        )
        with self._table.lock:
            if self._table.names.has_name(name):
                raise DuplicateNameError("model", name)
            self._table.models[model_id] = model
            self._table.names.bind(name, model_id)
            self._table.active_id = model_id
            result = model.model_copy(deep=True)
        log.debug("created model %s (%s/%s)", name, provider, base_model)
        return result

    def get_model(self, model_id: str) -> ModelConfig:
        with self._table.lock:
            return self._require(model_id).model_copy(deep=True)

    def get_model_by_name(self, name: str) -> ModelConfig:
        with self._table.lock:
            model_id = self._table.names.id_for(name)
            if model_id is None:
                raise NotFoundError(f"model with name '{name}' not found")
            return self._require(model_id).model_copy(deep=True)

    def list_models(self) -> dict[str, ModelConfig]:
        with self._table.lock:
            return {mid: m.model_copy(deep=True) for mid, m in self._table.models.items()}

    def delete_model(self, model_id: str) -> None:
        with self._table.lock:
            self._require(model_id)
            del self._table.models[model_id]
            self._table.names.unbind_id(model_id)
            if self._table.active_id == model_id:
                self._table.active_id = ""
        log.debug("deleted model %s", model_id)

    def delete_model_by_name(self, name: str) -> None:
        with self._table.lock:
            model_id = self._table.names.id_for(name)
            if model_id is None:
                raise NotFoundError(f"model with name '{name}' not found")
            self.delete_model(model_id)

    # Activation

    def set_active_model(self, model_id: str) -> None:
        with self._table.lock:
            self._require(model_id)
            self._table.active_id = model_id
        log.debug("activated model %s", model_id)

    def set_active_model_by_name(self, name: str) -> None:
        with self._table.lock:
            model_id = self._table.names.id_for(name)
            if model_id is None:
                raise NotFoundError(f"model with name '{name}' not found")
            self._table.active_id = model_id

    def clear_active_model(self) -> None:
        with self._table.lock:
            self._table.active_id = ""

    def active_model_id(self) -> str:
        with self._table.lock:
            return self._table.active_id

    def get_active_model_config(self) -> ModelConfig:
        """Return the active model, always producing some configuration.

        Falls back to the most recently updated model (which then becomes
        active), and when no models exist at all, to a synthetic
        ``default-gpt-4`` configuration that is not stored.
        """
        with self._table.lock:
            active = self._table.models.get(self._table.active_id)
            if active is not None:
                return active.model_copy(deep=True)
            self._table.active_id = ""

            latest: ModelConfig | None = None
            for model in self._table.models.values():
                if latest is None or model.updated_at >= latest.updated_at:
                    latest = model
            if latest is not None:
                self._table.active_id = latest.id
                log.debug("auto-activated latest model %s", latest.name)
                return latest.model_copy(deep=True)

        now = self._ctx.now()
        return ModelConfig(
            id=DEFAULT_MODEL_ID,
            name=DEFAULT_MODEL_ID,
            provider="openai",
            base_model="gpt-4",
            parameters=dict(DEFAULT_MODEL_PARAMETERS),
            description="Default GPT-4 configuration (synthetic)",
            created_at=now,
            updated_at=now,
        )

    # Queries

    def model_name_exists(self, name: str) -> bool:
        with self._table.lock:
            return self._table.names.has_name(name)

    def model_id_exists(self, model_id: str) -> bool:
        with self._table.lock:
            return model_id in self._table.models

    def model_name_to_id(self) -> dict[str, str]:
        with self._table.lock:
            return self._table.names.name_to_id()

    def model_id_to_name(self) -> dict[str, str]:
        with self._table.lock:
            return self._table.names.id_to_name()

    def validate_model_name(self, name: str) -> None:
        validate_model_name(name)

    def supported_providers(self) -> list[str]:
        return self._ctx.configuration.supported_providers()

    def is_valid_provider(self, provider: str) -> bool:
        return self._ctx.configuration.is_valid_provider(provider)
