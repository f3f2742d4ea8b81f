"""Provider/model resolution and Republic client construction."""

from __future__ import annotations

from republic import LLM

from canvasgov.assistant import DEFAULT_PROVIDER, AssistantConfig
from canvasgov.config import Settings
from canvasgov.errors import InvalidModelFormatError
from canvasgov.types import ProviderModel


def parse_provider_model(value: str) -> ProviderModel:
    """Split a `provider:model` string."""

    provider_id, separator, model = value.strip().partition(":")
    if not separator or not provider_id or not model:
        raise InvalidModelFormatError(f"Model must be provider:model, got {value!r}")
    return ProviderModel(provider_id=provider_id, model=model)


class ProviderResolver:
    """Pick the provider/model pair an assistant runs against."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def resolve(self, assistant: AssistantConfig) -> ProviderModel:
        if assistant.llm_provider and assistant.llm_provider != DEFAULT_PROVIDER:
            return parse_provider_model(assistant.llm_provider)
        return parse_provider_model(self._settings.model)


class ProviderFactory:
    """Create Republic LLM clients for a resolved provider/model pair."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def create_instance(self, provider_model: ProviderModel) -> LLM:
        return LLM(
            str(provider_model),
            api_key=self._settings.api_key,
            api_base=self._settings.api_base,
        )
