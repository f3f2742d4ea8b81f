"""Assistant configuration entity, YAML loading and validation."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from canvasgov.errors import InvalidAssistantError

ERROR_PLACEHOLDER = "[error_message]"
DEFAULT_PROVIDER = "__default__"
DEFAULT_ERROR_MESSAGE = "I am sorry, something went terribly wrong. Please try to ask me again."


class HistorySettings(BaseModel):
    """How much of the conversation an assistant gets to see."""

    model_config = ConfigDict(frozen=True)

    allow_history: Literal["session", "none"] = "session"
    history_context_length: int = Field(default=2, ge=0)


class AssistantConfig(BaseModel):
    """One configured assistant."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    label: str = ""
    agent_ref: str | None = None
    system_prompt: str | None = None
    instructions: str = ""
    error_message: str = DEFAULT_ERROR_MESSAGE
    actions_enabled: dict[str, dict[str, Any]] = Field(default_factory=dict)
    throw_on_error: bool = False
    llm_provider: str = DEFAULT_PROVIDER
    history: HistorySettings = Field(default_factory=HistorySettings)

    @field_validator("actions_enabled", mode="before")
    @classmethod
    def _coerce_actions_enabled(cls, value: Any) -> dict[str, dict[str, Any]]:
        if not isinstance(value, Mapping):
            return {}
        enabled: dict[str, dict[str, Any]] = {}
        for plugin_id, settings in value.items():
            enabled[str(plugin_id)] = dict(settings) if isinstance(settings, Mapping) else {}
        return enabled

    @field_validator("agent_ref", "system_prompt", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def render_error(self, message: str) -> str:
        return self.error_message.replace(ERROR_PLACEHOLDER, message)


def load_assistant(path: Path) -> AssistantConfig:
    """Load an assistant from a YAML config export."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidAssistantError(f"{path}: invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidAssistantError(f"{path}: assistant config must be a mapping")
    try:
        return AssistantConfig.model_validate(data)
    except ValidationError as exc:
        raise InvalidAssistantError(f"{path}: {exc}") from exc


def validate_assistant(assistant: AssistantConfig | None) -> AssistantConfig:
    """Ensure the assistant can be run, raising InvalidAssistantError otherwise."""

    if assistant is None:
        raise InvalidAssistantError("No assistant configured.")
    if not assistant.id.strip():
        raise InvalidAssistantError("Assistant is missing an id.")
    if not assistant.error_message.strip():
        raise InvalidAssistantError(f"Assistant {assistant.id} has no error message template.")
    provider = assistant.llm_provider
    if provider != DEFAULT_PROVIDER:
        provider_id, separator, model = provider.partition(":")
        if not separator or not provider_id or not model:
            raise InvalidAssistantError(
                f"Assistant {assistant.id} has llm_provider {provider!r}; expected provider:model."
            )
    return assistant
