"""Shared data types for one assistant turn."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

ActionPayload: TypeAlias = dict[str, Any]


@dataclass(frozen=True)
class ChatMessage:
    """One message of a conversation."""

    role: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.text}


@dataclass(frozen=True)
class ChatOutput:
    """Normal or error-shaped result of one processed turn."""

    message: ChatMessage
    raw: list[Any] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.message.text


@dataclass(frozen=True)
class ProviderModel:
    """Resolved provider/model pair."""

    provider_id: str
    model: str

    def __str__(self) -> str:
        return f"{self.provider_id}:{self.model}"
