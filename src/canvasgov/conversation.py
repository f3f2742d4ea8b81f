"""Conversation state handed to the processor by its caller."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace

from canvasgov.assistant import AssistantConfig
from canvasgov.types import ChatMessage


@dataclass(frozen=True)
class ConversationState:
    """Ordered messages of one thread. Read-only to the processor."""

    messages: tuple[ChatMessage, ...] = ()
    thread_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def with_message(self, role: str, text: str) -> ConversationState:
        return replace(self, messages=(*self.messages, ChatMessage(role=role, text=text)))

    def last_user_message(self) -> ChatMessage | None:
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None

    def history(self, assistant: AssistantConfig) -> list[ChatMessage]:
        """Select the messages the assistant is allowed to see."""

        settings = assistant.history
        if settings.allow_history == "none":
            last = self.last_user_message()
            return [last] if last is not None else []
        # The current message plus the previous `history_context_length` ones.
        return list(self.messages[-(settings.history_context_length + 1) :])
