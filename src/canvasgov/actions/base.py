"""Action plugin contract."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from canvasgov.assistant import AssistantConfig
from canvasgov.types import ChatMessage


@runtime_checkable
class ActionPlugin(Protocol):
    """Stateful handler for one action, owned by a single loop iteration."""

    def set_assistant(self, assistant: AssistantConfig) -> None: ...

    def set_thread_id(self, thread_id: str) -> None: ...

    def set_provider(self, provider: Any) -> None: ...

    def set_messages(self, messages: Sequence[ChatMessage]) -> None: ...

    def trigger_action(self, action: str, record: dict[str, Any]) -> None: ...

    def trigger_rollback(self) -> None: ...


class BaseAction:
    """Convenience base that stores the configuration handed over by the processor.

    Subclasses implement `trigger_action` and usually `trigger_rollback`. They may
    also fill `structured_result` and `output_context`; the processor forwards the
    former to the caller and the latter to the final model call.
    """

    plugin_id: str = ""

    def __init__(self, settings: dict[str, Any] | None = None) -> None:
        self.settings: dict[str, Any] = dict(settings or {})
        self.assistant: AssistantConfig | None = None
        self.thread_id: str | None = None
        self.provider: Any = None
        self.messages: list[ChatMessage] = []
        self.structured_result: Any = None
        self.output_context: str | None = None

    def set_assistant(self, assistant: AssistantConfig) -> None:
        self.assistant = assistant

    def set_thread_id(self, thread_id: str) -> None:
        self.thread_id = thread_id

    def set_provider(self, provider: Any) -> None:
        self.provider = provider

    def set_messages(self, messages: Sequence[ChatMessage]) -> None:
        self.messages = list(messages)

    def trigger_action(self, action: str, record: dict[str, Any]) -> None:
        raise NotImplementedError

    def trigger_rollback(self) -> None:
        return None
