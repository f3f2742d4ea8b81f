"""canvasgov - safe assistant runner with pluggable actions."""

from canvasgov.assistant import AssistantConfig, load_assistant
from canvasgov.conversation import ConversationState
from canvasgov.framework import CanvasgovFramework
from canvasgov.processor import AssistantProcessor
from canvasgov.types import ChatMessage, ChatOutput

__version__ = "0.1.0"

__all__ = [
    "AssistantConfig",
    "AssistantProcessor",
    "CanvasgovFramework",
    "ChatMessage",
    "ChatOutput",
    "ConversationState",
    "load_assistant",
]
