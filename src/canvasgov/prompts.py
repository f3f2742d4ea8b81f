"""System prompt resolution."""

from __future__ import annotations

from collections.abc import Callable
from importlib import resources

from loguru import logger

from canvasgov.actions.registry import ActionRegistry
from canvasgov.assistant import AssistantConfig
from canvasgov.config import Settings

PROMPT_PACKAGE = "canvasgov.resources"
PROMPT_FILE = "system_prompt.txt"
ACTIONS_PLACEHOLDER = "[ai_actions]"
INSTRUCTIONS_PLACEHOLDER = "[instructions]"


def read_bundled_prompt() -> str:
    """Read the system prompt shipped with the package. Raises OSError when unreadable."""

    return resources.files(PROMPT_PACKAGE).joinpath(PROMPT_FILE).read_text(encoding="utf-8")


class PromptResolver:
    """Determine the effective system prompt of an assistant."""

    def __init__(
        self,
        settings: Settings,
        registry: ActionRegistry,
        reader: Callable[[], str] = read_bundled_prompt,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._reader = reader

    def resolve(self, assistant: AssistantConfig) -> str | None:
        prompt = assistant.system_prompt
        if not self._settings.custom_prompts:
            try:
                prompt = self._reader()
            except OSError as exc:
                # Falls through to the final answer without actions.
                logger.warning("prompt.bundled_unavailable assistant={} error={}", assistant.id, exc)
                prompt = None
        if not prompt or not prompt.strip():
            return None
        return self._render(prompt, assistant)

    def _render(self, prompt: str, assistant: AssistantConfig) -> str:
        actions = "\n".join(self._registry.compact_rows(enabled=list(assistant.actions_enabled)))
        rendered = prompt.replace(ACTIONS_PLACEHOLDER, actions or "(no actions enabled)")
        return rendered.replace(INSTRUCTIONS_PLACEHOLDER, assistant.instructions).strip()
