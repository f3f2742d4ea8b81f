"""Assistant message calls through Republic."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger

from canvasgov.providers import ProviderFactory
from canvasgov.types import ActionPayload, ChatMessage, ChatOutput, ProviderModel

FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
CONTEXT_HEADER = "The following actions were carried out for this request:"


@dataclass(frozen=True)
class ModelRequest:
    """Everything one assistant message call needs."""

    provider_model: ProviderModel
    messages: Sequence[ChatMessage]
    system_prompt: str | None = None
    instructions: str = ""
    output_contexts: dict[str, list[str]] = field(default_factory=dict)


class ModelCaller(Protocol):
    def assistant_message(self, request: ModelRequest, *, structured: bool = False) -> ChatOutput | ActionPayload: ...


def parse_structured_reply(text: str) -> Any:
    """Decode a JSON reply, tolerating code fences and surrounding prose."""

    candidate = text.strip()
    if match := FENCE_RE.match(candidate):
        candidate = match.group(1)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass
    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(candidate[start : end + 1])
    except json.JSONDecodeError:
        return None


def render_output_contexts(contexts: dict[str, list[str]]) -> str:
    lines: list[str] = []
    for plugin_id, entries in contexts.items():
        lines.extend(f"- {plugin_id}: {entry}" for entry in entries)
    if not lines:
        return ""
    return "\n".join([CONTEXT_HEADER, *lines])


class RepublicModelCaller:
    """Calls the assistant's model in structured or normal mode."""

    def __init__(self, factory: ProviderFactory, *, max_tokens: int) -> None:
        self._factory = factory
        self._max_tokens = max_tokens

    def assistant_message(self, request: ModelRequest, *, structured: bool = False) -> ChatOutput | ActionPayload:
        llm = self._factory.create_instance(request.provider_model)
        system_prompt = request.system_prompt if structured else self._final_system_prompt(request)
        logger.info(
            "model.call.start model={} structured={} messages={}",
            request.provider_model,
            structured,
            len(request.messages),
        )
        text = llm.chat(
            system_prompt=system_prompt or None,
            messages=[message.to_dict() for message in request.messages],
            max_tokens=self._max_tokens,
        )
        text = text or ""
        if not structured:
            return _chat_output(text)

        payload = parse_structured_reply(text)
        if not isinstance(payload, dict):
            return _chat_output(text)
        message = payload.get("message")
        if "actions" not in payload and isinstance(message, str) and message.strip():
            return _chat_output(message)
        # Objects without a usable message reach the action loop.
        return payload

    @staticmethod
    def _final_system_prompt(request: ModelRequest) -> str:
        blocks = [request.instructions, render_output_contexts(request.output_contexts)]
        return "\n\n".join(block for block in blocks if block.strip())


def _chat_output(text: str) -> ChatOutput:
    return ChatOutput(message=ChatMessage(role="assistant", text=text), raw=[text])
