"""Agent runner contract for assistants that delegate to an agent."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from canvasgov.types import ChatMessage, ChatOutput, ProviderModel


@runtime_checkable
class AgentRunner(Protocol):
    """Runs a whole turn on behalf of an assistant."""

    def run_as_agent(
        self,
        agent_ref: str,
        history: Sequence[ChatMessage],
        provider_model: ProviderModel,
        threads_key: str,
        verbose: bool,
    ) -> ChatOutput: ...
