from __future__ import annotations

import pytest

from canvasgov.assistant import AssistantConfig
from canvasgov.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(model="openai:gpt-4o-mini", custom_prompts=True, throw_exception=False)


@pytest.fixture
def assistant() -> AssistantConfig:
    return AssistantConfig(
        id="helper",
        label="Helper",
        system_prompt="Use actions when asked.\n[ai_actions]",
        error_message="Sorry: [error_message]",
        actions_enabled={"emailer": {"from": "a@b.com"}},
    )
