from __future__ import annotations

import json
from typing import Any

import pytest

from canvasgov.model import ModelRequest, RepublicModelCaller, parse_structured_reply, render_output_contexts
from canvasgov.types import ChatMessage, ChatOutput, ProviderModel


class FakeLLM:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []

    def chat(self, **kwargs: Any) -> str:
        self.calls.append(kwargs)
        return self.reply


class FakeFactory:
    def __init__(self, llm: FakeLLM) -> None:
        self.llm = llm
        self.created: list[ProviderModel] = []

    def create_instance(self, provider_model: ProviderModel) -> FakeLLM:
        self.created.append(provider_model)
        return self.llm


def _caller(reply: str) -> tuple[RepublicModelCaller, FakeLLM]:
    llm = FakeLLM(reply)
    return RepublicModelCaller(FakeFactory(llm), max_tokens=256), llm  # type: ignore[arg-type]


def _request(**kwargs: Any) -> ModelRequest:
    return ModelRequest(
        provider_model=ProviderModel(provider_id="openai", model="gpt-4o-mini"),
        messages=[ChatMessage(role="user", text="hello")],
        **kwargs,
    )


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"actions": []}', {"actions": []}),
        ('```json\n{"actions": [1]}\n```', {"actions": [1]}),
        ('Sure! {"no_action": true, "message": "hi"} Done.', {"no_action": True, "message": "hi"}),
        ("[1, 2]", [1, 2]),
        ("plain text", None),
        ("{broken", None),
    ],
)
def test_parse_structured_reply(text: str, expected: Any) -> None:
    assert parse_structured_reply(text) == expected


def test_structured_call_returns_actions_payload() -> None:
    caller, llm = _caller('{"actions": [{"plugin": "notes", "action": "add", "text": "x"}]}')

    result = caller.assistant_message(_request(system_prompt="structured prompt"), structured=True)

    assert result == {"actions": [{"plugin": "notes", "action": "add", "text": "x"}]}
    assert llm.calls[0] == {
        "system_prompt": "structured prompt",
        "messages": [{"role": "user", "content": "hello"}],
        "max_tokens": 256,
    }


def test_structured_call_without_actions_returns_message() -> None:
    caller, _ = _caller('{"no_action": true, "message": "All good."}')

    result = caller.assistant_message(_request(system_prompt="p"), structured=True)

    assert isinstance(result, ChatOutput)
    assert result.message == ChatMessage(role="assistant", text="All good.")


def test_structured_call_with_prose_returns_prose() -> None:
    caller, _ = _caller("I could not decide.")

    result = caller.assistant_message(_request(system_prompt="p"), structured=True)

    assert isinstance(result, ChatOutput)
    assert result.text == "I could not decide."


@pytest.mark.parametrize("reply", ["{}", '{"no_action": true}', '{"foo": 1}', '{"message": "  "}'])
def test_structured_object_without_actions_or_message_goes_to_action_loop(reply: str) -> None:
    caller, _ = _caller(reply)

    result = caller.assistant_message(_request(system_prompt="p"), structured=True)

    assert not isinstance(result, ChatOutput)
    assert result == json.loads(reply)


def test_structured_json_list_returns_raw_text() -> None:
    caller, _ = _caller("[1, 2]")

    result = caller.assistant_message(_request(system_prompt="p"), structured=True)

    assert isinstance(result, ChatOutput)
    assert result.text == "[1, 2]"


def test_malformed_actions_member_is_left_to_processor() -> None:
    caller, _ = _caller('{"actions": "send"}')

    assert caller.assistant_message(_request(system_prompt="p"), structured=True) == {"actions": "send"}


def test_final_call_includes_instructions_and_contexts() -> None:
    caller, llm = _caller("Done, I saved it.")

    result = caller.assistant_message(
        _request(instructions="Be brief.", output_contexts={"notes": ["Saved note: x"]}),
    )

    assert isinstance(result, ChatOutput)
    assert result.raw == ["Done, I saved it."]
    system_prompt = llm.calls[0]["system_prompt"]
    assert system_prompt.startswith("Be brief.")
    assert "- notes: Saved note: x" in system_prompt


def test_final_call_without_context_sends_no_system_prompt() -> None:
    caller, llm = _caller("hi")

    caller.assistant_message(_request())

    assert llm.calls[0]["system_prompt"] is None


def test_render_output_contexts_empty() -> None:
    assert render_output_contexts({}) == ""
    assert render_output_contexts({"notes": []}) == ""
