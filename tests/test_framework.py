from __future__ import annotations

from typing import Any

import pytest

from canvasgov.actions.base import BaseAction
from canvasgov.actions.registry import ActionDescriptor, ActionRegistry
from canvasgov.assistant import AssistantConfig
from canvasgov.config import Settings
from canvasgov.conversation import ConversationState
from canvasgov.errors import InvalidModelFormatError
from canvasgov.framework import CanvasgovFramework
from canvasgov.hookspecs import hookimpl
from canvasgov.providers import ProviderResolver, parse_provider_model
from canvasgov.types import ChatMessage, ChatOutput
from fakes import FakeModelCaller, FakeProviderFactory


class ExplodingAction(BaseAction):
    def trigger_action(self, action: str, record: dict[str, Any]) -> None:
        raise RuntimeError("kaboom")


class ExtraActionsPlugin:
    @hookimpl
    def register_actions(self, registry: ActionRegistry) -> None:
        registry.register(
            ActionDescriptor(plugin_id="explode", description="always fails", factory=ExplodingAction, source="test")
        )


class BrokenActionsPlugin:
    @hookimpl
    def register_actions(self, registry: ActionRegistry) -> None:
        raise RuntimeError("cannot register")


class ErrorObserver:
    def __init__(self) -> None:
        self.seen: list[tuple[str, str, str | None]] = []

    @hookimpl
    def on_error(self, stage: str, error: Exception, assistant_id: str | None) -> None:
        self.seen.append((stage, str(error), assistant_id))


class FailingObserver:
    @hookimpl
    def on_error(self, stage: str, error: Exception, assistant_id: str | None) -> None:
        raise RuntimeError("observer broke")


class AgentPlugin:
    def __init__(self, runner: Any) -> None:
        self.runner = runner

    @hookimpl
    def provide_agent_runner(self) -> Any:
        return self.runner


class StaticAgent:
    def run_as_agent(self, agent_ref, history, provider_model, threads_key, verbose) -> ChatOutput:
        return ChatOutput(message=ChatMessage(role="assistant", text=f"agent {agent_ref}"))


def _framework() -> CanvasgovFramework:
    return CanvasgovFramework(Settings(model="openai:gpt-4o-mini", custom_prompts=True))


def test_builtin_plugin_registers_notes_action() -> None:
    registry = _framework().build_registry()

    assert [descriptor.plugin_id for descriptor in registry.descriptors()] == ["notes"]


def test_registered_plugins_contribute_actions() -> None:
    framework = _framework()
    framework.register_plugin(ExtraActionsPlugin(), name="test:extra")

    registry = framework.build_registry()

    assert registry.has("explode")
    assert registry.has("notes")


def test_broken_plugin_is_isolated_and_reported() -> None:
    framework = _framework()
    observer = ErrorObserver()
    framework.register_plugin(observer, name="test:observer")
    framework.register_plugin(BrokenActionsPlugin(), name="test:broken")

    registry = framework.build_registry()

    assert registry.has("notes")
    assert observer.seen == [("register_actions:test:broken", "cannot register", None)]


def test_processor_errors_reach_observers_even_if_one_fails() -> None:
    framework = _framework()
    observer = ErrorObserver()
    framework.register_plugin(FailingObserver(), name="test:failing")
    framework.register_plugin(observer, name="test:observer")
    framework.register_plugin(ExtraActionsPlugin(), name="test:extra")
    model = FakeModelCaller({"actions": [{"plugin": "explode", "action": "go"}]})
    processor = framework.build_processor(model=model, providers=FakeProviderFactory())
    assistant = AssistantConfig(id="a", system_prompt="p", error_message="E: [error_message]")

    output = processor.process(assistant, ConversationState(thread_id="t").with_message("user", "go"))

    assert output.text == "E: kaboom"
    assert observer.seen == [("process", "kaboom", "a")]


def test_agent_runner_comes_from_hooks() -> None:
    framework = _framework()
    framework.register_plugin(AgentPlugin(StaticAgent()), name="test:agent")
    processor = framework.build_processor(model=FakeModelCaller())

    output = processor.process(
        AssistantConfig(id="a", agent_ref="writer"),
        ConversationState().with_message("user", "hello"),
    )

    assert output.text == "agent writer"


def test_invalid_agent_runner_is_ignored() -> None:
    framework = _framework()
    framework.register_plugin(AgentPlugin(object()), name="test:agent")

    assert framework.agent_runner() is None


def test_hook_report_lists_plugins() -> None:
    framework = _framework()
    framework.register_plugin(ErrorObserver(), name="test:observer")

    report = framework.hook_report()

    assert report["register_actions"] == ["builtin:actions"]
    assert report["on_error"] == ["test:observer"]


def test_hook_report_lists_plugins_in_call_order() -> None:
    framework = _framework()
    framework.register_plugin(ErrorObserver(), name="test:first")
    framework.register_plugin(FailingObserver(), name="test:second")

    assert framework.hook_report()["on_error"] == ["test:second", "test:first"]


def test_notify_error_counts_observers_that_handled_it() -> None:
    framework = _framework()
    observer = ErrorObserver()
    framework.register_plugin(observer, name="test:observer")
    framework.register_plugin(FailingObserver(), name="test:failing")

    handled = framework.hooks.notify_error(stage="process", error=ValueError("bad"), assistant_id="a")

    assert handled == 1
    assert observer.seen == [("process", "bad", "a")]
    assert _framework().hooks.notify_error(stage="process", error=ValueError("bad"), assistant_id=None) == 0


def test_builtin_notes_flow_end_to_end() -> None:
    framework = _framework()
    model = FakeModelCaller({"actions": [{"plugin": "notes", "action": "add", "text": "milk"}]}, final_text="Noted.")
    processor = framework.build_processor(model=model, providers=FakeProviderFactory())
    assistant = AssistantConfig(id="a", system_prompt="p", actions_enabled={"notes": {"max_notes": 3}})

    output = processor.process(assistant, ConversationState(thread_id="t-1").with_message("user", "remember milk"))

    assert output.text == "Noted."
    assert framework.builtin.notebook.notes("t-1") == ["milk"]
    assert output.metadata["output_contexts"] == {"notes": ["Saved note: milk"]}


@pytest.mark.parametrize("value", ["gpt-4o", ":gpt", "openai:", ""])
def test_parse_provider_model_rejects_bad_values(value: str) -> None:
    with pytest.raises(InvalidModelFormatError):
        parse_provider_model(value)


def test_provider_resolver_prefers_assistant_setting() -> None:
    resolver = ProviderResolver(Settings(model="openai:gpt-4o-mini"))

    assert str(resolver.resolve(AssistantConfig(id="a"))) == "openai:gpt-4o-mini"
    assert str(resolver.resolve(AssistantConfig(id="a", llm_provider="anthropic:claude"))) == "anthropic:claude"
