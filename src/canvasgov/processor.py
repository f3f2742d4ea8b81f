"""Assistant response processor with a defensive action dispatch loop."""

from __future__ import annotations

import time
from typing import Any

from loguru import logger

from canvasgov.actions.base import ActionPlugin
from canvasgov.actions.parsing import MalformedAction, extract_actions, parse_action_record
from canvasgov.actions.registry import ActionRegistry
from canvasgov.agent import AgentRunner
from canvasgov.assistant import AssistantConfig, validate_assistant
from canvasgov.config import Settings
from canvasgov.conversation import ConversationState
from canvasgov.hook_runtime import HookRuntime
from canvasgov.model import ModelCaller, ModelRequest
from canvasgov.prompts import PromptResolver
from canvasgov.providers import ProviderFactory, ProviderResolver
from canvasgov.types import ChatMessage, ChatOutput, ProviderModel

THREADS_KEY_PREFIX = "ai_assistant_threads_"


def threads_key(assistant: AssistantConfig) -> str:
    return f"{THREADS_KEY_PREFIX}{assistant.id}"


class AssistantProcessor:
    """Runs one assistant turn: prompt, structured call, actions, final answer.

    Not safe for concurrent `process()` calls; per-call state lives on the instance
    and is reset at the start of every call.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        registry: ActionRegistry,
        prompts: PromptResolver,
        model: ModelCaller,
        provider_resolver: ProviderResolver,
        provider_factory: ProviderFactory,
        agent_runner: AgentRunner | None = None,
        hooks: HookRuntime | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._prompts = prompts
        self._model = model
        self._provider_resolver = provider_resolver
        self._provider_factory = provider_factory
        self._agent_runner = agent_runner
        self._hooks = hooks
        self._throw_exception = settings.throw_exception
        self._structured_results: list[Any] = []
        self._output_contexts: dict[str, list[str]] = {}
        self.using_action = False

    @property
    def structured_results(self) -> list[Any]:
        return list(self._structured_results)

    @property
    def output_contexts(self) -> dict[str, list[str]]:
        return {plugin_id: list(entries) for plugin_id, entries in self._output_contexts.items()}

    def set_throw_exception(self, throw: bool) -> None:
        self._throw_exception = throw

    def process(self, assistant: AssistantConfig, conversation: ConversationState) -> ChatOutput:
        validate_assistant(assistant)
        self._reset()
        instance: ActionPlugin | None = None
        history = conversation.history(assistant)

        if assistant.agent_ref and self._agent_runner is not None:
            logger.info("processor.agent_delegate assistant={} agent={}", assistant.id, assistant.agent_ref)
            return self._agent_runner.run_as_agent(
                assistant.agent_ref,
                history,
                self._provider_resolver.resolve(assistant),
                threads_key(assistant),
                self._settings.verbose,
            )

        try:
            system_prompt = self._prompts.resolve(assistant)
            if system_prompt:
                provider_model = self._provider_resolver.resolve(assistant)
                reply = self._model.assistant_message(
                    ModelRequest(provider_model=provider_model, messages=history, system_prompt=system_prompt),
                    structured=True,
                )
                if isinstance(reply, ChatOutput):
                    return reply

                for raw in extract_actions(reply):
                    parsed = parse_action_record(raw)
                    if isinstance(parsed, MalformedAction):
                        continue
                    self.using_action = True
                    instance = self._registry.create(parsed.plugin, assistant.actions_enabled.get(parsed.plugin, {}))
                    self._configure(instance, assistant, conversation.thread_id, provider_model, history)
                    # Tag the record with its origin for downstream auditing.
                    record = {
                        **parsed.record,
                        "ai_assistant_api": assistant.id,
                        "thread_id": conversation.thread_id,
                    }
                    self._trigger(instance, parsed.plugin, parsed.action, record)
                    self._collect(parsed.plugin, instance)
        except Exception as exc:
            error_output = self._recover(exc, assistant, instance)
            if assistant.throw_on_error or self._throw_exception:
                raise
            return error_output

        output = self._model.assistant_message(
            ModelRequest(
                provider_model=self._provider_resolver.resolve(assistant),
                messages=history,
                instructions=assistant.instructions,
                output_contexts=self.output_contexts,
            )
        )
        if not isinstance(output, ChatOutput):
            raise TypeError("final assistant message must be a ChatOutput")
        if not self._structured_results and not self._output_contexts:
            return output
        metadata = {
            **output.metadata,
            "structured_results": self.structured_results,
            "output_contexts": self.output_contexts,
        }
        return ChatOutput(message=output.message, raw=output.raw, metadata=metadata)

    def _reset(self) -> None:
        self._structured_results = []
        self._output_contexts = {}
        self.using_action = False

    def _configure(
        self,
        instance: ActionPlugin,
        assistant: AssistantConfig,
        thread_id: str,
        provider_model: ProviderModel,
        history: list[ChatMessage],
    ) -> None:
        instance.set_assistant(assistant)
        instance.set_thread_id(thread_id)
        instance.set_provider(self._provider_factory.create_instance(provider_model))
        instance.set_messages(history)

    @staticmethod
    def _trigger(instance: ActionPlugin, plugin_id: str, action: str, record: dict[str, Any]) -> None:
        logger.info("action.trigger.start plugin={} action={} thread_id={}", plugin_id, action, record["thread_id"])
        start = time.monotonic()
        try:
            instance.trigger_action(action, record)
        finally:
            duration = time.monotonic() - start
            logger.info("action.trigger.end plugin={} action={} duration={:.3f}ms", plugin_id, action, duration * 1000)

    def _collect(self, plugin_id: str, instance: ActionPlugin) -> None:
        result = getattr(instance, "structured_result", None)
        if result is not None:
            self._structured_results.append(result)
        context = getattr(instance, "output_context", None)
        if context:
            self._output_contexts.setdefault(plugin_id, []).append(str(context))

    def _recover(self, exc: Exception, assistant: AssistantConfig, instance: ActionPlugin | None) -> ChatOutput:
        message = str(exc)
        logger.error("processor.error assistant={} error={}", assistant.id, message)
        if self._hooks is not None:
            self._hooks.notify_error(stage="process", error=exc, assistant_id=assistant.id)
        error_text = assistant.render_error(message)
        if instance is not None:
            instance.trigger_rollback()
        return ChatOutput(message=ChatMessage(role="assistant", text=error_text), raw=[error_text])
