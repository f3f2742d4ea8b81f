"""Plugin loading and processor assembly."""

from __future__ import annotations

from typing import Any

import pluggy
from loguru import logger

from canvasgov.actions.builtin import BuiltinActionsPlugin
from canvasgov.actions.registry import ActionRegistry
from canvasgov.agent import AgentRunner
from canvasgov.config import Settings
from canvasgov.hook_runtime import HookRuntime
from canvasgov.hookspecs import CANVASGOV_HOOK_NAMESPACE, CanvasgovHookSpecs
from canvasgov.model import ModelCaller, RepublicModelCaller
from canvasgov.processor import AssistantProcessor
from canvasgov.prompts import PromptResolver
from canvasgov.providers import ProviderFactory, ProviderResolver

BUILTIN_PLUGIN_NAME = "builtin:actions"


class CanvasgovFramework:
    """Owns the plugin manager and builds processors from registered hooks."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._plugin_manager = pluggy.PluginManager(CANVASGOV_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(CanvasgovHookSpecs)
        self._hook_runtime = HookRuntime(self._plugin_manager)
        self._builtin = BuiltinActionsPlugin()
        self._plugin_manager.register(self._builtin, name=BUILTIN_PLUGIN_NAME)

    @property
    def hooks(self) -> HookRuntime:
        return self._hook_runtime

    @property
    def builtin(self) -> BuiltinActionsPlugin:
        return self._builtin

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)

    def load_entrypoint_plugins(self) -> int:
        """Register plugins advertised under the `canvasgov` entry point group."""

        try:
            return self._plugin_manager.load_setuptools_entrypoints(CANVASGOV_HOOK_NAMESPACE)
        except Exception:
            logger.opt(exception=True).warning("plugin.entrypoints_failed group={}", CANVASGOV_HOOK_NAMESPACE)
            return 0

    def build_registry(self) -> ActionRegistry:
        registry = ActionRegistry()
        self._hook_runtime.call_many("register_actions", registry=registry)
        return registry

    def agent_runner(self) -> AgentRunner | None:
        provided = self._hook_runtime.call_first("provide_agent_runner")
        if provided is None:
            return None
        if not isinstance(provided, AgentRunner):
            logger.warning("plugin.agent_runner_invalid type={}", type(provided).__name__)
            return None
        return provided

    def register_cli_commands(self, app: Any) -> None:
        self._hook_runtime.call_many("register_cli_commands", app=app)

    def build_processor(
        self,
        *,
        model: ModelCaller | None = None,
        providers: ProviderFactory | None = None,
    ) -> AssistantProcessor:
        registry = self.build_registry()
        factory = providers or ProviderFactory(self.settings)
        return AssistantProcessor(
            settings=self.settings,
            registry=registry,
            prompts=PromptResolver(self.settings, registry),
            model=model or RepublicModelCaller(factory, max_tokens=self.settings.max_tokens),
            provider_resolver=ProviderResolver(self.settings),
            provider_factory=factory,
            agent_runner=self.agent_runner(),
            hooks=self._hook_runtime,
        )

    def hook_report(self) -> dict[str, list[str]]:
        return self._hook_runtime.hook_report()
