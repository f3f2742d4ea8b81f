"""Hook execution runtime with per-plugin fault isolation."""

from __future__ import annotations

import inspect
from typing import Any

import pluggy
from loguru import logger


class HookRuntime:
    """Safe wrapper around pluggy hook execution."""

    def __init__(self, plugin_manager: pluggy.PluginManager) -> None:
        self._plugin_manager = plugin_manager

    def call_first(self, hook_name: str, **kwargs: Any) -> Any:
        """Run hook implementations in precedence order and return first non-None value."""

        for impl in self._iter_hookimpls(hook_name):
            value = self._invoke_impl(hook_name=hook_name, impl=impl, kwargs=kwargs)
            if value is _SKIP_VALUE:
                continue
            if value is not None:
                return value
        return None

    def call_many(self, hook_name: str, **kwargs: Any) -> list[Any]:
        """Run all implementations and collect successful return values."""

        results: list[Any] = []
        for impl in self._iter_hookimpls(hook_name):
            value = self._invoke_impl(hook_name=hook_name, impl=impl, kwargs=kwargs)
            if value is _SKIP_VALUE:
                continue
            results.append(value)
        return results

    def notify_error(self, *, stage: str, error: Exception, assistant_id: str | None) -> int:
        """Fan an error out to on_error observers and return how many handled it."""

        payload = {"stage": stage, "error": error, "assistant_id": assistant_id}
        handled = 0
        for impl in self._iter_hookimpls("on_error"):
            try:
                impl.function(**self._kwargs_for_impl(impl, payload))
            except Exception:
                logger.opt(exception=True).warning(
                    "hook.on_error.observer_failed stage={} assistant={} plugin={}",
                    stage,
                    assistant_id or "-",
                    _plugin_label(impl),
                )
                continue
            handled += 1
        return handled

    def hook_report(self) -> dict[str, list[str]]:
        """Map each implemented hook to its plugins, in call order."""

        hook_names = sorted(name for name in vars(self._plugin_manager.hook) if not name.startswith("_"))
        report: dict[str, list[str]] = {}
        for hook_name in hook_names:
            plugins = [_plugin_label(impl) for impl in self._iter_hookimpls(hook_name)]
            if plugins:
                report[hook_name] = plugins
        return report

    def _invoke_impl(self, *, hook_name: str, impl: Any, kwargs: dict[str, Any]) -> Any:
        call_kwargs = self._kwargs_for_impl(impl, kwargs)
        try:
            value = impl.function(**call_kwargs)
        except Exception as error:
            self.notify_error(
                stage=f"{hook_name}:{_plugin_label(impl)}",
                error=error,
                assistant_id=None,
            )
            return _SKIP_VALUE
        if inspect.isawaitable(value):
            logger.warning(
                "hook.async_not_supported hook={} plugin={}",
                hook_name,
                _plugin_label(impl),
            )
            return _SKIP_VALUE
        return value

    def _iter_hookimpls(self, hook_name: str) -> list[Any]:
        hook = getattr(self._plugin_manager.hook, hook_name, None)
        if hook is None or not hasattr(hook, "get_hookimpls"):
            return []
        return list(reversed(hook.get_hookimpls()))

    @staticmethod
    def _kwargs_for_impl(impl: Any, kwargs: dict[str, Any]) -> dict[str, Any]:
        return {name: kwargs[name] for name in impl.argnames if name in kwargs}


def _plugin_label(impl: Any) -> str:
    return impl.plugin_name or "<unknown>"


_SKIP_VALUE = object()
