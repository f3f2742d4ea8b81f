"""Registry of action plugin factories."""

from __future__ import annotations

import builtins
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger

from canvasgov.actions.base import ActionPlugin
from canvasgov.errors import UnknownPluginError

ActionFactory: TypeAlias = Callable[[dict[str, Any]], ActionPlugin]


@dataclass(frozen=True)
class ActionDescriptor:
    """Action plugin metadata and factory."""

    plugin_id: str
    description: str
    factory: ActionFactory
    actions: tuple[str, ...] = ()
    source: str = "builtin"


class ActionRegistry:
    """Maps plugin ids to factories producing fresh action instances."""

    def __init__(self) -> None:
        self._descriptors: dict[str, ActionDescriptor] = {}

    def register(self, descriptor: ActionDescriptor) -> None:
        if descriptor.plugin_id in self._descriptors:
            logger.warning(
                "action.registry.override plugin={} source={}",
                descriptor.plugin_id,
                descriptor.source,
            )
        self._descriptors[descriptor.plugin_id] = descriptor

    def has(self, plugin_id: str) -> bool:
        return plugin_id in self._descriptors

    def get(self, plugin_id: str) -> ActionDescriptor | None:
        return self._descriptors.get(plugin_id)

    def descriptors(self) -> builtins.list[ActionDescriptor]:
        return sorted(self._descriptors.values(), key=lambda item: item.plugin_id)

    def compact_rows(self, enabled: builtins.list[str] | None = None) -> builtins.list[str]:
        rows: builtins.list[str] = []
        for descriptor in self.descriptors():
            if enabled is not None and descriptor.plugin_id not in enabled:
                continue
            actions = ", ".join(descriptor.actions) or "-"
            rows.append(f"{descriptor.plugin_id} [{actions}]: {descriptor.description}")
        return rows

    def create(self, plugin_id: str, settings: dict[str, Any] | None = None) -> ActionPlugin:
        """Build a fresh instance for one loop iteration."""

        descriptor = self.get(plugin_id)
        if descriptor is None:
            raise UnknownPluginError(plugin_id)
        logger.debug("action.create plugin={} source={}", plugin_id, descriptor.source)
        return descriptor.factory(dict(settings or {}))
