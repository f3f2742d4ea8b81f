"""Pluggy hook namespace and hook specifications."""

from __future__ import annotations

from typing import Any

import pluggy

from canvasgov.actions.registry import ActionRegistry

CANVASGOV_HOOK_NAMESPACE = "canvasgov"
hookspec = pluggy.HookspecMarker(CANVASGOV_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(CANVASGOV_HOOK_NAMESPACE)


class CanvasgovHookSpecs:
    """Hook contract for canvasgov extensions."""

    @hookspec
    def register_actions(self, registry: ActionRegistry) -> None:
        """Register action plugin factories onto the registry."""

    @hookspec(firstresult=True)
    def provide_agent_runner(self) -> Any | None:
        """Provide an agent runner for assistants that delegate to an agent."""

    @hookspec
    def register_cli_commands(self, app: Any) -> None:
        """Register CLI commands onto the root Typer application."""

    @hookspec
    def on_error(self, stage: str, error: Exception, assistant_id: str | None) -> None:
        """Observe errors caught while processing an assistant turn."""
