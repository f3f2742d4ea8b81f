"""canvasgov CLI."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from canvasgov.assistant import AssistantConfig, load_assistant, validate_assistant
from canvasgov.config import Settings, get_settings
from canvasgov.conversation import ConversationState
from canvasgov.errors import CanvasgovError
from canvasgov.framework import CanvasgovFramework
from canvasgov.hookspecs import hookimpl
from canvasgov.logging_utils import configure_logging


class CliCommandsPlugin:
    @hookimpl
    def register_cli_commands(self, app: typer.Typer) -> None:
        @app.command("run")
        def run(
            assistant_file: Path = typer.Argument(..., help="Assistant YAML config"),  # noqa: B008
            message: str = typer.Argument(..., help="User message"),
            thread_id: str | None = typer.Option(None, "--thread-id", help="Optional thread id"),
            as_json: bool = typer.Option(False, "--json", help="Print the full chat output as JSON"),
        ) -> None:
            """Process one user message against an assistant."""

            framework = _load_framework()
            assistant = _load_or_exit(assistant_file)
            conversation = ConversationState(thread_id=thread_id) if thread_id else ConversationState()
            conversation = conversation.with_message("user", message)

            try:
                output = framework.build_processor().process(assistant, conversation)
            except Exception as exc:
                typer.echo(f"error: {exc}", err=True)
                raise typer.Exit(code=1) from exc
            if as_json:
                payload = {
                    "role": output.message.role,
                    "text": output.text,
                    "thread_id": conversation.thread_id,
                    "metadata": output.metadata,
                }
                typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
                return
            typer.echo(output.text)

        @app.command("validate")
        def validate(
            assistant_file: Path = typer.Argument(..., help="Assistant YAML config"),  # noqa: B008
        ) -> None:
            """Check that an assistant config can be run."""

            framework = _load_framework()
            assistant = _load_or_exit(assistant_file)
            registry = framework.build_registry()
            unknown = [plugin_id for plugin_id in assistant.actions_enabled if not registry.has(plugin_id)]
            for plugin_id in unknown:
                typer.echo(f"warning: action plugin {plugin_id} is enabled but not registered")
            typer.echo(f"ok {assistant.id}")

        @app.command("actions")
        def list_actions() -> None:
            """Show registered action plugins."""

            rows = _load_framework().build_registry().compact_rows()
            if not rows:
                typer.echo("(no action plugins)")
                return
            for row in rows:
                typer.echo(row)

        @app.command("hooks")
        def list_hooks() -> None:
            """Show hook implementation mapping."""

            report = _load_framework().hook_report()
            for hook_name, plugins in report.items():
                typer.echo(f"{hook_name}: {', '.join(plugins)}")


def _load_framework() -> CanvasgovFramework:
    settings = get_settings()
    configure_logging(profile="cli", level=settings.log_level)
    return _build_framework(settings)


def _build_framework(settings: Settings) -> CanvasgovFramework:
    framework = CanvasgovFramework(settings)
    framework.register_plugin(CliCommandsPlugin(), name="builtin:cli")
    framework.load_entrypoint_plugins()
    return framework


def _load_or_exit(path: Path) -> AssistantConfig:
    try:
        return validate_assistant(load_assistant(path))
    except (OSError, CanvasgovError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def create_cli_app() -> typer.Typer:
    app = typer.Typer(name="canvasgov", help="Safe assistant runner with action plugins", add_completion=False)
    _build_framework(get_settings()).register_cli_commands(app)
    return app


app = create_cli_app()
