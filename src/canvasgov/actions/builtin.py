"""Builtin action plugins."""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from loguru import logger

from canvasgov.actions.base import BaseAction
from canvasgov.actions.registry import ActionDescriptor, ActionRegistry
from canvasgov.errors import ActionError
from canvasgov.hookspecs import hookimpl


class Notebook:
    """In-memory notes keyed by thread id."""

    def __init__(self) -> None:
        self._notes: dict[str, list[str]] = defaultdict(list)

    def notes(self, thread_id: str) -> list[str]:
        return list(self._notes.get(thread_id, []))

    def replace(self, thread_id: str, notes: list[str]) -> None:
        if notes:
            self._notes[thread_id] = list(notes)
        else:
            self._notes.pop(thread_id, None)


class NotesAction(BaseAction):
    """Keeps per-thread notes the assistant decided to remember."""

    plugin_id = "notes"

    def __init__(self, notebook: Notebook, settings: dict[str, Any] | None = None) -> None:
        super().__init__(settings)
        self._notebook = notebook
        self._snapshot: list[str] | None = None
        self._snapshot_thread: str | None = None

    def trigger_action(self, action: str, record: dict[str, Any]) -> None:
        thread_id = str(record.get("thread_id") or self.thread_id or "")
        if not thread_id:
            raise ActionError("notes action needs a thread id")

        current = self._notebook.notes(thread_id)
        if action == "add":
            text = str(record.get("text", "")).strip()
            if not text:
                raise ActionError("notes.add needs a non-empty text")
            limit = int(self.settings.get("max_notes", 20))
            if len(current) >= limit:
                raise ActionError(f"notes limit reached ({limit})")
            self._snapshot = current
            self._snapshot_thread = thread_id
            self._notebook.replace(thread_id, [*current, text])
            self.output_context = f"Saved note: {text}"
        elif action == "clear":
            self._snapshot = current
            self._snapshot_thread = thread_id
            self._notebook.replace(thread_id, [])
            self.output_context = f"Cleared {len(current)} notes."
        else:
            raise ActionError(f"notes does not support action {action!r}")

        self.structured_result = {
            "action": action,
            "thread_id": thread_id,
            "notes": self._notebook.notes(thread_id),
        }

    def trigger_rollback(self) -> None:
        if self._snapshot is None or self._snapshot_thread is None:
            return
        logger.info("action.notes.rollback thread_id={} restored={}", self._snapshot_thread, len(self._snapshot))
        self._notebook.replace(self._snapshot_thread, self._snapshot)
        self._snapshot = None


def register_builtin_actions(registry: ActionRegistry, notebook: Notebook | None = None) -> Notebook:
    """Register builtin action plugins and return the notebook backing them."""

    book = notebook or Notebook()
    registry.register(
        ActionDescriptor(
            plugin_id=NotesAction.plugin_id,
            description="Remember or forget short notes for the current thread.",
            factory=lambda settings: NotesAction(book, settings),
            actions=("add", "clear"),
        )
    )
    return book


class BuiltinActionsPlugin:
    """Hook implementation registering the builtin action plugins."""

    def __init__(self) -> None:
        self.notebook = Notebook()

    @hookimpl
    def register_actions(self, registry: ActionRegistry) -> None:
        register_builtin_actions(registry, self.notebook)
