"""Boundary parsing for action records produced by the model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidAction:
    """An action record with a plugin id and an action name."""

    plugin: str
    action: str
    record: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MalformedAction:
    """An entry that failed shape checks and is dropped."""

    raw: Any
    reason: str


def extract_actions(payload: Any) -> list[Any]:
    """Return the `actions` list of a structured payload, or an empty list."""

    if not isinstance(payload, Mapping):
        return []
    actions = payload.get("actions")
    if not isinstance(actions, list):
        return []
    return list(actions)


def _is_blank(value: Any) -> bool:
    # The string "0" counts as blank too.
    return not value or value == "0"


def parse_action_record(raw: Any) -> ValidAction | MalformedAction:
    """Parse one untrusted action entry."""

    if not isinstance(raw, Mapping):
        return MalformedAction(raw=raw, reason="not a record")
    plugin = raw.get("plugin")
    if _is_blank(plugin):
        return MalformedAction(raw=raw, reason="missing plugin")
    action = raw.get("action")
    if _is_blank(action):
        return MalformedAction(raw=raw, reason="missing action")
    return ValidAction(plugin=str(plugin), action=str(action), record=dict(raw))
