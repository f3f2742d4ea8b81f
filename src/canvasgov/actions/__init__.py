"""Action plugins the assistant can trigger alongside its reply."""

from canvasgov.actions.base import ActionPlugin, BaseAction
from canvasgov.actions.parsing import MalformedAction, ValidAction, extract_actions, parse_action_record
from canvasgov.actions.registry import ActionDescriptor, ActionRegistry

__all__ = [
    "ActionDescriptor",
    "ActionPlugin",
    "ActionRegistry",
    "BaseAction",
    "MalformedAction",
    "ValidAction",
    "extract_actions",
    "parse_action_record",
]
