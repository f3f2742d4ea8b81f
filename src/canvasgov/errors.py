"""Application-level exception types for canvasgov."""

from __future__ import annotations


class CanvasgovError(Exception):
    """Base exception for canvasgov."""


class ConfigurationError(CanvasgovError):
    """Base exception for configuration and startup validation errors."""


class InvalidAssistantError(ConfigurationError):
    """Raised when an assistant configuration is structurally incomplete."""


class InvalidModelFormatError(ConfigurationError):
    """Raised when model format is not provider:model."""


class ActionError(CanvasgovError):
    """Raised when a triggered action fails at runtime."""


class UnknownPluginError(ActionError):
    """Raised when an action references a plugin id nobody registered."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(f"Unknown action plugin: {plugin_id}")
        self.plugin_id = plugin_id
