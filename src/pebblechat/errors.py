"""Application-level exception types for pebblechat."""

from __future__ import annotations


class PebbleChatError(Exception):
    """Base exception for pebblechat."""


class ConfigurationError(PebbleChatError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class InvalidSettingsPayloadError(ConfigurationError):
    """Raised when the settings page returns a payload that is not a JSON object."""
