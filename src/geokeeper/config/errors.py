"""Errors raised while reading settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the installation is not configured correctly."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required settings are absent or blank."""


class InvalidConfigurationValueError(ConfigurationError):
    """Raised when a setting is present but cannot be interpreted."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name} must be {expected}, got {value!r}")
        self.name = name
        self.value = value
