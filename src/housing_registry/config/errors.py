"""Errors raised while reading registry settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a setting cannot be used as given."""


class InvalidSettingError(ConfigurationError):
    """Raised when an environment variable holds a value of the wrong shape."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name}={value!r} is invalid: expected {expected}")
        self.name = name
        self.value = value
        self.expected = expected
