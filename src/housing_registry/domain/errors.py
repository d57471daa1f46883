"""Errors raised by the registry core.

``NotFoundError`` is only raised by operations addressing a row by id (eviction,
registration into an apartment). Lookups by natural key return an empty result
instead, so "not found" never escapes the import path as an error.
"""

from __future__ import annotations

from collections.abc import Mapping


class RegistryError(RuntimeError):
    """Base class for registry failures surfaced to callers."""


class NotFoundError(RegistryError):
    """Raised when an entity addressed by id does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key


class DuplicateEntityError(RegistryError):
    """Raised when manual creation targets an entity that already exists."""


class MultipleMatchError(RegistryError):
    """Raised when a lookup expected to be unique matches several rows."""

    def __init__(self, entity: str, criteria: Mapping[str, object], count: int) -> None:
        rendered = ", ".join(f"{name}={value!r}" for name, value in criteria.items())
        super().__init__(f"Expected at most one {entity} for {rendered}, found {count}")
        self.entity = entity
        self.criteria = dict(criteria)
        self.count = count


class StoreError(RegistryError):
    """Raised for any backing-store failure other than an empty lookup."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message


class InvalidSubmissionError(RegistryError):
    """Raised when a form submission fails validation.

    ``field_errors`` maps each offending field to a human-readable message.
    """

    def __init__(self, field_errors: Mapping[str, str]) -> None:
        rendered = "; ".join(f"{name}: {message}" for name, message in field_errors.items())
        super().__init__(f"Invalid submission ({rendered})")
        self.field_errors = dict(field_errors)
