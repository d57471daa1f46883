"""Environment variable readers.

Every registry setting is optional. A blank variable counts as unset, so a
``.env`` file can list a name without a value.
"""

from __future__ import annotations

import os
from typing import Final

from .errors import InvalidSettingError

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value


def optional_env_list(name: str, *, separator: str = ",") -> tuple[str, ...] | None:
    """Split a variable into its non-blank, stripped items."""

    value = optional_env_var(name)
    if value is None:
        return None
    items = tuple(item.strip() for item in value.split(separator) if item.strip())
    if not items:
        raise InvalidSettingError(name, value, f"at least one {separator!r}-separated value")
    return items


def optional_env_int(name: str) -> int | None:
    value = optional_env_var(name)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InvalidSettingError(name, value, "an integer") from exc


def env_flag(name: str, *, default: bool = False) -> bool:
    value = optional_env_var(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidSettingError(name, value, "one of 1/0, true/false, yes/no, on/off")
