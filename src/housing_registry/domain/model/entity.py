"""Identity semantics shared by stored entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class Entity:
    """Entity whose identity is assigned by the store.

    ``id`` stays ``None`` until the row has been written; after that it is stable
    for the entity's lifetime.
    """

    id: int | None = None

    def require_id(self) -> int:
        if self.id is None:
            raise ValueError(f"{type(self).__name__} has not been stored yet")
        return self.id
