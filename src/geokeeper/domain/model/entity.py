"""Identity shared by caches, descriptions, log entries and users."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """A persisted row with a surrogate id assigned at construction.

    Instances compare by object identity.
    """

    id: UUID = field(default_factory=new_id)
