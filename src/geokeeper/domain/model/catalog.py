"""Attribute catalog entries supplied by the catalog collaborator."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class AttributeInfo:
    acode: str
    name: str
    is_addable: bool = True
    incompatible_acodes: frozenset[str] = field(default_factory=frozenset)
