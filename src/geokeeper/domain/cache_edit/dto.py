"""Value objects exchanged by the cache edit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from geokeeper.domain.problems import ProblemMap

if TYPE_CHECKING:
    from collections.abc import Mapping

    from geokeeper.domain.model import CacheSnapshot

type FieldChanges = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class AttributeDelta:
    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()
    effective: frozenset[str] = frozenset()
    conflicts: tuple[frozenset[str], ...] = ()
    problems: ProblemMap = field(default_factory=ProblemMap)

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_remove)


@dataclass(frozen=True, slots=True)
class DescriptionChange:
    """Normalized texts for one language. ``None`` means "leave unchanged"."""

    language: str
    is_new: bool
    description: str | None = None
    description_html: int | None = None
    short_description: str | None = None
    hint: str | None = None

    @property
    def given_texts(self) -> dict[str, str]:
        texts = {
            "description": self.description,
            "short_description": self.short_description,
            "hint": self.hint,
        }
        return {name: value for name, value in texts.items() if value is not None}


@dataclass(slots=True)
class CacheEditPlan:
    """Validated, not yet committed, change set for one cache."""

    cache: CacheSnapshot
    staged: dict[str, Any] = field(default_factory=dict[str, Any])
    attributes: AttributeDelta | None = None
    description: DescriptionChange | None = None
    problems: ProblemMap = field(default_factory=ProblemMap)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.staged
            or (self.attributes is not None and not self.attributes.is_empty)
            or self.description is not None
        )


@dataclass(frozen=True, slots=True)
class CacheEditResult:
    applied: bool
    problems: dict[str, str] = field(default_factory=dict[str, str])
