"""Attribute index response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, RootModel

from geokeeper.domain.model import AttributeInfo


class AttributeIndexEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    is_addable: bool = True
    incompatible_acodes: list[str] = Field(default_factory=list[str])

    def to_domain(self, acode: str) -> AttributeInfo:
        return AttributeInfo(
            acode=acode,
            name=self.name,
            is_addable=self.is_addable,
            incompatible_acodes=frozenset(self.incompatible_acodes),
        )


class AttributeIndex(RootModel[dict[str, AttributeIndexEntry]]):
    """``acode -> entry`` as returned by the attribute index service."""

    def to_domain(self) -> dict[str, AttributeInfo]:
        return {acode: entry.to_domain(acode) for acode, entry in self.root.items()}
