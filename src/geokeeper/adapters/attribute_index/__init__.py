"""Attribute index adapter."""

from __future__ import annotations

from .catalog import HttpAttributeCatalog, StaticAttributeCatalog
from .client import AttributeIndexAPIError, AttributeIndexClient
from .schema import AttributeIndex, AttributeIndexEntry

__all__ = [
    "AttributeIndex",
    "AttributeIndexAPIError",
    "AttributeIndexClient",
    "AttributeIndexEntry",
    "HttpAttributeCatalog",
    "StaticAttributeCatalog",
]
