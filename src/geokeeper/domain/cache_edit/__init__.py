"""Validation and atomic application of partial cache edits."""

from __future__ import annotations

from .attributes import AttributeReconciler, parse_attribute_delta
from .descriptions import DescriptionManager, default_description_language
from .dto import AttributeDelta, CacheEditPlan, CacheEditResult, DescriptionChange, FieldChanges
from .service import CacheEditService, load_cache_snapshot
from .validator import CacheEditValidator

__all__ = [
    "AttributeDelta",
    "AttributeReconciler",
    "CacheEditPlan",
    "CacheEditResult",
    "CacheEditService",
    "CacheEditValidator",
    "DescriptionChange",
    "DescriptionManager",
    "FieldChanges",
    "default_description_language",
    "load_cache_snapshot",
    "parse_attribute_delta",
]
