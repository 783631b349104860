"""Per-user ratings and recommendations of caches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class CacheScore:
    """A user's rating of a cache, folded into ``Geocache.score``."""

    cache_id: UUID
    user_id: UUID
    score: float


@dataclass(eq=False, kw_only=True)
class CacheRecommendation:
    cache_id: UUID
    user_id: UUID
    rating_date: datetime | None = None
