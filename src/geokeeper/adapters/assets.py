"""Per-user derived file invalidation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID

log = logging.getLogger(__name__)


class StatpicInvalidator:
    """Deletes cached statistics pictures so they are rendered again."""

    def __init__(self, statpics_dir: Path) -> None:
        self._statpics_dir = statpics_dir

    def path_for(self, user_id: UUID) -> Path:
        return self._statpics_dir / f"statpic{user_id}.jpg"

    def invalidate_user(self, user_id: UUID) -> None:
        path = self.path_for(user_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        log.debug("Removed statpic %s", path)
