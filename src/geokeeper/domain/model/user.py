"""Users and their aggregate log counters."""

from __future__ import annotations

from dataclasses import dataclass

from geokeeper.domain.model.entity import Entity


@dataclass(eq=False, kw_only=True)
class User(Entity):
    username: str
    founds_count: int = 0
    notfounds_count: int = 0
    log_notes_count: int = 0

    def adjust_log_counters(self, *, found: int, not_found: int, comment: int) -> None:
        """Apply signed deltas, never letting a counter drop below zero."""
        self.founds_count = max(0, self.founds_count + found)
        self.notfounds_count = max(0, self.notfounds_count + not_found)
        self.log_notes_count = max(0, self.log_notes_count + comment)
