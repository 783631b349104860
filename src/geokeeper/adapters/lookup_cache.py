"""Explicitly owned read-through cache for derived lookups.

Callers create one instance and pass it to the components that need it;
nothing here is module-global.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _Entry:
    value: Any
    expires_at: float


class ReadThroughCache:
    """Key -> value with a per-entry time to live.

    ``loader`` is called on a miss or after expiry; its result is stored for
    ``ttl`` seconds (the cache default when not given).
    """

    def __init__(
        self,
        *,
        default_ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = Lock()

    def get_or_load[T](
        self,
        key: str,
        loader: Callable[[], T],
        *,
        ttl: float | None = None,
    ) -> T:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at > now:
                return entry.value
        value = loader()
        seconds = self._default_ttl if ttl is None else ttl
        log.debug("Cached %s for %.0f seconds", key, seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=now + seconds)
        return value

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(str(key))
        return entry is not None and entry.expires_at > self._clock()
