"""Parsers for individual cache fields.

Each parser turns a raw request value into a typed value or raises a hard
error for malformed input. Business-rule checks that produce soft problems
live in ``validator.py``.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Final

from geokeeper.domain.errors import InvalidParameter
from geokeeper.domain.model import HALF_POINT_RATINGS, CacheSize, CacheType, Coordinates

if TYPE_CHECKING:
    from geokeeper.domain.ports.services import CapabilityService

HALF_STEP_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[0-9](\.[0-9])?$")
TRIP_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(null|[0-9]+\.?[0-9]*)$")
GC_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(|GC[0-9A-HJKMNPQRTV-Z]{2,})$")

# Upper bounds accepted for new values; larger values entered elsewhere are retained.
TRIP_LIMITS: Final[dict[str, float]] = {"trip_time": 999, "trip_distance": 99999}
TRIP_MINIMUM: Final[float] = 0.01


def is_blank(raw: Any) -> bool:
    return raw is None or raw == ""


def parse_cache_type(raw: Any, capabilities: CapabilityService) -> CacheType:
    try:
        cache_type = CacheType(str(raw))
    except ValueError as exc:
        raise InvalidParameter("type") from exc
    if cache_type not in capabilities.cache_types():
        raise InvalidParameter("type")
    return cache_type


def parse_cache_size(raw: Any, capabilities: CapabilityService) -> CacheSize:
    try:
        size = CacheSize(str(raw))
    except ValueError as exc:
        raise InvalidParameter("size") from exc
    if size not in capabilities.cache_sizes():
        raise InvalidParameter("size")
    return size


def parse_location(raw: Any) -> Coordinates:
    """Accept ``"lat|lon"`` or a (lat, lon) pair."""
    if isinstance(raw, str):
        parts = raw.split("|")
    elif isinstance(raw, (tuple, list)):
        parts = list(raw)  # pyright: ignore[reportUnknownArgumentType]
    else:
        raise InvalidParameter("location")
    if len(parts) != 2:  # noqa: PLR2004
        raise InvalidParameter("location")
    try:
        latitude, longitude = (float(part) for part in parts)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter("location") from exc
    return Coordinates(latitude, longitude)


def parse_half_step(name: str, raw: Any) -> float:
    """Difficulty and terrain: 1 to 5 in steps of 0.5."""
    text = str(raw)
    if not HALF_STEP_PATTERN.match(text):
        raise InvalidParameter(name)
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise InvalidParameter(name) from exc
    if value not in HALF_POINT_RATINGS:
        raise InvalidParameter(name)
    return float(value)


def parse_trip_value(name: str, raw: Any) -> float | None:
    """Return the number, or ``None`` for the literal ``'null'``."""
    text = str(raw)
    if not TRIP_PATTERN.match(text):
        raise InvalidParameter(name)
    if text == "null":
        return None
    return float(text)


def normalize_gc_code(raw: Any) -> str:
    code = str(raw)
    if code == "":
        raise InvalidParameter(
            "gc_code", "Must not be empty. Supply 'null' if you want to remove the GC code."
        )
    if code == "null":
        return ""
    # letter O is a frequent misspelling of zero
    return code.replace("O", "0")
