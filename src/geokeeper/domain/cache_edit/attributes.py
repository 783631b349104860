"""Attribute reconciliation against the catalog's incompatibility graph.

The request carries a signed delta (``"A1|-A2"``): plain codes are added,
codes prefixed with ``-`` are removed. Links that the delta does not mention
are never touched, so attributes the catalog does not know yet survive an
edit made through this core.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geokeeper.domain.cache_edit.dto import AttributeDelta
from geokeeper.domain.errors import InvalidParameter
from geokeeper.domain.problems import ProblemMap

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from geokeeper.domain.model import AttributeInfo
    from geokeeper.domain.ports.services import AttributeCatalog

log = logging.getLogger(__name__)

FIELD = "attributes"


def parse_attribute_delta(raw: str | Sequence[str]) -> tuple[list[str], list[str]]:
    """Split a signed delta into (codes to add, codes to remove), keeping order."""
    items = raw.split("|") if isinstance(raw, str) else list(raw)
    to_add: list[str] = []
    to_remove: list[str] = []
    for item in items:
        code = item.strip()
        if code.startswith("-"):
            to_remove.append(code[1:])
        else:
            to_add.append(code)
    return to_add, to_remove


class AttributeReconciler:
    def __init__(self, catalog: AttributeCatalog) -> None:
        self._catalog = catalog

    def reconcile(
        self,
        current: Iterable[str],
        raw_delta: str | Sequence[str],
        *,
        translate: Callable[[str], str] = str,
    ) -> AttributeDelta:
        requested_add, requested_remove = parse_attribute_delta(raw_delta)

        known: dict[str, AttributeInfo] = {}
        for code in (*requested_add, *requested_remove):
            info = self._catalog.get(code)
            if info is None:
                raise InvalidParameter(FIELD, f"Invalid A-Code: '{code}'")
            known[code] = info

        contradicting = [code for code in requested_add if code in requested_remove]
        if contradicting:
            raise InvalidParameter(
                FIELD, "Contradicting operations for " + " and ".join(dict.fromkeys(contradicting))
            )

        problems = ProblemMap()
        to_add: list[str] = []
        for code in requested_add:
            if known[code].is_addable:
                to_add.append(code)
            else:
                problems.add(
                    FIELD,
                    translate("The attribute '%s' cannot be added.") % known[code].name,
                )

        to_remove = frozenset(requested_remove)
        effective = (frozenset(current) - to_remove) | frozenset(to_add)

        conflicts: list[frozenset[str]] = []
        for code in to_add:
            for other in sorted(known[code].incompatible_acodes & effective):
                pair = frozenset({code, other})
                if other == code or pair in conflicts:
                    continue
                conflicts.append(pair)
                problems.add(
                    FIELD,
                    translate("The attributes '%s' and '%s' contradict.")
                    % (known[code].name, self._display_name(other)),
                )

        if conflicts:
            log.debug("Attribute delta produces %d incompatible pair(s)", len(conflicts))
        return AttributeDelta(
            to_add=frozenset(to_add),
            to_remove=to_remove,
            effective=effective,
            conflicts=tuple(conflicts),
            problems=problems,
        )

    def _display_name(self, acode: str) -> str:
        info = self._catalog.get(acode)
        return info.name if info is not None else acode
