"""Field-level validation and staging of cache edits.

Hard errors (malformed input) raise immediately; business-rule violations are
collected per field in the plan's ``ProblemMap`` and keep the field unstaged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geokeeper.domain.cache_edit.dto import CacheEditPlan
from geokeeper.domain.cache_edit.fields import (
    GC_CODE_PATTERN,
    TRIP_LIMITS,
    TRIP_MINIMUM,
    is_blank,
    normalize_gc_code,
    parse_cache_size,
    parse_cache_type,
    parse_half_step,
    parse_location,
    parse_trip_value,
)
from geokeeper.domain.errors import BadRequest, ConsistencyFault, InvalidParameter, MissingParameter

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from geokeeper.domain.cache_edit.attributes import AttributeReconciler
    from geokeeper.domain.cache_edit.descriptions import DescriptionManager
    from geokeeper.domain.cache_edit.dto import FieldChanges
    from geokeeper.domain.model import CacheSnapshot, CacheType
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.services import CapabilityService

log = logging.getLogger(__name__)


class CacheEditValidator:
    def __init__(
        self,
        *,
        policy: BranchPolicy,
        capabilities: CapabilityService,
        attributes: AttributeReconciler,
        descriptions: DescriptionManager,
        node_id: str,
        site_name: str,
    ) -> None:
        self._policy = policy
        self._capabilities = capabilities
        self._attributes = attributes
        self._descriptions = descriptions
        self._node_id = node_id
        self._site_name = site_name

    def validate(
        self,
        cache: CacheSnapshot,
        actor_id: UUID,
        changes: FieldChanges,
        *,
        langprefs: Sequence[str] = ("en",),
        translate: Callable[[str], str] = str,
    ) -> CacheEditPlan:
        if cache.node != self._node_id:
            raise ConsistencyFault(
                f"This site's database contains the geocache '{cache.code}' which has been "
                "imported from another node."
            )
        if cache.owner_id != actor_id:
            raise BadRequest("Only own caches may be edited.")

        plan = CacheEditPlan(cache=cache)

        self._check_name(plan, changes)
        new_type = self._check_type(plan, changes)
        self._check_location(plan, changes, translate)
        self._check_size(plan, changes, new_type, translate)
        for name in ("difficulty", "terrain"):
            self._check_half_step(plan, changes, name)
        for name in ("trip_time", "trip_distance"):
            self._check_trip(plan, changes, name, translate)
        self._check_password(plan, changes, new_type, translate)
        self._check_gc_code(plan, changes, translate)

        raw_attributes = changes.get("attributes")
        if raw_attributes is not None:
            plan.attributes = self._attributes.reconcile(
                cache.attribute_codes, raw_attributes, translate=translate
            )
            plan.problems.merge(plan.attributes.problems)

        description, description_problems = self._descriptions.prepare(
            cache, changes, langprefs=langprefs, translate=translate
        )
        plan.description = description
        plan.problems.merge(description_problems)

        if plan.problems:
            log.debug("Edit of %s has problems: %s", cache.code, plan.problems.as_dict())
        return plan

    # fields -------------------------------------------------------------------

    def _check_name(self, plan: CacheEditPlan, changes: FieldChanges) -> None:
        name = changes.get("name")
        if name is None:
            return
        old_name = changes.get("old_name")
        if old_name is None:
            raise MissingParameter("old_name")
        if old_name != plan.cache.name:
            raise InvalidParameter("old_name", f"'{old_name}' does not match the cache name.")
        if name != plan.cache.name:
            plan.staged["name"] = str(name)

    def _check_type(self, plan: CacheEditPlan, changes: FieldChanges) -> CacheType:
        raw = changes.get("type")
        if raw is None:
            return plan.cache.type
        cache_type = parse_cache_type(raw, self._capabilities)
        if cache_type != plan.cache.type:
            plan.staged["type"] = cache_type
        return cache_type

    def _check_location(
        self, plan: CacheEditPlan, changes: FieldChanges, translate: Callable[[str], str]
    ) -> None:
        raw = changes.get("location")
        if raw is None:
            return
        coords = parse_location(raw)
        if not coords.latitude_in_range:
            plan.problems.add("location", translate("Latitude degrees must range between -90 and 90."))
        elif not coords.longitude_in_range:
            plan.problems.add(
                "location", translate("Longitude degrees must range between -180 and 180.")
            )
        elif coords.is_null_island:
            plan.problems.add("location", translate("Please enter the coordinates of the cache."))
        elif coords != plan.cache.coordinates:
            plan.staged["latitude"] = coords.latitude
            plan.staged["longitude"] = coords.longitude

    def _check_size(
        self,
        plan: CacheEditPlan,
        changes: FieldChanges,
        new_type: CacheType,
        translate: Callable[[str], str],
    ) -> None:
        sizes = self._capabilities.sizes_for_type(new_type)
        raw = changes.get("size")
        if raw is not None:
            size = parse_cache_size(raw, self._capabilities)
            if size not in sizes:
                plan.problems.add(
                    "size", translate("This size is not available for this type of cache.")
                )
            elif size != plan.cache.size:
                plan.staged["size"] = size
            return
        if new_type == plan.cache.type or plan.cache.size in sizes:
            return
        if len(sizes) == 1:
            (only_size,) = sizes
            log.debug("Type change of %s forces size %s", plan.cache.code, only_size)
            plan.staged["size"] = only_size
        else:
            plan.problems.add("type", translate("Cache type does not match cache size."))

    def _check_half_step(self, plan: CacheEditPlan, changes: FieldChanges, name: str) -> None:
        raw = changes.get(name)
        if is_blank(raw):
            return
        value = parse_half_step(name, raw)
        if value != getattr(plan.cache, name):
            plan.staged[name] = value

    def _check_trip(
        self,
        plan: CacheEditPlan,
        changes: FieldChanges,
        name: str,
        translate: Callable[[str], str],
    ) -> None:
        raw = changes.get(name)
        if is_blank(raw):
            return
        value = parse_trip_value(name, raw)
        current: float = getattr(plan.cache, name)
        max_value = max(current, TRIP_LIMITS[name])
        if value is not None and not TRIP_MINIMUM <= value <= max_value:
            if name == "trip_time":
                message = translate(
                    "Invalid trip time; must range between 1 minute and %d hours."
                )
            else:
                message = translate("Invalid trip distance; must range between 0.01 and %d km.")
            plan.problems.add(name, message % max_value)
            return
        new_value = value if value is not None else 0.0
        if new_value != current:
            plan.staged[name] = new_value

    def _check_password(
        self,
        plan: CacheEditPlan,
        changes: FieldChanges,
        new_type: CacheType,
        translate: Callable[[str], str],
    ) -> None:
        cache = plan.cache
        max_length = self._capabilities.password_max_length(new_type)
        forbidden = self._policy.passwords_forbidden(new_type, cache.date_created)

        raw = changes.get("passwd")
        if raw is not None:
            password = str(raw)
            if password and forbidden:
                plan.problems.add(
                    "passwd",
                    translate("%s does not allow log passwords for traditional caches.")
                    % self._site_name,
                )
            elif len(password) > max_length:
                plan.problems.add(
                    "passwd",
                    translate("The password must not be longer than %d characters.") % max_length,
                )
            elif password != cache.password:
                plan.staged["password"] = password
            return

        if new_type == cache.type or not cache.password:
            return
        if self._policy.clears_password_on_type_change(new_type):
            log.debug("Clearing log password of %s after type change", cache.code)
            plan.staged["password"] = ""
            return
        if forbidden or len(cache.password) > max_length:
            plan.problems.add(
                "passwd",
                translate("The new cache type does not allow the current log password."),
            )

    def _check_gc_code(
        self, plan: CacheEditPlan, changes: FieldChanges, translate: Callable[[str], str]
    ) -> None:
        raw = changes.get("gc_code")
        if raw is None:
            return
        gc_code = normalize_gc_code(raw)
        if not GC_CODE_PATTERN.match(gc_code):
            plan.problems.add("gc_code", translate("Invalid GC code"))
        elif gc_code != plan.cache.gc_code:
            plan.staged["gc_code"] = gc_code
