"""Branch policy: the single seam for differences between backend variants.

Every rule that depends on which backend dialect a site runs asks a
``BranchPolicy`` instead of comparing the variant itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar, Final

from geokeeper.domain.model.enums import BranchVariant, CacheType

if TYPE_CHECKING:
    from geokeeper.domain.model.log import LogEntry
    from geokeeper.domain.model.snapshots import LogSnapshot

# Traditional caches listed after this moment may not carry a log password on oc.pl.
TRADITIONAL_PASSWORD_CUTOFF: Final[datetime] = datetime(2010, 6, 18, 20, 3, 18, tzinfo=UTC)


class BranchPolicy(ABC):
    """Answers variant-dependent questions for the rule components."""

    variant: ClassVar[BranchVariant]

    # statistics (cache and user counters) are kept current by database triggers
    statistics_maintained_by_triggers: ClassVar[bool]
    # deleted logs stay in the log table with a flag instead of being moved away
    soft_deletes_logs: ClassVar[bool]
    allows_multiple_finds: ClassVar[bool]
    has_ratings: ClassVar[bool]
    sets_last_modified_explicitly: ClassVar[bool]
    invalidates_statpics: ClassVar[bool]
    # keep a recommendation while another find remains, moving its date
    updates_recommendation_date: ClassVar[bool]
    # ``text_html`` value stored for comments submitted as plain text
    plaintext_comment_flag: ClassVar[int]

    @abstractmethod
    def passwords_forbidden(self, cache_type: CacheType, date_created: datetime) -> bool:
        """Whether a cache of this type and age may not have a log password."""

    def password_max_length(self, cache_type: CacheType, column_length: int) -> int:
        _ = cache_type
        return column_length

    def clears_password_on_type_change(self, new_type: CacheType) -> bool:
        """Whether an existing log password is dropped when the type becomes ``new_type``."""
        _ = new_type
        return False

    def is_active_log(self, entry: LogEntry | LogSnapshot) -> bool:
        """Soft-delete predicate: does ``entry`` count as part of the log history?"""
        if self.soft_deletes_logs:
            return not entry.deleted
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(variant={self.variant.value!r})"


class OcplPolicy(BranchPolicy):
    variant = BranchVariant.OCPL

    statistics_maintained_by_triggers = False
    soft_deletes_logs = True
    allows_multiple_finds = False
    has_ratings = True
    sets_last_modified_explicitly = True
    invalidates_statpics = True
    updates_recommendation_date = False
    plaintext_comment_flag = 2

    def passwords_forbidden(self, cache_type: CacheType, date_created: datetime) -> bool:
        if cache_type is not CacheType.TRADITIONAL:
            return False
        created = date_created if date_created.tzinfo else date_created.replace(tzinfo=UTC)
        return created > TRADITIONAL_PASSWORD_CUTOFF

    def password_max_length(self, cache_type: CacheType, column_length: int) -> int:
        if cache_type is CacheType.TRADITIONAL:
            return 0
        return column_length

    def clears_password_on_type_change(self, new_type: CacheType) -> bool:
        return new_type is not CacheType.TRADITIONAL


class OcdePolicy(BranchPolicy):
    variant = BranchVariant.OCDE

    statistics_maintained_by_triggers = True
    soft_deletes_logs = False
    allows_multiple_finds = True
    has_ratings = False
    sets_last_modified_explicitly = False
    invalidates_statpics = False
    updates_recommendation_date = True
    plaintext_comment_flag = 0

    def passwords_forbidden(self, cache_type: CacheType, date_created: datetime) -> bool:
        _ = cache_type, date_created
        return False


_POLICIES: Final[dict[BranchVariant, type[BranchPolicy]]] = {
    BranchVariant.OCPL: OcplPolicy,
    BranchVariant.OCDE: OcdePolicy,
}


def get_branch_policy(variant: BranchVariant) -> BranchPolicy:
    return _POLICIES[variant]()


__all__ = [
    "TRADITIONAL_PASSWORD_CUTOFF",
    "BranchPolicy",
    "OcdePolicy",
    "OcplPolicy",
    "get_branch_policy",
]
