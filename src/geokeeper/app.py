"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from geokeeper.adapters.assets import StatpicInvalidator
from geokeeper.adapters.attribute_index import (
    AttributeIndexClient,
    HttpAttributeCatalog,
    StaticAttributeCatalog,
)
from geokeeper.adapters.capabilities import LocalCapabilities
from geokeeper.adapters.html_sanitizer import SoupHtmlSanitizer
from geokeeper.adapters.localization import GettextLocalizer
from geokeeper.adapters.lookup_cache import ReadThroughCache
from geokeeper.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from geokeeper.config import (
    get_attribute_index_config,
    get_attribute_index_file,
    get_site_config,
    get_storage_config,
)
from geokeeper.domain.cache_edit import (
    AttributeReconciler,
    CacheEditService,
    CacheEditValidator,
    DescriptionManager,
)
from geokeeper.domain.logs import CommentEncoder, LogRuleEngine, LogService, StatisticsUpdater
from geokeeper.domain.policy import get_branch_policy
from geokeeper.domain.transaction import TransactionCoordinator

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from uuid import UUID

    from geokeeper.config import SiteConfig
    from geokeeper.domain.cache_edit import CacheEditResult
    from geokeeper.domain.logs import CacheStatistics, EditLogResult, PublishLogResult
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports import (
        AssetInvalidator,
        AttributeCatalog,
        CapabilityService,
        HtmlSanitizer,
        Localizer,
    )
    from geokeeper.domain.ports.unit_of_work import GeokeeperUnitOfWork

type UnitOfWorkFactory = Callable[[], GeokeeperUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class Services:
    """The wired use cases of one site."""

    site: SiteConfig
    policy: BranchPolicy
    cache_edits: CacheEditService
    logs: LogService


def build_attribute_catalog(lookup_cache: ReadThroughCache) -> AttributeCatalog:
    """Prefer a local attribute index dump; otherwise query the attribute index service."""

    path = get_attribute_index_file()
    if path is not None:
        catalog = StaticAttributeCatalog.from_file(path)
        log.info("Loaded %d attributes from %s", len(catalog), path)
        return catalog
    client = AttributeIndexClient(config=get_attribute_index_config())
    return HttpAttributeCatalog(client, lookup_cache)


def build_services(
    *,
    site: SiteConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    catalog: AttributeCatalog | None = None,
    capabilities: CapabilityService | None = None,
    localizer: Localizer | None = None,
    sanitizer: HtmlSanitizer | None = None,
    assets: AssetInvalidator | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Services:
    """Wire the domain services, filling every collaborator not given with its default."""

    effective_site = site or get_site_config()
    policy = get_branch_policy(effective_site.branch)
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    effective_clock = clock or (lambda: datetime.now(UTC))
    lookup_cache = ReadThroughCache()

    effective_capabilities = capabilities or LocalCapabilities(
        site=effective_site,
        policy=policy,
        unit_of_work_factory=effective_uow,
        cache=lookup_cache,
    )
    effective_sanitizer = sanitizer or SoupHtmlSanitizer()
    effective_assets = assets or StatpicInvalidator(get_storage_config().statpics_dir())
    coordinator = TransactionCoordinator(effective_uow)

    descriptions = DescriptionManager(
        capabilities=effective_capabilities,
        sanitizer=effective_sanitizer,
        language_priority=effective_site.language_priority,
        clock=effective_clock,
    )
    validator = CacheEditValidator(
        policy=policy,
        capabilities=effective_capabilities,
        attributes=AttributeReconciler(
            catalog if catalog is not None else build_attribute_catalog(lookup_cache)
        ),
        descriptions=descriptions,
        node_id=effective_site.node_id,
        site_name=effective_site.site_name,
    )
    cache_edits = CacheEditService(
        unit_of_work_factory=effective_uow,
        coordinator=coordinator,
        validator=validator,
        descriptions=descriptions,
        policy=policy,
        localizer=localizer or GettextLocalizer(effective_site.locale_dir),
        clock=effective_clock,
    )
    logs = LogService(
        unit_of_work_factory=effective_uow,
        coordinator=coordinator,
        rules=LogRuleEngine(
            policy=policy,
            founds_per_recommendation=effective_site.founds_per_recommendation,
            clock=effective_clock,
        ),
        comments=CommentEncoder(policy=policy, sanitizer=effective_sanitizer),
        statistics=StatisticsUpdater(policy=policy, assets=effective_assets),
        policy=policy,
        node_id=effective_site.node_id,
        clock=effective_clock,
    )
    log.info(
        "Wired services for %s node %s (%r)",
        effective_site.site_name,
        effective_site.node_id,
        policy,
    )
    return Services(site=effective_site, policy=policy, cache_edits=cache_edits, logs=logs)


def default_services() -> Services:
    """Start the database adapter if needed and wire services from the environment."""

    site = get_site_config()
    policy = get_branch_policy(site.branch)
    if not is_started():
        startup(statistics_triggers=policy.statistics_maintained_by_triggers)
    return build_services(site=site)


def validate_and_apply_cache_edit(
    cache_code: str,
    actor_id: UUID,
    field_changes: Mapping[str, Any],
    *,
    langprefs: Sequence[str] = ("en",),
    services: Services | None = None,
) -> CacheEditResult:
    effective = services or default_services()
    return effective.cache_edits.edit(cache_code, actor_id, field_changes, langprefs=langprefs)


def validate_and_publish_log(
    cache_code: str,
    actor_id: UUID,
    logtype: Any,
    when: Any,
    comment: str,
    comment_format: Any = None,
    password: str | None = None,
    *,
    recommend: bool = False,
    rating: Any = None,
    services: Services | None = None,
) -> PublishLogResult:
    effective = services or default_services()
    return effective.logs.publish(
        cache_code,
        actor_id,
        logtype,
        when,
        comment,
        comment_format,
        password,
        recommend=recommend,
        rating=rating,
    )


def validate_and_edit_log(
    log_id: UUID,
    actor_id: UUID,
    changes: Mapping[str, Any],
    *,
    services: Services | None = None,
) -> EditLogResult:
    effective = services or default_services()
    return effective.logs.edit(log_id, actor_id, changes)


def verify_cache_statistics(
    cache_code: str,
    *,
    services: Services | None = None,
) -> CacheStatistics:
    """Raise ``ConsistencyFault`` unless the cache counters match its log history."""

    effective = services or default_services()
    return effective.logs.verify_statistics(cache_code)
