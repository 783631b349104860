"""Site-level settings: backend variant, node identity and local conventions."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from geokeeper.domain.model.enums import BranchVariant

from .env import optional_env_var, optional_int_env_var, optional_path_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationValueError

DEFAULT_PASSWORD_COLUMN_LENGTH = 20
DEFAULT_FOUNDS_PER_RECOMMENDATION = 10

DEFAULT_LANGUAGE_PRIORITY: dict[BranchVariant, tuple[str, ...]] = {
    BranchVariant.OCPL: ("PL", "EN"),
    BranchVariant.OCDE: ("DE", "EN", "FR", "NL", "IT", "ES"),
}


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Holds the settings that distinguish one installation from another."""

    branch: BranchVariant
    node_id: str
    site_name: str = "Opencaching"
    language_priority: tuple[str, ...] = ("EN",)
    password_column_length: int = DEFAULT_PASSWORD_COLUMN_LENGTH
    founds_per_recommendation: int = DEFAULT_FOUNDS_PER_RECOMMENDATION
    # gettext catalogs; messages stay untranslated without one
    locale_dir: Path | None = None


def parse_language_priority(raw: str) -> tuple[str, ...]:
    languages = tuple(part.strip().upper() for part in raw.split("|") if part.strip())
    if not languages:
        raise ConfigurationError("Language priority list must not be empty")
    return languages


def parse_branch(raw: str) -> BranchVariant:
    try:
        return BranchVariant(raw.strip().lower())
    except ValueError as exc:
        known = ", ".join(variant.value for variant in BranchVariant)
        raise InvalidConfigurationValueError("GEOKEEPER_BRANCH", raw, f"one of: {known}") from exc


def get_site_config() -> SiteConfig:
    values = require_env_vars(("GEOKEEPER_BRANCH", "GEOKEEPER_NODE_ID"))
    branch = parse_branch(values["GEOKEEPER_BRANCH"])
    priority_default = "|".join(DEFAULT_LANGUAGE_PRIORITY[branch])
    return SiteConfig(
        branch=branch,
        node_id=values["GEOKEEPER_NODE_ID"].strip(),
        site_name=optional_env_var("GEOKEEPER_SITE_NAME", "Opencaching"),
        language_priority=parse_language_priority(
            optional_env_var("GEOKEEPER_LANGUAGE_PRIORITY", priority_default)
        ),
        password_column_length=optional_int_env_var(
            "GEOKEEPER_PASSWORD_COLUMN_LENGTH", DEFAULT_PASSWORD_COLUMN_LENGTH
        ),
        founds_per_recommendation=optional_int_env_var(
            "GEOKEEPER_FOUNDS_PER_RECOMMENDATION", DEFAULT_FOUNDS_PER_RECOMMENDATION
        ),
        locale_dir=optional_path_env_var("GEOKEEPER_LOCALE_DIR"),
    )
