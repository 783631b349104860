"""Application configuration helpers."""

from __future__ import annotations

from .attribute_index import (
    AttributeIndexConfig,
    get_attribute_index_config,
    get_attribute_index_file,
)
from .env import (
    optional_env_var,
    optional_int_env_var,
    optional_path_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import (
    ConfigurationError,
    InvalidConfigurationValueError,
    MissingConfigurationError,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, resolve_log_level
from .site import SiteConfig, get_site_config, parse_branch, parse_language_priority
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "AttributeIndexConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationValueError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SiteConfig",
    "StorageConfig",
    "configure_logging",
    "get_attribute_index_config",
    "get_attribute_index_file",
    "get_database_config",
    "get_database_uri",
    "get_http_cache_path",
    "get_site_config",
    "get_storage_config",
    "optional_env_var",
    "optional_int_env_var",
    "optional_path_env_var",
    "parse_branch",
    "parse_language_priority",
    "require_env_var",
    "require_env_vars",
    "resolve_log_level",
]
