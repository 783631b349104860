"""Where geokeeper keeps its database, HTTP cache and rendered statistics images."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var, optional_path_env_var
from .errors import InvalidConfigurationValueError

APP_DIR_NAME: Final[str] = "geokeeper"
DEFAULT_DB_FILENAME: Final[str] = "geokeeper.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
STATPICS_SUBDIR: Final[str] = "var/images/statpics"
_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    statpics_override: Path | None = None

    def resolve_data_dir(self, *, ensure: bool = False) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self) -> Path:
        return self.resolve_data_dir(ensure=True) / DEFAULT_DB_FILENAME

    def http_cache_path(self) -> Path:
        return self.resolve_data_dir(ensure=True) / HTTP_CACHE_FILENAME

    def statpics_dir(self) -> Path:
        """Directory holding the per-user statistics images.

        The web frontend renders these; geokeeper only deletes stale ones, so the
        directory is never created here.
        """
        if self.statpics_override is not None:
            return self.statpics_override.expanduser().resolve()
        return self.resolve_data_dir() / STATPICS_SUBDIR


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _default_data_dir() -> Path:
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def _flag(name: str) -> bool:
    raw = optional_env_var(name, "false").lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise InvalidConfigurationValueError(name, raw, "a boolean flag")


def get_storage_config() -> StorageConfig:
    return StorageConfig(
        data_dir=optional_path_env_var("GEOKEEPER_DATA_DIR") or _default_data_dir(),
        statpics_override=optional_path_env_var("GEOKEEPER_STATPICS_DIR"),
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = _flag("GEOKEEPER_SQL_ECHO")
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri, echo=echo)
    database_path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{database_path}", echo=echo)


def get_database_uri() -> str:
    return get_database_config().uri


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()
