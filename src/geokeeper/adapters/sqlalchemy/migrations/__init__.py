"""Schema migrations for the cache, log and rating tables.

No ``alembic.ini`` is shipped; the Alembic configuration is built here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from geokeeper.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

SCRIPT_LOCATION: Final[Path] = Path(__file__).resolve().parent
HEAD: Final[str] = "head"

log = logging.getLogger(__name__)


def alembic_config(database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the newest revision."""

    if engine is None:
        command.upgrade(alembic_config(database_uri or get_database_uri()), HEAD)
        return

    config = alembic_config()
    with engine.begin() as connection:
        before = current_revision(connection)
        config.attributes["connection"] = connection
        command.upgrade(config, HEAD)
        after = current_revision(connection)
    if before != after:
        log.info("Upgraded schema from %s to %s", before or "empty database", after)
