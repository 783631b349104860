"""Database-maintained log statistics for variants that keep them in triggers.

The triggers recompute the counters of the affected cache and user from the
log table after every insert, update and delete.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from sqlalchemy import text

from geokeeper.domain.model import FOUND_LOG_TYPES, NOT_FOUND_LOG_TYPES, LogType

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

SUPPORTED_DIALECTS: Final[frozenset[str]] = frozenset({"sqlite"})
TRIGGER_NAMES: Final[tuple[str, ...]] = (
    "cache_log_statistics_insert",
    "cache_log_statistics_update",
    "cache_log_statistics_delete",
)


def _sql_list(types: frozenset[LogType]) -> str:
    quoted = (logtype.value.replace("'", "''") for logtype in sorted(types))
    return ", ".join(f"'{value}'" for value in quoted)


_FOUND = _sql_list(FOUND_LOG_TYPES)
_NOT_FOUND = _sql_list(NOT_FOUND_LOG_TYPES)
_COMMENT = _sql_list(frozenset({LogType.COMMENT}))
_USER_FOUND = _sql_list(frozenset({LogType.FOUND_IT}))
_USER_NOT_FOUND = _sql_list(frozenset({LogType.DIDNT_FIND_IT}))


def _refresh_cache(row: str) -> str:
    return f"""
    UPDATE cache SET
        founds = (SELECT COUNT(*) FROM cache_log
                  WHERE cache_id = {row}.cache_id AND type IN ({_FOUND})),
        notfounds = (SELECT COUNT(*) FROM cache_log
                     WHERE cache_id = {row}.cache_id AND type IN ({_NOT_FOUND})),
        notes = (SELECT COUNT(*) FROM cache_log
                 WHERE cache_id = {row}.cache_id AND type IN ({_COMMENT})),
        last_found = (SELECT MAX(date) FROM cache_log
                      WHERE cache_id = {row}.cache_id AND type IN ({_FOUND}))
    WHERE id = {row}.cache_id;"""


def _refresh_user(row: str) -> str:
    return f"""
    UPDATE user_account SET
        founds_count = (SELECT COUNT(*) FROM cache_log
                        WHERE user_id = {row}.user_id AND type IN ({_USER_FOUND})),
        notfounds_count = (SELECT COUNT(*) FROM cache_log
                           WHERE user_id = {row}.user_id AND type IN ({_USER_NOT_FOUND})),
        log_notes_count = (SELECT COUNT(*) FROM cache_log
                           WHERE user_id = {row}.user_id AND type IN ({_COMMENT}))
    WHERE id = {row}.user_id;"""


def _trigger(name: str, event: str, rows: tuple[str, ...]) -> str:
    body = "".join(_refresh_cache(row) + _refresh_user(row) for row in rows)
    return (
        f"CREATE TRIGGER IF NOT EXISTS {name} AFTER {event} ON cache_log "
        f"FOR EACH ROW BEGIN{body}\nEND"
    )


STATEMENTS: Final[tuple[str, ...]] = (
    _trigger(TRIGGER_NAMES[0], "INSERT", ("NEW",)),
    _trigger(TRIGGER_NAMES[1], "UPDATE", ("OLD", "NEW")),
    _trigger(TRIGGER_NAMES[2], "DELETE", ("OLD",)),
)


def install_statistics_triggers(engine: Engine) -> bool:
    """Create the statistics triggers; return False for unsupported dialects."""

    if engine.dialect.name not in SUPPORTED_DIALECTS:
        log.warning(
            "Statistics triggers are not available for dialect %s; counters will not be "
            "maintained",
            engine.dialect.name,
        )
        return False
    with engine.begin() as connection:
        for statement in STATEMENTS:
            connection.execute(text(statement))
    log.info("Installed %d statistics triggers", len(STATEMENTS))
    return True


def drop_statistics_triggers(engine: Engine) -> None:
    with engine.begin() as connection:
        for name in TRIGGER_NAMES:
            connection.execute(text(f"DROP TRIGGER IF EXISTS {name}"))
