from __future__ import annotations

import logging

import pytest

from geokeeper.config import InvalidConfigurationValueError, configure_logging, resolve_log_level


def test_log_level_defaults_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEOKEEPER_LOG_LEVEL", raising=False)

    assert resolve_log_level() == logging.INFO
    assert resolve_log_level(logging.ERROR) == logging.ERROR


def test_log_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOKEEPER_LOG_LEVEL", " debug ")

    assert resolve_log_level() == logging.DEBUG


def test_unknown_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOKEEPER_LOG_LEVEL", "chatty")

    with pytest.raises(InvalidConfigurationValueError, match="GEOKEEPER_LOG_LEVEL"):
        resolve_log_level()


@pytest.mark.parametrize(
    ("level", "quiet_level"),
    [
        (logging.INFO, logging.WARNING),
        (logging.ERROR, logging.ERROR),
        (logging.DEBUG, logging.DEBUG),
    ],
)
def test_library_loggers_are_kept_quiet(level: int, quiet_level: int) -> None:
    configure_logging(level=level)

    assert logging.getLogger("httpx").level == quiet_level
    assert logging.getLogger("hishel").level == quiet_level
