"""Log publication rules, comment encoding and derived statistics."""

from __future__ import annotations

from .comments import CommentEncoder, parse_comment_format
from .dto import CacheStatistics, EditLogResult, LogTransition, PublishLogResult
from .rules import FUTURE_GRACE, LogRuleEngine, parse_log_type, parse_when
from .service import LogService
from .statistics import (
    StatisticsUpdater,
    cache_counter_delta,
    replay_cache_statistics,
    user_counter_delta,
    verify_cache_statistics,
)

__all__ = [
    "FUTURE_GRACE",
    "CacheStatistics",
    "CommentEncoder",
    "EditLogResult",
    "LogRuleEngine",
    "LogService",
    "LogTransition",
    "PublishLogResult",
    "StatisticsUpdater",
    "cache_counter_delta",
    "parse_comment_format",
    "parse_log_type",
    "parse_when",
    "replay_cache_statistics",
    "user_counter_delta",
    "verify_cache_statistics",
]
