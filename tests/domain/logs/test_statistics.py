from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from geokeeper.domain.errors import ConsistencyFault
from geokeeper.domain.logs import (
    LogTransition,
    StatisticsUpdater,
    cache_counter_delta,
    replay_cache_statistics,
    user_counter_delta,
    verify_cache_statistics,
)
from geokeeper.domain.model import CacheRecommendation, CacheScore, LogType
from geokeeper.domain.policy import OcdePolicy, OcplPolicy
from tests.helpers.factories import make_cache, make_log, make_user
from tests.helpers.fakes import RecordingAssets
from tests.helpers.memory import MemoryStore

if TYPE_CHECKING:
    from geokeeper.domain.model import Geocache, User

MAY_1 = datetime(2024, 5, 1, 10, tzinfo=UTC)
MAY_10 = datetime(2024, 5, 10, 10, tzinfo=UTC)


@pytest.mark.parametrize(
    ("old", "new", "expected"),
    [
        (None, LogType.FOUND_IT, (1, 0, 0)),
        (LogType.FOUND_IT, LogType.DIDNT_FIND_IT, (-1, 1, 0)),
        (LogType.ATTENDED, LogType.WILL_ATTEND, (-1, 1, 0)),
        (LogType.COMMENT, LogType.NEEDS_MAINTENANCE, (0, 0, -1)),
        (None, LogType.ARCHIVED, (0, 0, 0)),
    ],
)
def test_cache_counter_delta(
    old: LogType | None, new: LogType, expected: tuple[int, int, int]
) -> None:
    assert cache_counter_delta(old, new) == expected


def test_user_counters_ignore_event_logs() -> None:
    assert user_counter_delta(LogType.ATTENDED, LogType.FOUND_IT) == (1, 0, 0)
    assert user_counter_delta(None, LogType.WILL_ATTEND) == (0, 0, 0)


@pytest.mark.parametrize("logtype", list(LogType))
def test_self_transition_is_zero_sum(logtype: LogType) -> None:
    assert cache_counter_delta(logtype, logtype) == (0, 0, 0)
    assert user_counter_delta(logtype, logtype) == (0, 0, 0)


def test_replay_skips_soft_deleted_logs() -> None:
    owner, finder = make_user("owner"), make_user()
    cache = make_cache(owner)
    logs = [
        make_log(cache, finder, date=MAY_1),
        make_log(cache, finder, date=MAY_10, deleted=True),
        make_log(cache, finder, LogType.COMMENT),
        make_log(cache, owner, LogType.WILL_ATTEND),
    ]

    ocpl = replay_cache_statistics(logs, OcplPolicy())
    ocde = replay_cache_statistics(logs, OcdePolicy())

    assert (ocpl.founds, ocpl.notfounds, ocpl.notes, ocpl.last_found) == (1, 1, 1, MAY_1)
    assert (ocde.founds, ocde.last_found) == (2, MAY_10)


def test_verify_detects_divergence() -> None:
    owner, finder = make_user("owner"), make_user()
    cache = make_cache(owner, founds=1, last_found=MAY_1)
    logs = [make_log(cache, finder, date=MAY_1)]

    assert verify_cache_statistics(cache, logs, OcplPolicy()).founds == 1

    cache.founds = 2
    with pytest.raises(ConsistencyFault, match="diverge"):
        verify_cache_statistics(cache, logs, OcplPolicy())


def test_rating_round_trip_restores_average() -> None:
    cache = make_cache(make_user("owner"), score=3.5, votes=2)

    cache.add_vote(5.0)
    cache.withdraw_vote(5.0)

    assert cache.votes == 2
    assert cache.score == pytest.approx(3.5)


def test_withdrawing_last_vote_resets_score() -> None:
    cache = make_cache(make_user("owner"))

    cache.add_vote(4.0)
    cache.withdraw_vote(4.0)

    assert (cache.score, cache.votes) == (0.0, 0)


class TestStatisticsUpdater:
    @pytest.fixture
    def store(self) -> MemoryStore:
        return MemoryStore()

    @pytest.fixture
    def finder(self, store: MemoryStore) -> User:
        finder = make_user(founds_count=3)
        store.repositories.users.add(finder)
        return finder

    @pytest.fixture
    def cache(self, store: MemoryStore) -> Geocache:
        owner = make_user("owner")
        cache = make_cache(owner)
        store.repositories.users.add(owner)
        store.repositories.caches.add(cache)
        return cache

    def test_new_find_updates_cache_and_user(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        store.repositories.logs.add(make_log(cache, finder, date=MAY_1))
        updater = StatisticsUpdater(policy=OcplPolicy(), assets=RecordingAssets())

        updater.apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(new_type=LogType.FOUND_IT, new_date=MAY_1),
        )

        assert (cache.founds, cache.last_found) == (1, MAY_1)
        assert finder.founds_count == 4

    def test_counters_never_go_negative(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        finder.founds_count = 0
        entry = make_log(cache, finder, LogType.DIDNT_FIND_IT, date=MAY_1)
        store.repositories.logs.add(entry)

        StatisticsUpdater(policy=OcplPolicy(), assets=RecordingAssets()).apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(
                new_type=LogType.DIDNT_FIND_IT,
                new_date=MAY_1,
                old_type=LogType.FOUND_IT,
                old_date=MAY_1,
            ),
        )

        assert (cache.founds, cache.notfounds, cache.last_found) == (0, 1, None)
        assert (finder.founds_count, finder.notfounds_count) == (0, 1)

    def test_moving_a_find_later_advances_last_found(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        cache.founds, cache.last_found = 1, MAY_1
        store.repositories.logs.add(make_log(cache, finder, date=MAY_10))

        StatisticsUpdater(policy=OcplPolicy(), assets=RecordingAssets()).apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(
                new_type=LogType.FOUND_IT,
                new_date=MAY_10,
                old_type=LogType.FOUND_IT,
                old_date=MAY_1,
            ),
        )

        assert (cache.founds, cache.last_found) == (1, MAY_10)
        assert finder.founds_count == 3

    def test_unfinding_withdraws_rating_and_recommendation(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        cache.founds, cache.score, cache.votes = 1, 4.0, 1
        store.repositories.logs.add(make_log(cache, finder, LogType.DIDNT_FIND_IT))
        store.repositories.scores.add(CacheScore(cache_id=cache.id, user_id=finder.id, score=4.0))
        store.repositories.recommendations.add(
            CacheRecommendation(cache_id=cache.id, user_id=finder.id, rating_date=MAY_1)
        )

        StatisticsUpdater(policy=OcplPolicy(), assets=RecordingAssets()).apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(
                new_type=LogType.DIDNT_FIND_IT,
                new_date=MAY_1,
                old_type=LogType.FOUND_IT,
                old_date=MAY_1,
            ),
        )

        assert store.repositories.scores.get(cache.id, finder.id) is None
        assert store.repositories.recommendations.get(cache.id, finder.id) is None
        assert (cache.score, cache.votes) == (0.0, 0)

    def test_recommendation_follows_remaining_find_on_multi_find_variant(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        store.repositories.logs.add(make_log(cache, finder, LogType.DIDNT_FIND_IT, date=MAY_10))
        store.repositories.logs.add(make_log(cache, finder, date=MAY_1))
        store.repositories.recommendations.add(
            CacheRecommendation(cache_id=cache.id, user_id=finder.id, rating_date=MAY_10)
        )

        StatisticsUpdater(policy=OcdePolicy(), assets=RecordingAssets()).apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(
                new_type=LogType.DIDNT_FIND_IT,
                new_date=MAY_10,
                old_type=LogType.FOUND_IT,
                old_date=MAY_10,
            ),
        )

        recommendation = store.repositories.recommendations.get(cache.id, finder.id)
        assert recommendation is not None
        assert recommendation.rating_date == MAY_1

    def test_trigger_maintained_counters_are_left_alone(
        self, store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        StatisticsUpdater(policy=OcdePolicy(), assets=RecordingAssets()).apply(
            store.repositories,
            cache,
            finder.id,
            LogTransition(new_type=LogType.FOUND_IT, new_date=MAY_1),
        )

        assert (cache.founds, cache.last_found) == (0, None)
        assert finder.founds_count == 3


def test_invalidate_assets_on_find_and_availability_changes() -> None:
    assets = RecordingAssets()
    updater = StatisticsUpdater(policy=OcplPolicy(), assets=assets)
    actor, owner = make_user(), make_user("owner")

    assert updater.invalidate_assets(
        actor_id=actor.id, owner_id=owner.id, old_type=None, new_type=LogType.FOUND_IT
    ) == [actor.id]
    assert updater.invalidate_assets(
        actor_id=actor.id, owner_id=owner.id, old_type=LogType.COMMENT, new_type=LogType.COMMENT
    ) == []
    assert updater.invalidate_assets(
        actor_id=owner.id,
        owner_id=owner.id,
        old_type=LogType.COMMENT,
        new_type=LogType.ARCHIVED,
    ) == [owner.id]
    assert assets.invalidated == [actor.id, owner.id]


def test_invalidate_assets_is_a_no_op_without_statpics() -> None:
    assets = RecordingAssets()
    updater = StatisticsUpdater(policy=OcdePolicy(), assets=assets)

    updater.invalidate_assets(
        actor_id=make_user().id, owner_id=None, old_type=None, new_type=LogType.FOUND_IT
    )

    assert assets.invalidated == []
