from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from geokeeper.domain.errors import BadRequest, CannotPublish, ConsistencyFault, NotFound
from geokeeper.domain.model import CacheType, LogType
from tests.helpers.factories import NOW, make_cache, make_log, make_user

if TYPE_CHECKING:
    from geokeeper.domain.model import Geocache, User
    from tests.helpers.fakes import Wiring
    from tests.helpers.memory import MemoryStore

WHEN = "2024-05-01T10:00:00Z"
WHEN_DT = datetime(2024, 5, 1, 10, tzinfo=UTC)


@pytest.fixture
def owner(memory_store: MemoryStore) -> User:
    owner = make_user("owner")
    memory_store.repositories.users.add(owner)
    return owner


@pytest.fixture
def finder(memory_store: MemoryStore) -> User:
    finder = make_user("finder", founds_count=9)
    memory_store.repositories.users.add(finder)
    return finder


@pytest.fixture
def cache(memory_store: MemoryStore, owner: User) -> Geocache:
    cache = make_cache(owner)
    memory_store.repositories.caches.add(cache)
    return cache


def _stored_cache(store: MemoryStore, cache: Geocache) -> Geocache:
    stored = store.repositories.caches.get(cache.id)
    assert stored is not None
    return stored


def _stored_user(store: MemoryStore, user: User) -> User:
    stored = store.repositories.users.get(user.id)
    assert stored is not None
    return stored


def test_publish_find_updates_statistics(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    result = ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

    assert not result.duplicate
    entry = memory_store.repositories.logs.get(result.log_id)
    assert entry is not None
    assert (entry.type, entry.date, entry.text_html) == (LogType.FOUND_IT, WHEN_DT, 1)
    assert entry.date_created == NOW
    stored = _stored_cache(memory_store, cache)
    assert (stored.founds, stored.last_found) == (1, WHEN_DT)
    assert _stored_user(memory_store, finder).founds_count == 10
    assert ocpl.assets.invalidated == [finder.id]
    assert memory_store.commits == 1


def test_future_find_is_rejected_without_commit(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    with pytest.raises(CannotPublish, match="date in future"):
        ocpl.services.logs.publish(
            cache.code, finder.id, "Found it", "2024-06-02T12:00:00Z", "Too early"
        )

    assert memory_store.commits == 0
    assert _stored_cache(memory_store, cache).founds == 0


def test_owner_cannot_find_own_cache(ocpl: Wiring, cache: Geocache, owner: User) -> None:
    with pytest.raises(CannotPublish, match="You are the owner"):
        ocpl.services.logs.publish(cache.code, owner.id, "Found it", WHEN, "")


def test_second_find_is_rejected(ocpl: Wiring, cache: Geocache, finder: User) -> None:
    ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "First")

    with pytest.raises(CannotPublish, match="already submitted"):
        ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "Second")


def test_unknown_user_or_cache(ocpl: Wiring, cache: Geocache, finder: User) -> None:
    with pytest.raises(NotFound):
        ocpl.services.logs.publish("OP9999", finder.id, "Comment", WHEN, "Hi")
    with pytest.raises(NotFound):
        ocpl.services.logs.publish(cache.code, make_user().id, "Comment", WHEN, "Hi")


def test_foreign_cache_is_a_consistency_fault(
    ocpl: Wiring, memory_store: MemoryStore, owner: User, finder: User
) -> None:
    foreign = make_cache(owner, code="OC0001", node="other-node")
    memory_store.repositories.caches.add(foreign)

    with pytest.raises(ConsistencyFault):
        ocpl.services.logs.publish(foreign.code, finder.id, "Comment", WHEN, "Hi")


def test_password_protected_cache(
    ocpl: Wiring, memory_store: MemoryStore, owner: User, finder: User
) -> None:
    protected = make_cache(owner, code="OP7777", password="mill")
    memory_store.repositories.caches.add(protected)

    with pytest.raises(CannotPublish, match="requires a password"):
        ocpl.services.logs.publish(protected.code, finder.id, "Found it", WHEN, "")

    result = ocpl.services.logs.publish(
        protected.code, finder.id, "Found it", WHEN, "", password="MILL"
    )
    assert memory_store.repositories.logs.get(result.log_id) is not None


def test_find_with_rating_and_recommendation(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    ocpl.services.logs.publish(
        cache.code, finder.id, "Found it", WHEN, "Great", recommend=True, rating=5
    )

    assert memory_store.repositories.recommendations.get(cache.id, finder.id) is not None
    score = memory_store.repositories.scores.get(cache.id, finder.id)
    assert score is not None
    assert score.score == 5.0
    stored = _stored_cache(memory_store, cache)
    assert (stored.score, stored.votes) == (5.0, 1)


def test_unearned_recommendation_is_rejected(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    _stored_user(memory_store, finder).founds_count = 3

    with pytest.raises(CannotPublish, match="Find 6 more caches first"):
        ocpl.services.logs.publish(
            cache.code, finder.id, "Found it", WHEN, "", recommend=True
        )


def test_plaintext_comment_is_stored_escaped(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    result = ocpl.services.logs.publish(
        cache.code, finder.id, "Comment", WHEN, "a < b", comment_format="plaintext"
    )

    entry = memory_store.repositories.logs.get(result.log_id)
    assert entry is not None
    assert (entry.text, entry.text_html) == ("a &lt; b", 2)
    assert _stored_cache(memory_store, cache).notes == 1


def test_identical_publish_is_reported_as_duplicate(
    ocde: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    first = ocde.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")
    second = ocde.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

    assert second.duplicate
    assert second.log_id == first.log_id
    assert len(memory_store.repositories.logs.for_cache(cache.id)) == 1


def test_multi_find_variant_accepts_a_second_find(
    ocde: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    ocde.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "First")
    ocde.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "Again")

    assert len(memory_store.repositories.logs.for_cache(cache.id)) == 2


def test_repeated_didnt_find_it_is_stored_and_counted(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    first = ocpl.services.logs.publish(cache.code, finder.id, "Didn't find it", WHEN, "No luck")
    second = ocpl.services.logs.publish(
        cache.code, finder.id, "Didn't find it", "2024-05-02T10:00:00Z", "Still nothing"
    )

    assert not second.duplicate
    assert second.log_id != first.log_id
    assert len(memory_store.repositories.logs.for_cache(cache.id)) == 2
    assert _stored_cache(memory_store, cache).notfounds == 2
    assert _stored_user(memory_store, finder).notfounds_count == 2


def test_repeated_will_attend_is_stored(
    ocpl: Wiring, memory_store: MemoryStore, owner: User, finder: User
) -> None:
    event = make_cache(owner, code="OP5678", type=CacheType.EVENT)
    memory_store.repositories.caches.add(event)

    first = ocpl.services.logs.publish(event.code, finder.id, "Will attend", WHEN, "Count me in")
    second = ocpl.services.logs.publish(
        event.code, finder.id, "Will attend", "2024-05-02T10:00:00Z", "Bringing a friend"
    )

    assert not second.duplicate
    assert second.log_id != first.log_id
    assert len(memory_store.repositories.logs.for_cache(event.id)) == 2


def test_didnt_find_it_after_find_is_rejected(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

    with pytest.raises(CannotPublish, match="Found it"):
        ocpl.services.logs.publish(
            cache.code, finder.id, "Didn't find it", "2024-05-02T10:00:00Z", "Gone?"
        )
    assert len(memory_store.repositories.logs.for_cache(cache.id)) == 1


class TestEdit:
    def test_downgrading_find_reverses_derived_state(
        self, ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        published = ocpl.services.logs.publish(
            cache.code, finder.id, "Found it", WHEN, "TFTC", recommend=True, rating=4
        )

        result = ocpl.services.logs.edit(
            published.log_id, finder.id, {"logtype": "Didn't find it"}
        )

        assert result.applied
        stored = _stored_cache(memory_store, cache)
        assert (stored.founds, stored.notfounds, stored.last_found) == (0, 1, None)
        assert (stored.score, stored.votes) == (0.0, 0)
        assert memory_store.repositories.recommendations.get(cache.id, finder.id) is None
        user = _stored_user(memory_store, finder)
        assert (user.founds_count, user.notfounds_count) == (9, 1)
        entry = memory_store.repositories.logs.get(published.log_id)
        assert entry is not None
        assert entry.last_modified == NOW
        assert ocpl.assets.invalidated == [finder.id, finder.id]

    def test_comment_change_keeps_statistics(
        self, ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        published = ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

        result = ocpl.services.logs.edit(
            published.log_id,
            finder.id,
            {"comment": "Thanks\nfor the cache", "comment_format": "auto"},
        )

        assert result.applied
        entry = memory_store.repositories.logs.get(published.log_id)
        assert entry is not None
        assert entry.text == "Thanks<br />\nfor the cache"
        assert _stored_cache(memory_store, cache).founds == 1

    def test_edit_without_change_is_not_applied(
        self, ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        published = ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

        result = ocpl.services.logs.edit(published.log_id, finder.id, {"when": WHEN})

        assert not result.applied
        assert memory_store.commits == 1

    def test_only_author_may_edit(
        self, ocpl: Wiring, cache: Geocache, finder: User, owner: User
    ) -> None:
        published = ocpl.services.logs.publish(cache.code, finder.id, "Comment", WHEN, "Hi")

        with pytest.raises(BadRequest, match="Only own log entries"):
            ocpl.services.logs.edit(published.log_id, owner.id, {"comment": "Mine now"})

    def test_deleted_log_cannot_be_edited(
        self, ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        entry = make_log(cache, finder, LogType.COMMENT, deleted=True)
        memory_store.repositories.logs.add(entry)

        with pytest.raises(BadRequest, match="Deleted log entries"):
            ocpl.services.logs.edit(entry.id, finder.id, {"comment": "Back"})

    def test_upgrading_to_second_find_is_rejected(
        self, ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
    ) -> None:
        ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")
        note = ocpl.services.logs.publish(cache.code, finder.id, "Comment", WHEN, "Note")

        with pytest.raises(CannotPublish, match="already submitted"):
            ocpl.services.logs.edit(note.log_id, finder.id, {"logtype": "Found it"})
        assert memory_store.commits == 2

    def test_unknown_log(self, ocpl: Wiring, finder: User) -> None:
        with pytest.raises(NotFound):
            ocpl.services.logs.edit(make_user().id, finder.id, {"comment": "x"})


def test_verify_statistics(
    ocpl: Wiring, memory_store: MemoryStore, cache: Geocache, finder: User
) -> None:
    ocpl.services.logs.publish(cache.code, finder.id, "Found it", WHEN, "TFTC")

    assert ocpl.services.logs.verify_statistics(cache.code).founds == 1

    _stored_cache(memory_store, cache).notes = 5
    with pytest.raises(ConsistencyFault):
        ocpl.services.logs.verify_statistics(cache.code)
