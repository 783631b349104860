from __future__ import annotations

from geokeeper.adapters.lookup_cache import ReadThroughCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_value_is_loaded_once_until_expiry() -> None:
    clock = FakeClock()
    cache = ReadThroughCache(default_ttl=10, clock=clock)
    calls: list[int] = []

    def loader() -> int:
        calls.append(1)
        return len(calls)

    assert cache.get_or_load("key", loader) == 1
    clock.now += 9
    assert cache.get_or_load("key", loader) == 1
    clock.now += 2
    assert cache.get_or_load("key", loader) == 2


def test_explicit_ttl_overrides_default() -> None:
    clock = FakeClock()
    cache = ReadThroughCache(default_ttl=10, clock=clock)

    cache.get_or_load("short", lambda: "a", ttl=1)
    cache.get_or_load("long", lambda: "b")
    clock.now += 5

    assert "short" not in cache
    assert "long" in cache


def test_invalidate() -> None:
    cache = ReadThroughCache()
    cache.get_or_load("a", lambda: 1)
    cache.get_or_load("b", lambda: 2)

    cache.invalidate("a")
    assert "a" not in cache
    assert "b" in cache

    cache.invalidate()
    assert "b" not in cache
