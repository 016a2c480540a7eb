import pytest

from scoreline.cache_store import TTLCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_get_returns_value_until_ttl_elapses() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("fixtures:39:2023:all", [1, 2], 30)

    clock.advance(29.999)
    assert cache.get("fixtures:39:2023:all") == [1, 2]
    assert cache.has("fixtures:39:2023:all") is True

    clock.advance(0.001)
    assert cache.get("fixtures:39:2023:all") is None
    assert cache.has("fixtures:39:2023:all") is False


def test_expired_read_evicts_entry() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("k", "v", 5)
    clock.advance(10)

    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_overwrite_uses_latest_value_and_ttl() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("k", "v1", 100)
    cache.set("k", "v2", 10)

    assert cache.get("k") == "v2"
    clock.advance(10)
    assert cache.get("k") is None


def test_default_ttl_is_five_minutes() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("k", "v")

    clock.advance(299)
    assert cache.get("k") == "v"
    clock.advance(1)
    assert cache.get("k") is None


def test_non_positive_ttl_is_rejected() -> None:
    cache = TTLCache(clock=FakeClock())
    with pytest.raises(ValueError):
        cache.set("k", "v", 0)
    with pytest.raises(ValueError):
        cache.set("k", "v", -1)
    with pytest.raises(ValueError):
        TTLCache(default_ttl_s=0)


def test_delete_and_clear() -> None:
    cache = TTLCache(clock=FakeClock())
    cache.set("a", 1, 10)
    cache.set("b", 2, 10)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.get("a") is None

    cache.clear()
    assert len(cache) == 0
    assert cache.get("b") is None


def test_delete_prefix_only_touches_matching_keys() -> None:
    cache = TTLCache(clock=FakeClock())
    cache.set("fixtures:39:2023:all", 1, 10)
    cache.set("fixtures:39:2023:live", 2, 10)
    cache.set("standings:39:2023:all", 3, 10)

    assert cache.delete_prefix("fixtures:") == 2
    assert cache.get("standings:39:2023:all") == 3


def test_cleanup_is_idempotent_and_counts_evictions() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("short", 1, 5)
    cache.set("long", 2, 500)
    clock.advance(6)

    assert cache.cleanup() == 1
    assert cache.cleanup() == 0
    assert cache.get("long") == 2


def test_read_rechecks_expiry_without_cleanup() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("k", "v", 5)
    clock.advance(5)

    # no sweep has run, the read alone must reject the stale entry
    assert cache.get("k") is None


def test_stats_counts_active_and_expired() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("a", 1, 5)
    cache.set("b", 2, 50)
    clock.advance(10)

    stats = cache.stats()
    assert (stats.total, stats.active, stats.expired) == (2, 1, 1)
