"""Tests for report caching."""

import pytest

import shadowreg.cache as cache_module
from shadowreg.cache import InMemoryReportCache, content_hash, evaluate_cached
from shadowreg.engine.cancellation import CancellationToken
from shadowreg.engine.evaluator import EvaluationConfig
from shadowreg.geometry.massing import build_massing, rectangle_footprint
from shadowreg.models.grid import GridSpec

POINTS = [(0.0, 13.0), (0.0, 55.0)]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestInMemoryReportCache:
    """Test TTL behaviour."""

    def test_get_set(self):
        """Stored values are returned until they expire."""
        clock = FakeClock()
        cache = InMemoryReportCache(clock=clock)
        cache.set("k", "v", ttl=60)
        assert cache.get("k") == "v"
        clock.now += 59
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_expired_entries_evicted_on_set(self):
        """Entries never read again are dropped once they expire."""
        clock = FakeClock()
        cache = InMemoryReportCache(clock=clock)
        for i in range(5):
            cache.set(f"old-{i}", "v", ttl=60)
        assert len(cache) == 5
        clock.now += 60
        cache.set("new-0", "v", ttl=60)
        cache.set("new-1", "v", ttl=60)
        assert len(cache) == 2
        assert cache.get("new-0") == "v"

    def test_live_entries_survive_purge(self):
        """Purging keeps entries that have not expired yet."""
        clock = FakeClock()
        cache = InMemoryReportCache(clock=clock)
        cache.set("short", "a", ttl=10)
        cache.set("long", "b", ttl=100)
        clock.now += 10
        cache.set("other", "c", ttl=10)
        assert len(cache) == 2
        assert cache.get("long") == "b"

    def test_miss(self):
        """Unknown keys miss."""
        assert InMemoryReportCache().get("missing") is None

    def test_clear(self):
        """Clear drops every entry."""
        cache = InMemoryReportCache()
        cache.set("a", "1", ttl=10)
        cache.clear()
        assert cache.get("a") is None


class TestContentHash:
    """Test input hashing."""

    def test_stable(self, tokyo, cube_massing, tokyo_profile, solstice):
        """Equal inputs hash equally."""
        h1 = content_hash(tokyo, cube_massing, tokyo_profile, None, solstice)
        h2 = content_hash(
            tokyo,
            build_massing(rectangle_footprint(10.0, 10.0), total_height=15.0),
            tokyo_profile.model_copy(),
            GridSpec(),
            solstice,
        )
        assert h1 == h2
        assert len(h1) == 64

    def test_sensitive_to_inputs(self, tokyo, cube_massing, tokyo_profile, solstice):
        """Changing any input changes the hash."""
        base = content_hash(tokyo, cube_massing, tokyo_profile, None, solstice)
        taller = build_massing(rectangle_footprint(10.0, 10.0), total_height=16.0)
        stricter = tokyo_profile.model_copy(update={"band_a_hours": 3.0})
        assert content_hash(tokyo, taller, tokyo_profile, None, solstice) != base
        assert content_hash(tokyo, cube_massing, stricter, None, solstice) != base
        assert content_hash(tokyo, cube_massing, None, None, solstice) != base
        assert content_hash(
            tokyo, cube_massing, tokyo_profile, None, solstice, EvaluationConfig(time_step_minutes=5)
        ) != base


class TestEvaluateCached:
    """Test evaluation through a cache."""

    def test_second_call_hits(self, tokyo, cube_massing, tokyo_profile, solstice, monkeypatch):
        """The second identical call is served from the cache."""
        cache = InMemoryReportCache()
        first = evaluate_cached(cache, tokyo, cube_massing, tokyo_profile, solstice, check_points=POINTS)
        assert len(cache) == 1

        def fail(*args, **kwargs):
            raise AssertionError("evaluate_compliance called on a cache hit")

        monkeypatch.setattr(cache_module, "evaluate_compliance", fail)
        second = evaluate_cached(cache, tokyo, cube_massing, tokyo_profile, solstice, check_points=POINTS)
        assert second.model_dump() == first.model_dump()

    def test_aborted_not_cached(self, tokyo, cube_massing, tokyo_profile, solstice):
        """Cancelled evaluations are not stored."""
        cache = InMemoryReportCache()
        token = CancellationToken()
        token.cancel()
        report = evaluate_cached(
            cache, tokyo, cube_massing, tokyo_profile, solstice,
            check_points=POINTS, cancel_token=token,
        )
        assert report.aborted
        assert len(cache) == 0

    def test_site_boundary_rejected(self, tokyo, cube_massing, tokyo_profile, solstice):
        """Custom boundaries are not part of the key and are refused."""
        with pytest.raises(ValueError):
            evaluate_cached(
                InMemoryReportCache(), tokyo, cube_massing, tokyo_profile, solstice,
                site_boundary=cube_massing.outline,
            )
