"""
Tests for the Result Cache
==========================
Exact and near-duplicate lookups, TTL expiry and eviction.
"""

import pytest

from grammarcheck.cache import ResultCache
from grammarcheck.config import CacheConfig
from grammarcheck.text_normalizer import normalize

from .fakes import make_issue

SIG = "en-US:grammar,spelling"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResultCache(capacity=10, ttl_ms=1000, clock=clock)


class TestExactLookup:
    """Tests for level-one lookups."""

    def test_hit_after_put(self, cache):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        issues = [make_issue("a", 4, "quick")]
        cache.put(text, SIG, issues)

        lookup = cache.get(text, SIG)
        assert lookup is not None
        assert not lookup.near_duplicate
        assert lookup.entry.issues == issues
        assert cache.stats()['hits'] == 1

    def test_miss(self, cache):
        assert cache.get(normalize("Nothing stored for this text."), SIG) is None
        assert cache.stats()['misses'] == 1

    def test_signature_separates_entries(self, cache):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [])
        assert cache.get(text, "en-US:style") is None

    def test_expired_entry_not_returned(self, cache, clock):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [])
        clock.now = 1001
        assert cache.get(text, SIG) is None
        assert len(cache) == 0
        assert cache.stats()['expirations'] == 1

    def test_entry_valid_until_ttl(self, cache, clock):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [])
        clock.now = 1000
        assert cache.get(text, SIG) is not None

    def test_put_replaces(self, cache):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [make_issue("a", 4, "quick")])
        cache.put(text, SIG, [])
        assert len(cache) == 1
        assert cache.get(text, SIG).entry.issues == []


class TestNearDuplicateLookup:
    """Tests for level-two lookups."""

    def test_same_words_different_punctuation(self, cache):
        stored = normalize("The quick brown fox jumps over the lazy dog today.")
        cache.put(stored, SIG, [])
        query = normalize("The quick brown fox jumps over the lazy dog today!")

        lookup = cache.get(query, SIG)
        assert lookup is not None
        assert lookup.near_duplicate
        assert lookup.similarity == 1.0
        assert cache.stats()['near_duplicate_hits'] == 1

    def test_low_similarity_misses(self, clock):
        cache = ResultCache(length_tolerance=1.0, word_delta_tolerance=10, clock=clock)
        cache.put(normalize("alpha beta gamma delta epsilon zeta eta theta"), SIG, [])
        query = normalize("alpha beta gamma delta epsilon zeta iota kappa")
        # 6 shared words of 10 is below the 0.8 threshold
        assert cache.get(query, SIG) is None

    def test_length_difference_misses(self, cache):
        cache.put(normalize("The quick brown fox jumps over the lazy dog."), SIG, [])
        query = normalize("The quick brown fox jumps over the lazy dog and keeps running far away.")
        assert cache.get(query, SIG) is None

    def test_other_signature_ignored(self, cache):
        cache.put(normalize("The quick brown fox jumps over the lazy dog today."), SIG, [])
        query = normalize("The quick brown fox jumps over the lazy dog today!")
        assert cache.get(query, "en-GB:spelling") is None

    def test_expired_entries_ignored(self, cache, clock):
        cache.put(normalize("The quick brown fox jumps over the lazy dog today."), SIG, [])
        clock.now = 5000
        query = normalize("The quick brown fox jumps over the lazy dog today!")
        assert cache.get(query, SIG) is None


class TestEviction:
    """Tests for capacity enforcement."""

    def test_oldest_evicted(self, clock):
        cache = ResultCache(capacity=5, eviction_fraction=0.2, clock=clock)
        words = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]
        for i, word in enumerate(words):
            clock.now = i
            cache.put(normalize(" ".join([word] * 5)), SIG, [])

        assert len(cache) == 5
        assert cache.stats()['evictions'] == 1
        assert cache.get(normalize(" ".join(["alpha"] * 5)), SIG) is None
        assert cache.get(normalize(" ".join(["foxtrot"] * 5)), SIG) is not None

    def test_size_never_exceeds_capacity(self, clock):
        cache = ResultCache(capacity=3, clock=clock)
        for i in range(20):
            clock.now = i
            cache.put(normalize(f"entry number {i} " + "x" * i), SIG, [])
            assert len(cache) <= 3


class TestHousekeeping:
    """Tests for stats, clear and error handling."""

    def test_clear(self, cache):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [])
        cache.clear()
        assert len(cache) == 0
        assert cache.get(text, SIG) is None

    def test_hit_rate(self, cache):
        text = normalize("The quick brown fox jumps over the lazy dog.")
        cache.put(text, SIG, [])
        cache.get(text, SIG)
        cache.get(normalize("Something else entirely, not stored."), SIG)
        stats = cache.stats()
        assert stats['hit_rate'] == 0.5
        cache.reset_stats()
        assert cache.stats()['hits'] == 0

    def test_lookup_error_is_a_miss(self, cache):
        """Internal failures never propagate."""
        assert cache.get(None, SIG) is None
        assert cache.stats()['errors'] == 1

    def test_from_config(self, clock):
        cache = ResultCache.from_config(CacheConfig(capacity=7, ttl_ms=50), clock=clock)
        assert cache.capacity == 7
        assert cache.ttl_ms == 50
