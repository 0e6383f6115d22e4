"""
Result Cache
============
Two-level cache of analysis results.

Level 1: exact fingerprint lookup (also verifies the stored clean text).
Level 2: near-duplicate lookup over the most recent entries with the same
options, accepted when lengths and word counts are close and the word
sets have Jaccard similarity at or above the threshold.

Entries older than their TTL are never returned. Over capacity, the
oldest fraction of entries by timestamp is evicted. Internal errors are
logged and reported as misses.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from config_logging import get_logger
from .config import CacheConfig
from .models import Issue
from .text_normalizer import NormalizedText, jaccard_similarity, word_count, word_set

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.cache')


@dataclass
class CacheEntry:
    """Issues computed for one clean text and options signature."""
    key: str
    signature: str
    clean_text: str
    words: FrozenSet[str]
    word_count: int
    issues: List[Issue]
    timestamp: float
    ttl_ms: float
    hits: int = 0

    def is_expired(self, now_ms: float) -> bool:
        return now_ms - self.timestamp > self.ttl_ms


@dataclass
class CacheLookup:
    """A cache hit."""
    entry: CacheEntry
    near_duplicate: bool = False
    similarity: float = 1.0


@dataclass
class _Counters:
    hits: int = 0
    misses: int = 0
    near_duplicate_hits: int = 0
    evictions: int = 0
    expirations: int = 0
    errors: int = 0


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class ResultCache:
    """Thread-safe two-level result cache."""

    def __init__(self, capacity: int = 2000, ttl_ms: float = 300000,
                 eviction_fraction: float = 0.2, similarity_threshold: float = 0.8,
                 near_duplicate_scan: int = 50, word_delta_tolerance: int = 2,
                 length_tolerance: float = 0.1,
                 clock: Optional[Callable[[], float]] = None):
        """
        Args:
            capacity: Maximum number of entries
            ttl_ms: Entry lifetime in milliseconds
            eviction_fraction: Share of entries evicted when over capacity
            similarity_threshold: Minimum Jaccard similarity for a near-duplicate hit
            near_duplicate_scan: Number of recent entries scanned for near duplicates
            word_delta_tolerance: Maximum word-count difference for a near duplicate
            length_tolerance: Maximum relative length difference for a near duplicate
            clock: Millisecond clock (monotonic by default)
        """
        self.capacity = max(1, capacity)
        self.ttl_ms = ttl_ms
        self.eviction_fraction = eviction_fraction
        self.similarity_threshold = similarity_threshold
        self.near_duplicate_scan = near_duplicate_scan
        self.word_delta_tolerance = word_delta_tolerance
        self.length_tolerance = length_tolerance
        self._clock = clock or _monotonic_ms
        self._entries: 'OrderedDict[str, CacheEntry]' = OrderedDict()
        self._counters = _Counters()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: CacheConfig,
                    clock: Optional[Callable[[], float]] = None) -> 'ResultCache':
        return cls(
            capacity=config.capacity,
            ttl_ms=config.ttl_ms,
            eviction_fraction=config.eviction_fraction,
            similarity_threshold=config.similarity_threshold,
            near_duplicate_scan=config.near_duplicate_scan,
            word_delta_tolerance=config.word_delta_tolerance,
            length_tolerance=config.length_tolerance,
            clock=clock,
        )

    @staticmethod
    def make_key(fingerprint: str, signature: str) -> str:
        return f"{fingerprint}|{signature}"

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, normalized: NormalizedText, signature: str) -> Optional[CacheLookup]:
        """Look up cached issues for normalized text; None on miss."""
        try:
            with self._lock:
                lookup = self._get_locked(normalized, signature)
                if lookup is None:
                    self._counters.misses += 1
                else:
                    lookup.entry.hits += 1
                    self._counters.hits += 1
                    if lookup.near_duplicate:
                        self._counters.near_duplicate_hits += 1
                return lookup
        except Exception as e:
            self._counters.errors += 1
            _logger.warning(f"Cache lookup failed, treating as miss: {e}")
            return None

    def _get_locked(self, normalized: NormalizedText, signature: str) -> Optional[CacheLookup]:
        now = self._clock()
        key = self.make_key(normalized.fingerprint, signature)

        entry = self._entries.get(key)
        if entry is not None:
            if entry.is_expired(now):
                del self._entries[key]
                self._counters.expirations += 1
            elif entry.clean_text == normalized.clean:
                return CacheLookup(entry=entry)

        return self._near_duplicate(normalized, signature, now)

    def _near_duplicate(self, normalized: NormalizedText, signature: str,
                        now: float) -> Optional[CacheLookup]:
        words = word_set(normalized.clean)
        count = word_count(normalized.clean)
        length = len(normalized.clean)
        best: Optional[CacheLookup] = None

        scanned = 0
        for entry in reversed(list(self._entries.values())):
            if scanned >= self.near_duplicate_scan:
                break
            if entry.signature != signature:
                continue
            scanned += 1
            if entry.is_expired(now):
                continue
            longest = max(length, len(entry.clean_text), 1)
            if abs(length - len(entry.clean_text)) / longest > self.length_tolerance:
                continue
            if abs(count - entry.word_count) > self.word_delta_tolerance:
                continue
            similarity = jaccard_similarity(words, entry.words)
            if similarity >= self.similarity_threshold and (best is None or similarity > best.similarity):
                best = CacheLookup(entry=entry, near_duplicate=True, similarity=similarity)
        return best

    def put(self, normalized: NormalizedText, signature: str, issues: List[Issue]):
        """Store issues for normalized text, evicting when over capacity."""
        try:
            with self._lock:
                key = self.make_key(normalized.fingerprint, signature)
                self._entries.pop(key, None)
                self._entries[key] = CacheEntry(
                    key=key,
                    signature=signature,
                    clean_text=normalized.clean,
                    words=word_set(normalized.clean),
                    word_count=word_count(normalized.clean),
                    issues=list(issues),
                    timestamp=self._clock(),
                    ttl_ms=self.ttl_ms,
                )
                if len(self._entries) > self.capacity:
                    self._evict()
        except Exception as e:
            self._counters.errors += 1
            _logger.warning(f"Cache write failed: {e}")

    def _evict(self):
        count = max(1, int(len(self._entries) * self.eviction_fraction))
        oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)[:count]
        for entry in oldest:
            del self._entries[entry.key]
        self._counters.evictions += len(oldest)
        _logger.debug(f"Evicted {len(oldest)} cache entries", size=len(self._entries))

    def clear(self):
        with self._lock:
            self._entries.clear()

    def reset_stats(self):
        with self._lock:
            self._counters = _Counters()

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            c = self._counters
            lookups = c.hits + c.misses
            return {
                'size': len(self._entries),
                'capacity': self.capacity,
                'hits': c.hits,
                'misses': c.misses,
                'near_duplicate_hits': c.near_duplicate_hits,
                'evictions': c.evictions,
                'expirations': c.expirations,
                'errors': c.errors,
                'hit_rate': round(c.hits / lookups, 3) if lookups else 0.0,
            }
