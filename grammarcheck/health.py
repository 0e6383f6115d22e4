"""
Engine Health Monitor
=====================
Per-adapter call counters and the recommendations built from them.

Counters only grow; reset() is the single way to clear them.
"""

import dataclasses
import threading
import time
from typing import Any, Dict, List, Optional

from .models import EngineHealthRecord, HealthReport

__version__ = "1.0.0"

HEALTHY = "healthy"
DEGRADED = "degraded"
CRITICAL = "critical"
UNAVAILABLE = "unavailable"


class HealthMonitor:
    """Thread-safe engine health sink."""

    def __init__(self, failure_threshold: float = 0.3, critical_threshold: float = 0.5,
                 slow_latency_ms: float = 2000.0):
        self.failure_threshold = failure_threshold
        self.critical_threshold = critical_threshold
        self.slow_latency_ms = slow_latency_ms
        self._records: Dict[str, EngineHealthRecord] = {}
        self._lock = threading.Lock()

    def _record_for(self, engine: str) -> EngineHealthRecord:
        record = self._records.get(engine)
        if record is None:
            record = self._records[engine] = EngineHealthRecord(name=engine)
        return record

    def register(self, engine: str, available: bool = True, error: Optional[str] = None):
        """Create the record for an engine seen at startup."""
        with self._lock:
            record = self._record_for(engine)
            record.available = available
            if error:
                record.last_error = error

    def record(self, engine: str, latency_ms: float, success: bool,
               timed_out: bool = False, issues: int = 0, error: Optional[str] = None):
        """Record one adapter invocation."""
        with self._lock:
            record = self._record_for(engine)
            record.call_count += 1
            record.total_latency_ms += max(0.0, latency_ms)
            record.last_used = time.time()
            if timed_out:
                record.timeout_count += 1
            elif success:
                record.success_count += 1
                record.issues_contributed += issues
            else:
                record.error_count += 1
            if error:
                record.last_error = error

    def mark_unavailable(self, engine: str, error: Optional[str] = None):
        self.register(engine, available=False, error=error)

    def _status(self, record: EngineHealthRecord) -> str:
        if not record.available:
            return UNAVAILABLE
        if record.failure_rate > self.critical_threshold:
            return CRITICAL
        if record.failure_rate > self.failure_threshold:
            return DEGRADED
        return HEALTHY

    def snapshot(self) -> List[EngineHealthRecord]:
        """Copies of every record with status filled in."""
        with self._lock:
            records = []
            for record in self._records.values():
                copy = dataclasses.replace(record)
                copy.status = self._status(copy)
                records.append(copy)
        return sorted(records, key=lambda r: r.name)

    def get(self, engine: str) -> Optional[EngineHealthRecord]:
        for record in self.snapshot():
            if record.name == engine:
                return record
        return None

    def report(self, cache_stats: Optional[Dict[str, Any]] = None) -> HealthReport:
        """Build a health report with recommendations."""
        records = self.snapshot()
        cache_stats = cache_stats or {}
        recommendations = []

        for record in records:
            if record.status == UNAVAILABLE:
                recommendations.append(
                    f"{record.name} is unavailable ({record.last_error or 'unknown error'}); "
                    f"install its dependencies or disable it")
            elif record.failure_rate > self.critical_threshold:
                recommendations.append(
                    f"{record.name} fails {record.failure_rate:.0%} of calls; consider disabling it")
            elif record.failure_rate > 0.2:
                recommendations.append(
                    f"{record.name} has an elevated failure rate ({record.failure_rate:.0%})")
            if record.call_count and record.average_latency_ms > self.slow_latency_ms:
                recommendations.append(
                    f"{record.name} averages {record.average_latency_ms:.0f}ms per call; "
                    f"consider a longer debounce or a remote server")

        lookups = cache_stats.get('hits', 0) + cache_stats.get('misses', 0)
        if lookups >= 20 and cache_stats.get('hit_rate', 0.0) < 0.3:
            recommendations.append(
                f"Cache hit rate is low ({cache_stats.get('hit_rate', 0.0):.0%}); "
                f"consider a larger capacity or longer TTL")

        statuses = {r.status for r in records}
        if CRITICAL in statuses:
            overall = CRITICAL
        elif statuses & {DEGRADED, UNAVAILABLE}:
            overall = DEGRADED
        else:
            overall = HEALTHY

        return HealthReport(
            per_engine=records,
            recommendations=recommendations,
            overall_status=overall,
            cache=dict(cache_stats),
        )

    def reset(self):
        """Clear counters; availability is kept."""
        with self._lock:
            for name, record in list(self._records.items()):
                self._records[name] = EngineHealthRecord(
                    name=name, available=record.available,
                    last_error=None if record.available else record.last_error)
