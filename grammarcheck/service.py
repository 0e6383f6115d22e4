"""
Grammar Checking Service
========================
The context object that owns every pipeline component.

Pipeline per check:
    normalize -> cache lookup -> orchestrator fan-out -> issue normalizer
    -> merger -> classifier -> cache write

Usage:
    service = GrammarCheckingService.create()
    result = await service.check_text("I has a dog.")
    service.dispose()

    # or
    async with GrammarCheckingService.create() as service:
        result = await service.check_text(text)
"""

import time
from collections import Counter
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from config_logging import StructuredLogger, get_logger
from .base import EngineAdapter
from .cache import CacheLookup, ResultCache
from .classifier import SuggestionClassifier
from .config import ServiceConfig, load_config
from .health import HealthMonitor
from .issue_normalizer import IssueNormalizer
from .merger import merge_issues
from .models import (CheckOptions, CheckResult, CheckStatistics, Classification,
                     HealthReport, Issue)
from .orchestrator import Orchestrator, OrchestratorRun
from .registry import build_adapters
from .scheduler import CheckObserver, CheckSlots, ContentChangeScheduler, SchedulerState
from .text_normalizer import NormalizedText, context_snippet, normalize

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.service')

OptionsArg = Union[CheckOptions, Mapping[str, Any], None]


class EditorBridge(Protocol):
    """The editor collaborator that performs text mutations."""

    def apply_replacement(self, offset: int, length: int, text: str) -> bool:
        ...


def quality_score(issue_count: int, text_length: int) -> float:
    """100 for clean text, minus 10 points per issue per 100 characters."""
    density = issue_count / max(text_length / 100, 1)
    return round(max(0.0, 100.0 - density * 10), 1)


class GrammarCheckingService:
    """
    Multi-engine grammar checking with caching, classification and
    debounced scheduling.
    """

    def __init__(self, config: ServiceConfig, orchestrator: Orchestrator,
                 cache: ResultCache, classifier: SuggestionClassifier,
                 normalizer: IssueNormalizer, health: HealthMonitor,
                 observer: Optional[CheckObserver] = None,
                 editor: Optional[EditorBridge] = None):
        self.config = config
        self.orchestrator = orchestrator
        self.cache = cache
        self.classifier = classifier
        self.normalizer = normalizer
        self.health = health
        self.editor = editor
        self.slots = CheckSlots(config.scheduler.max_concurrent_checks)
        self.scheduler = ContentChangeScheduler(self, config.scheduler, observer)
        self._enabled = True
        self._disposed = False
        self._latest_fingerprint: Optional[str] = None
        self._current_fingerprint: Optional[str] = None
        self._working_set: Dict[str, Issue] = {}
        self._counters: Counter = Counter()
        self._total_processing_ms = 0.0

    @classmethod
    def create(cls, config: Optional[ServiceConfig] = None,
               adapters: Optional[Sequence[EngineAdapter]] = None,
               observer: Optional[CheckObserver] = None,
               editor: Optional[EditorBridge] = None,
               clock: Optional[Callable[[], float]] = None,
               options: Optional[Mapping[str, Any]] = None) -> 'GrammarCheckingService':
        """
        Build a service and all of its components.

        Args:
            config: Service configuration (default: load_config())
            adapters: Engine adapters (default: built from config)
            observer: Receives scheduler notifications
            editor: Performs text mutations for apply_suggestion
            clock: Millisecond clock for the cache
            options: Option mapping (conservativeMode, debounceMs, ...)
        """
        config = config or load_config()
        if options:
            config.apply_options(options)
        if adapters is None:
            adapters = build_adapters(config)
        health = HealthMonitor()
        service = cls(
            config=config,
            orchestrator=Orchestrator(adapters, health, config.orchestrator),
            cache=ResultCache.from_config(config.cache, clock=clock),
            classifier=SuggestionClassifier(config.classifier),
            normalizer=IssueNormalizer(config.context_radius, config.max_suggestions),
            health=health,
            observer=observer,
            editor=editor,
        )
        _logger.info("Grammar checking service created",
                     engines=[a.name for a in adapters])
        return service

    def dispose(self):
        """Cancel scheduled work and release engine resources."""
        if self._disposed:
            return
        self._disposed = True
        self._enabled = False
        self.scheduler.cancel_all()
        self.orchestrator.close()
        self.cache.clear()
        self._working_set.clear()
        _logger.info("Grammar checking service disposed")

    async def __aenter__(self) -> 'GrammarCheckingService':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.scheduler.cancel_all()
        await self.scheduler.wait_idle()
        self.dispose()

    # ------------------------------------------------------------------
    # Checking
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def check_text(self, text: str, options: OptionsArg = None) -> CheckResult:
        """
        Check text for writing issues.

        Never raises: short input, disabled service, total engine failure
        and internal errors all resolve to an empty result.
        """
        result = await self._check(text, options)
        self.commit(result)
        return result

    async def run_scheduled_check(self, normalized: NormalizedText,
                                  on_slot: Optional[Callable[[], None]] = None) -> CheckResult:
        """
        Check already-normalized content for the scheduler; the caller
        commits the result.
        """
        return await self._check(normalized, None, on_slot=on_slot)

    async def _check(self, text: Union[str, NormalizedText], options: OptionsArg,
                     on_slot: Optional[Callable[[], None]] = None) -> CheckResult:
        request_id = StructuredLogger.new_correlation_id()
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000

        try:
            if not self._enabled:
                return CheckResult.empty(request_id, 'disabled', elapsed_ms())

            opts = CheckOptions.from_value(options, self.config.categories, self.config.language)
            min_length = self.config.scheduler.min_text_length
            if isinstance(text, NormalizedText):
                normalized = text if len(text) >= min_length else NormalizedText()
            else:
                normalized = normalize(text or '', min_length)
            if not normalized:
                return CheckResult.empty(request_id, 'too_short', elapsed_ms())

            signature = opts.signature()
            if self.config.cache.enabled:
                lookup = self.cache.get(normalized, signature)
                if lookup is not None:
                    if on_slot is not None:
                        on_slot()
                    return self._from_cache(lookup, normalized, request_id, elapsed_ms)

            async with self.slots.slot(on_slot):
                run = await self.orchestrator.run(normalized.clean, opts)

            issues = self._process(run, normalized.clean, opts, request_id)
            if self.config.cache.enabled and not run.partial and not run.all_failed:
                self.cache.put(normalized, signature, issues)

            statistics = self._statistics(issues, normalized.clean, elapsed_ms(), request_id)
            statistics.engines_used = sorted(run.engines_used)
            statistics.engine_latencies = {
                name: round(r.latency_ms, 2) for name, r in run.per_engine.items()}
            statistics.fallback_used = list(run.fallback_used)
            statistics.partial = run.partial
            statistics.raw_issue_count = len(run.issues)
            if run.issues:
                statistics.deduplication_efficiency = round(1 - len(issues) / len(run.issues), 3)

            self._counters['checks_run'] += 1
            self._counters['issues_found'] += len(issues)
            self._total_processing_ms += statistics.processing_time_ms
            _logger.info(f"Check completed with {len(issues)} issues",
                         request_id=request_id, duration_ms=statistics.processing_time_ms,
                         engines=statistics.engines_used, partial=run.partial)
            return CheckResult(
                issues=issues,
                statistics=statistics,
                analyzed_text=normalized.clean,
                fingerprint=normalized.fingerprint,
            )
        except Exception as e:
            self._counters['errors'] += 1
            _logger.exception(f"Check failed: {e}", request_id=request_id)
            return CheckResult.empty(request_id, 'error', elapsed_ms())

    def _process(self, run: OrchestratorRun, text: str, options: CheckOptions,
                 request_id: str) -> List[Issue]:
        issues = self.normalizer.normalize(run.issues, text, run_id=request_id)
        issues = [i for i in issues if i.category in options.categories]
        merged = merge_issues(issues, self.config.orchestrator.adapter_priority)
        return [self.classifier.classify_issue(i) for i in merged]

    def _from_cache(self, lookup: CacheLookup, normalized: NormalizedText,
                    request_id: str, elapsed_ms: Callable[[], float]) -> CheckResult:
        issues = list(lookup.entry.issues)
        if lookup.near_duplicate:
            text = normalized.clean
            issues = [
                issue.replace(context_snippet=context_snippet(
                    text, issue.offset, issue.length, self.config.context_radius))
                for issue in issues
                if issue.offset + issue.length <= len(text)
                and text[issue.offset:issue.offset + issue.length] == issue.original_text
            ]

        statistics = self._statistics(issues, normalized.clean, elapsed_ms(), request_id)
        statistics.from_cache = True
        statistics.near_duplicate = lookup.near_duplicate
        self._counters['cache_hits'] += 1
        _logger.debug("Served from cache", request_id=request_id,
                      near_duplicate=lookup.near_duplicate)
        return CheckResult(
            issues=issues,
            statistics=statistics,
            analyzed_text=normalized.clean,
            fingerprint=normalized.fingerprint,
        )

    @staticmethod
    def _statistics(issues: List[Issue], text: str, processing_ms: float,
                    request_id: str) -> CheckStatistics:
        by_classification = Counter(
            (i.best_suggestion.classification if i.best_suggestion
             else Classification.MANUAL_ONLY).value
            for i in issues
        )
        return CheckStatistics(
            total_issues=len(issues),
            by_category=dict(Counter(i.category.value for i in issues)),
            by_severity=dict(Counter(i.severity.value for i in issues)),
            by_classification=dict(by_classification),
            processing_time_ms=round(processing_ms, 2),
            quality_score=quality_score(len(issues), len(text)),
            request_id=request_id,
        )

    # ------------------------------------------------------------------
    # Working set
    # ------------------------------------------------------------------

    def note_content(self, fingerprint: Optional[str]):
        """Record the fingerprint of the latest known editor content."""
        self._latest_fingerprint = fingerprint

    def commit(self, result: CheckResult) -> bool:
        """
        Make result the working set unless it is stale.

        Returns False when the result was discarded.
        """
        if not self._enabled or result.statistics.skipped_reason is not None:
            return False
        latest = self._latest_fingerprint
        if latest is not None and result.fingerprint != latest:
            self._counters['stale_discarded'] += 1
            return False
        self._working_set = {issue.id: issue for issue in result.issues}
        self._current_fingerprint = result.fingerprint
        return True

    def clear_results(self):
        self._working_set.clear()
        self._current_fingerprint = None

    @property
    def current_issues(self) -> List[Issue]:
        """Issues of the latest accepted result not yet applied."""
        return sorted(self._working_set.values(), key=lambda i: (i.offset, i.category.value))

    def on_content_changed(self, text: str):
        """Fire-and-forget entry point for editor content changes."""
        self.scheduler.on_content_changed(text)

    def apply_suggestion(self, issue_id: str, suggestion_text: str) -> bool:
        """
        Apply a suggestion through the editor bridge.

        The issue must still be in the working set. On success it is
        removed; offsets of the remaining issues are left as they are
        until the next check.
        """
        issue = self._working_set.get(issue_id)
        if issue is None:
            _logger.debug(f"Unknown issue: {issue_id}", issue_id=issue_id)
            return False
        if self.editor is None:
            _logger.warning("No editor bridge configured; cannot apply suggestion",
                            issue_id=issue_id)
            return False
        try:
            applied = bool(self.editor.apply_replacement(issue.offset, issue.length, suggestion_text))
        except Exception as e:
            _logger.error(f"Editor failed to apply suggestion: {e}", issue_id=issue_id)
            return False
        if applied:
            self._working_set.pop(issue_id, None)
            self._counters['suggestions_applied'] += 1
        return applied

    # ------------------------------------------------------------------
    # Control and reporting
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool):
        """Turn checking on or off; turning it off clears results."""
        self._enabled = bool(enabled) and not self._disposed
        self.scheduler.set_enabled(self._enabled)
        if not self._enabled:
            self.clear_results()
        _logger.info(f"Checking {'enabled' if self._enabled else 'disabled'}")

    def clear_cache(self):
        self.cache.clear()

    def get_health_report(self) -> HealthReport:
        return self.health.report(self.cache.stats())

    def get_statistics(self) -> Dict[str, Any]:
        """Service-wide counters."""
        checks = self._counters['checks_run']
        return {
            'enabled': self._enabled,
            'state': self.scheduler.state.value,
            'checks_run': checks,
            'cache_hits': self._counters['cache_hits'],
            'issues_found': self._counters['issues_found'],
            'suggestions_applied': self._counters['suggestions_applied'],
            'stale_discarded': self._counters['stale_discarded'],
            'errors': self._counters['errors'],
            'dropped_invalid_issues': self.normalizer.dropped_count,
            'average_processing_ms': round(self._total_processing_ms / checks, 2) if checks else 0.0,
            'scheduled_runs': self.scheduler.runs_started,
            'current_issues': len(self._working_set),
            'active_engines': [a.name for a in self.orchestrator.active_adapters],
            'cache': self.cache.stats(),
        }

    def reset_statistics(self):
        """Reset service counters, engine health and cache counters."""
        self._counters.clear()
        self._total_processing_ms = 0.0
        self.normalizer.dropped_count = 0
        self.scheduler.runs_started = 0
        self.scheduler.runs_discarded = 0
        self.health.reset()
        self.cache.reset_stats()

    @property
    def state(self) -> SchedulerState:
        return self.scheduler.state
