"""
Engine Orchestrator
===================
Fans text out to every active adapter, enforces timeouts and runs
fallback engines when the primary engine cannot answer.

Features:
- Availability probed once at startup; unavailable engines never run
- Bounded thread pool driven from the asyncio event loop
- Per-adapter timeout and a global timeout for the whole fan-out
- Failover: a failed, timed-out or unavailable primary engine is replaced
  by its configured fallback
- Every invocation recorded in the health monitor
"""

import asyncio
import contextvars
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from config_logging import AdapterTimeoutError, get_logger
from .base import EngineAdapter, RawIssue
from .config import OrchestratorConfig
from .health import HealthMonitor
from .models import CheckOptions

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.orchestrator')


@dataclass
class EngineRun:
    """Outcome of one adapter within a run."""
    name: str
    latency_ms: float = 0.0
    ok: bool = True
    count: int = 0
    error: Optional[str] = None
    timed_out: bool = False
    fallback_for: Optional[str] = None

    def to_dict(self):
        return {
            'latency_ms': round(self.latency_ms, 2),
            'ok': self.ok,
            'count': self.count,
            'error': self.error,
            'timed_out': self.timed_out,
            'fallback_for': self.fallback_for,
        }


@dataclass
class OrchestratorRun:
    """Aggregated raw output of one fan-out."""
    issues: List[RawIssue] = field(default_factory=list)
    per_engine: Dict[str, EngineRun] = field(default_factory=dict)
    fallback_used: List[str] = field(default_factory=list)
    partial: bool = False

    @property
    def engines_used(self) -> List[str]:
        return [name for name, run in self.per_engine.items() if run.ok]

    @property
    def all_failed(self) -> bool:
        return bool(self.per_engine) and not self.engines_used


class Orchestrator:
    """
    Runs engine adapters concurrently.

    Usage:
        orchestrator = Orchestrator(adapters, HealthMonitor(), config.orchestrator)
        run = await orchestrator.run(text, CheckOptions())
    """

    def __init__(self, adapters: Sequence[EngineAdapter],
                 health: Optional[HealthMonitor] = None,
                 config: Optional[OrchestratorConfig] = None):
        self.adapters = list(adapters)
        self.health = health or HealthMonitor()
        self.config = config or OrchestratorConfig()
        self._by_name = {a.name: a for a in self.adapters}
        self._active: List[EngineAdapter] = []
        self._started = False
        self._start_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.config.max_workers),
            thread_name_prefix='grammarcheck-engine',
        )
        priority = list(self.config.adapter_priority)
        self._rank = {name: i for i, name in enumerate(priority)}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> List[str]:
        """
        Query every adapter's availability once and build the active list.

        Returns the names of active adapters. Safe to call more than once.
        """
        with self._start_lock:
            if self._started:
                return [a.name for a in self._active]
            active = []
            with _logger.log_operation("Engine availability probe"):
                for adapter in self.adapters:
                    if not adapter.enabled:
                        continue
                    if adapter.is_available():
                        active.append(adapter)
                        self.health.register(adapter.name)
                    else:
                        self.health.mark_unavailable(adapter.name, adapter.init_error)
            self._active = active
            self._started = True
            _logger.info(f"Orchestrator started with {len(active)} of {len(self.adapters)} engines",
                         engines=[a.name for a in active])
            return [a.name for a in active]

    @property
    def active_adapters(self) -> List[EngineAdapter]:
        return list(self._active)

    def close(self):
        """Shut down the pool and release adapter resources."""
        self._executor.shutdown(wait=False)
        for adapter in self.adapters:
            try:
                adapter.close()
            except Exception as e:
                _logger.warning(f"Failed to close {adapter.name}: {e}", engine=adapter.name)
        self._active = []

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _timeout_ms(self, name: str) -> float:
        return self.config.engine_timeouts_ms.get(name, self.config.adapter_timeout_ms)

    def _plan(self, options: CheckOptions) -> Tuple[List[EngineAdapter], Dict[str, EngineAdapter],
                                                     Dict[str, str]]:
        """
        Split the adapters for one run.

        Returns (adapters to launch, standby fallbacks keyed by primary name,
        fallback name -> primary name for fallbacks launched because their
        primary is unavailable).
        """
        selected = [a for a in self._active if a.handles(options.categories)]
        selected_names = {a.name for a in selected}
        standby: Dict[str, EngineAdapter] = {}
        substitutes: Dict[str, str] = {}

        if self.config.enable_failover:
            for primary, fallback in self.config.fallbacks.items():
                if fallback not in selected_names:
                    continue
                if primary in selected_names:
                    standby[primary] = self._by_name[fallback]
                elif primary in self._by_name and self._by_name[primary].enabled:
                    substitutes[fallback] = primary

        standby_names = {a.name for a in standby.values()}
        launch = [a for a in selected if a.name not in standby_names]
        return launch, standby, substitutes

    async def _invoke(self, adapter: EngineAdapter, text: str, options: CheckOptions,
                      fallback_for: Optional[str] = None) -> Tuple[EngineRun, List[RawIssue]]:
        """Run one adapter in the pool under its own timeout."""
        loop = asyncio.get_running_loop()
        timeout_ms = self._timeout_ms(adapter.name)
        ctx = contextvars.copy_context()
        started = time.perf_counter()
        future = loop.run_in_executor(self._executor, ctx.run, adapter.analyze, text, options)
        try:
            result = await asyncio.wait_for(future, timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            # The worker thread keeps running; its result is ignored
            error = AdapterTimeoutError(adapter.name, timeout_ms)
            _logger.warning(error.message, engine=adapter.name, timeout_ms=timeout_ms)
            return EngineRun(
                name=adapter.name,
                latency_ms=(time.perf_counter() - started) * 1000,
                ok=False,
                error=error.message,
                timed_out=True,
                fallback_for=fallback_for,
            ), []

        if not result.success:
            _logger.warning(f"{adapter.name} failed: {result.error}", engine=adapter.name)
        return EngineRun(
            name=adapter.name,
            latency_ms=result.latency_ms,
            ok=result.success,
            count=len(result.issues),
            error=result.error,
            fallback_for=fallback_for,
        ), result.issues

    def _record(self, engine_run: EngineRun):
        self.health.record(
            engine_run.name,
            latency_ms=engine_run.latency_ms,
            success=engine_run.ok,
            timed_out=engine_run.timed_out,
            issues=engine_run.count,
            error=engine_run.error,
        )

    async def run(self, text: str, options: Optional[CheckOptions] = None) -> OrchestratorRun:
        """
        Analyze text with every active adapter.

        Never raises for adapter failures. On global timeout the results
        gathered so far are returned with partial=True.
        """
        options = options or CheckOptions()
        loop = asyncio.get_running_loop()
        if not self._started:
            await loop.run_in_executor(self._executor, self.start)

        launch, standby, substitutes = self._plan(options)
        outcome = OrchestratorRun()
        collected: Dict[str, List[RawIssue]] = {}
        tasks: Dict[asyncio.Task, Tuple[str, float]] = {}

        def _launch(adapter: EngineAdapter, fallback_for: Optional[str] = None):
            task = asyncio.ensure_future(self._invoke(adapter, text, options, fallback_for))
            tasks[task] = (adapter.name, time.perf_counter())
            if fallback_for:
                outcome.fallback_used.append(adapter.name)
                _logger.info(f"Failover: {adapter.name} replaces {fallback_for}",
                             engine=adapter.name, primary=fallback_for)

        for adapter in launch:
            _launch(adapter, substitutes.get(adapter.name))

        deadline = loop.time() + self.config.global_timeout_ms / 1000
        pending = set(tasks)
        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    engine_run, issues = task.result()
                    self._record(engine_run)
                    outcome.per_engine[engine_run.name] = engine_run
                    if engine_run.ok:
                        collected[engine_run.name] = issues
                        continue
                    fallback = standby.pop(engine_run.name, None)
                    if fallback is not None:
                        _launch(fallback, engine_run.name)
                        pending |= {t for t in tasks if not t.done()}
        finally:
            for task in pending:
                task.cancel()

        if pending:
            outcome.partial = True
            now = time.perf_counter()
            for task in pending:
                name, started = tasks[task]
                engine_run = EngineRun(
                    name=name,
                    latency_ms=(now - started) * 1000,
                    ok=False,
                    error=f"Global timeout of {self.config.global_timeout_ms}ms reached",
                    timed_out=True,
                )
                self._record(engine_run)
                outcome.per_engine[name] = engine_run
            _logger.warning("Global timeout reached; returning partial results",
                            pending=sorted(tasks[t][0] for t in pending))

        for name in sorted(collected, key=lambda n: self._rank.get(n, len(self._rank))):
            outcome.issues.extend(collected[name])
        return outcome
