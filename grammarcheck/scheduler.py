"""
Content-Change Scheduler
========================
Debounces editor content changes and bounds concurrent checks.

State machine:
    IDLE --content change (size delta >= threshold, or first content)--> SCHEDULED
    SCHEDULED --content change--> SCHEDULED (timer reset)
    SCHEDULED --timer fires--> RUNNING (slot free) or QUEUED (no slot)
    QUEUED --slot acquired (FIFO)--> RUNNING
    RUNNING --check finished--> IDLE
    any --set_enabled(False)--> DISABLED (timer and queued checks cancelled)

Content shorter than the minimum length clears results without scheduling.
A finished check whose content is no longer the latest is discarded.
"""

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from enum import Enum
from typing import TYPE_CHECKING, Callable, Deque, Dict, Optional

from config_logging import get_logger
from .config import SchedulerConfig
from .models import CheckResult
from .text_normalizer import NormalizedText, normalize

if TYPE_CHECKING:
    from .service import GrammarCheckingService

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.scheduler')


class SchedulerState(Enum):
    """Scheduler states."""
    IDLE = "idle"
    SCHEDULED = "scheduled"
    QUEUED = "queued"
    RUNNING = "running"
    DISABLED = "disabled"


class CheckSlots:
    """
    Counting limit on concurrent checks with FIFO waiters.

    A released slot is handed directly to the oldest waiter, so later
    arrivals cannot overtake queued checks.
    """

    def __init__(self, limit: int = 5):
        self.limit = max(1, limit)
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    @property
    def available(self) -> bool:
        return self._active < self.limit and not self.waiting

    async def acquire(self):
        if self.available:
            self._active += 1
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation
                self.release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def release(self):
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._active = max(0, self._active - 1)

    @asynccontextmanager
    async def slot(self, on_acquired: Optional[Callable[[], None]] = None):
        """Hold a slot for the duration of the block."""
        await self.acquire()
        try:
            if on_acquired is not None:
                on_acquired()
            yield
        finally:
            self.release()


class CheckObserver:
    """
    Receives scheduler notifications. Override the hooks you need.
    """

    def on_check_started(self, fingerprint: str):
        pass

    def on_check_completed(self, result: CheckResult):
        pass

    def on_check_discarded(self, result: CheckResult):
        pass

    def on_results_cleared(self):
        pass

    def on_state_changed(self, old: SchedulerState, new: SchedulerState):
        pass


class ContentChangeScheduler:
    """Debounced, concurrency-bounded driver of service checks."""

    def __init__(self, service: 'GrammarCheckingService', config: Optional[SchedulerConfig] = None,
                 observer: Optional[CheckObserver] = None):
        self.service = service
        self.config = config or SchedulerConfig()
        self.observer = observer or CheckObserver()
        self._state = SchedulerState.IDLE
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[NormalizedText] = None
        self._last_length: Optional[int] = None
        # task -> True once it holds a slot
        self._tasks: Dict[asyncio.Task, bool] = {}
        self.runs_started = 0
        self.runs_discarded = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    def _notify(self, hook: str, *args):
        try:
            getattr(self.observer, hook)(*args)
        except Exception as e:
            _logger.warning(f"Observer {hook} raised: {e}", hook=hook)

    def _set_state(self, new: SchedulerState):
        old = self._state
        if old != new:
            self._state = new
            _logger.debug(f"Scheduler {old.value} -> {new.value}")
            self._notify('on_state_changed', old, new)

    def _refresh_state(self):
        if self._state == SchedulerState.DISABLED:
            return
        if self._timer is not None:
            self._set_state(SchedulerState.SCHEDULED)
        elif any(not started for started in self._tasks.values()):
            self._set_state(SchedulerState.QUEUED)
        elif self._tasks:
            self._set_state(SchedulerState.RUNNING)
        else:
            self._set_state(SchedulerState.IDLE)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_content_changed(self, text: str):
        """
        Handle an editor content change. Must be called from the event loop.
        """
        if self._state == SchedulerState.DISABLED:
            return

        normalized = normalize(text, min_length=self.config.min_content_length)
        if not normalized:
            self._cancel_timer()
            self._pending = None
            self._last_length = None
            self.service.note_content(normalize(text, min_length=0).fingerprint)
            self.service.clear_results()
            self._notify('on_results_cleared')
            self._refresh_state()
            return

        if self._state != SchedulerState.SCHEDULED and self._last_length is not None \
                and abs(len(normalized) - self._last_length) < self.config.min_change_chars:
            return

        self.service.note_content(normalized.fingerprint)
        self._pending = normalized
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.config.debounce_ms / 1000, self._fire)
        self._refresh_state()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        self._timer = None
        pending, self._pending = self._pending, None
        if pending is None:
            self._refresh_state()
            return
        self._last_length = len(pending)
        task = asyncio.ensure_future(self._run(pending))
        self._tasks[task] = False
        task.add_done_callback(self._task_done)
        self.runs_started += 1
        self._refresh_state()

    async def _run(self, normalized: NormalizedText):
        task = asyncio.current_task()

        def _on_slot():
            self._tasks[task] = True
            self._refresh_state()
            self._notify('on_check_started', normalized.fingerprint)

        result = await self.service.run_scheduled_check(normalized, on_slot=_on_slot)
        if self.service.commit(result):
            self._notify('on_check_completed', result)
        else:
            self.runs_discarded += 1
            _logger.debug("Discarded stale check result", fingerprint=result.fingerprint)
            self._notify('on_check_discarded', result)

    def _task_done(self, task: asyncio.Task):
        self._tasks.pop(task, None)
        if not task.cancelled() and task.exception() is not None:
            _logger.error(f"Scheduled check failed: {task.exception()}")
        self._refresh_state()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool):
        if enabled:
            if self._state == SchedulerState.DISABLED:
                self._state = SchedulerState.IDLE
                self._last_length = None
                self._notify('on_state_changed', SchedulerState.DISABLED, SchedulerState.IDLE)
                self._refresh_state()
            return

        self._cancel_timer()
        self._pending = None
        for task, started in list(self._tasks.items()):
            if not started:
                task.cancel()
        self._set_state(SchedulerState.DISABLED)
        self._notify('on_results_cleared')

    def cancel_all(self):
        """Cancel the timer and every check, started or not."""
        self._cancel_timer()
        self._pending = None
        for task in list(self._tasks):
            task.cancel()

    async def wait_idle(self):
        """Wait until no timer is armed and no check is in flight."""
        loop = asyncio.get_running_loop()
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))
            # Let done callbacks and a just-fired timer run
            await asyncio.sleep(0)
