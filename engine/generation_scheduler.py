"""
Generation scheduler.

A recurring QTimer drives an IDLE/RUNNING state machine. A tick while IDLE
submits BatchGenerator.generate() to the COMPUTE pool; a tick while RUNNING
is skipped and reported, so slow generation drops ticks instead of queueing
them. A generation abandoned by stop() keeps the scheduler draining until
its worker returns, so a restart never overlaps it. The worker hands its TaskResult back through a Qt signal, which Qt
queues onto the UI thread because the scheduler lives there.
"""
from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Dict, Optional

from PySide6.QtCore import QObject, QTimer, Qt, Signal

from core.logging.logger import get_logger
from core.logging.tags import TAG_PERF, TAG_SCHED, TAG_SKIP
from core.threading.manager import TaskResult
from engine.batch_generator import BatchGenerator
from engine.errors import ConfigurationError, GenerationError

logger = get_logger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class GenerationScheduler(QObject):
    """
    Owns the generation timer and the single in-flight generation.

    Signals:
        batch_ready(Batch): a generation finished; emitted on the UI thread
        generation_failed(Exception): a generation raised; the cycle goes on
        tick_skipped(int): a tick arrived while RUNNING; carries the number
            of ticks skipped so far in the current cycle
        state_changed(SchedulerState)
    """

    batch_ready = Signal(object)
    generation_failed = Signal(object)
    tick_skipped = Signal(int)
    state_changed = Signal(object)

    # Completion channel from the worker: (generation id, TaskResult)
    _generation_finished = Signal(int, object)

    def __init__(self, generator: BatchGenerator, thread_manager, shape_count: int,
                 interval_ms: int, parent: Optional[QObject] = None):
        super().__init__(parent)
        if isinstance(interval_ms, bool) or not isinstance(interval_ms, int) or interval_ms <= 0:
            raise ConfigurationError(f"interval_ms must be a positive int, got {interval_ms!r}")

        self._generator = generator
        self._threads = thread_manager
        self._shape_count = shape_count
        self._interval_ms = interval_ms

        self._state = SchedulerState.IDLE
        self._stopped = True
        self._generation_id = 0
        self._task_id: Optional[str] = None
        # Generation abandoned by stop() whose worker has not returned yet
        self._draining_id: Optional[int] = None
        self._start_when_drained = False
        self._cancel_event: Optional[threading.Event] = None
        self._started_at = 0.0
        self._cycle_skips = 0
        self._stats = {'ticks': 0, 'skipped': 0, 'completed': 0, 'failed': 0, 'discarded': 0}

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.CoarseTimer)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

        self._generation_finished.connect(self._on_generation_finished)

        logger.debug("%s Scheduler ready (count=%d, interval=%dms)", TAG_SCHED, shape_count, interval_ms)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def is_active(self) -> bool:
        """True between start() and stop()."""
        return not self._stopped

    @property
    def is_draining(self) -> bool:
        """True while an abandoned generation is still running on a worker."""
        return self._draining_id is not None

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def is_timer_armed(self) -> bool:
        return self._timer.isActive()

    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def start(self, immediate: bool = False) -> None:
        """Arm the timer. With ``immediate`` the first batch starts now."""
        if not self._stopped:
            logger.debug("%s start() ignored, already active", TAG_SCHED)
            return
        self._stopped = False
        self._timer.start()
        logger.info("%s Generation cycle started (interval=%dms)", TAG_SCHED, self._interval_ms)
        if immediate:
            if self.is_draining:
                self._start_when_drained = True
            self.tick()

    def stop(self) -> None:
        """Stop the timer and abandon any in-flight generation.

        Never raises; a result arriving after this is discarded.
        """
        if self._stopped:
            return
        self._stopped = True
        self._timer.stop()

        if self._cancel_event is not None:
            self._cancel_event.set()
        if self.is_running:
            cancelled = False
            if self._task_id is not None:
                try:
                    cancelled = self._threads.cancel_task(self._task_id)
                except Exception as e:
                    logger.debug("%s cancel_task failed during stop: %s", TAG_SCHED, e)
            if not cancelled:
                # The worker may already be inside generate()
                self._draining_id = self._generation_id
        self._start_when_drained = False
        self._cycle_skips = 0
        self._task_id = None
        self._cancel_event = None
        self._set_state(SchedulerState.IDLE)
        logger.info("%s Generation cycle stopped (%s)", TAG_SCHED, self._stats)

    def tick(self) -> None:
        """Handle one timer firing."""
        if self._stopped:
            return
        self._stats['ticks'] += 1

        if self._state is SchedulerState.RUNNING or self.is_draining:
            self._cycle_skips += 1
            self._stats['skipped'] += 1
            running_id = self._draining_id if self.is_draining else self._generation_id
            logger.info("%s %s Tick skipped, generation #%d still running (%d this cycle)",
                        TAG_SCHED, TAG_SKIP, running_id, self._cycle_skips)
            self.tick_skipped.emit(self._cycle_skips)
            return

        self._start_generation()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_state(self, state: SchedulerState) -> None:
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state)

    def _start_generation(self) -> None:
        self._generation_id += 1
        generation_id = self._generation_id
        self._cancel_event = threading.Event()
        self._cycle_skips = 0
        self._started_at = time.monotonic()
        self._set_state(SchedulerState.RUNNING)

        def _deliver(result: TaskResult, gid: int = generation_id) -> None:
            # Worker thread: hand the result to the UI thread and never touch it again
            self._generation_finished.emit(gid, result)

        logger.debug("%s Starting generation #%d", TAG_SCHED, generation_id)
        try:
            task_id = self._threads.submit_compute_task(
                self._generator.generate,
                self._shape_count,
                self._cancel_event,
                task_id=f"shape_batch_{generation_id}",
                callback=_deliver,
            )
        except Exception as e:
            error = GenerationError(f"Could not submit generation #{generation_id}: {e}")
            error.__cause__ = e
            self._fail(generation_id, error)
            return

        # The result may already have been delivered if the pool ran inline
        if self.is_running and generation_id == self._generation_id:
            self._task_id = task_id

    def _on_generation_finished(self, generation_id: int, result: TaskResult) -> None:
        if generation_id == self._draining_id:
            self._on_drained(generation_id)
            return
        if self._stopped or generation_id != self._generation_id or not self.is_running:
            self._stats['discarded'] += 1
            logger.debug("%s Discarding result of generation #%d", TAG_SCHED, generation_id)
            return

        self._task_id = None
        self._cancel_event = None

        if not result.success:
            self._fail(generation_id, result.error)
            return

        batch = result.result
        self._stats['completed'] += 1
        logger.debug("%s %s Generation #%d done: %d shapes, worker %.1fms, cycle %.1fms",
                     TAG_SCHED, TAG_PERF, generation_id, len(batch),
                     result.execution_time * 1000.0,
                     (time.monotonic() - self._started_at) * 1000.0)
        try:
            self.batch_ready.emit(batch)
        finally:
            self._finish_cycle()

    def _on_drained(self, generation_id: int) -> None:
        self._draining_id = None
        self._stats['discarded'] += 1
        logger.debug("%s Abandoned generation #%d returned, discarded", TAG_SCHED, generation_id)
        if self._stopped or self.is_running:
            return
        if self._start_when_drained:
            self._start_when_drained = False
            self._start_generation()
        else:
            self._timer.start()

    def _fail(self, generation_id: int, error: BaseException) -> None:
        self._stats['failed'] += 1
        logger.error("%s Generation #%d failed: %s", TAG_SCHED, generation_id, error,
                     exc_info=(type(error), error, error.__traceback__))
        try:
            self.generation_failed.emit(error)
        finally:
            self._finish_cycle()

    def _finish_cycle(self) -> None:
        self._set_state(SchedulerState.IDLE)
        if not self._stopped:
            # Restart the countdown so the next batch is a full interval away
            self._timer.start()
