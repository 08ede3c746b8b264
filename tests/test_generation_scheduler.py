"""
Tests for the GenerationScheduler IDLE/RUNNING state machine.

Ticks are driven by hand and generation runs through a fake thread manager
that only completes work when told to, so the tests control exactly how many
ticks a generation spans.
"""
import random
import threading
import time

import pytest

from core.threading.manager import ThreadManager, ThreadPoolType
from engine.batch_generator import BatchGenerator
from engine.errors import ConfigurationError, GenerationCancelled, GenerationError
from engine.generation_scheduler import GenerationScheduler, SchedulerState
from engine.shape_factory import ShapeFactory
from engine.shapes import Batch

# Long enough that the real timer never fires during a test
INTERVAL_MS = 60_000


class Recorder:
    def __init__(self, scheduler):
        self.batches = []
        self.failures = []
        self.skips = []
        self.states = []
        scheduler.batch_ready.connect(self.batches.append)
        scheduler.generation_failed.connect(self.failures.append)
        scheduler.tick_skipped.connect(self.skips.append)
        scheduler.state_changed.connect(self.states.append)


@pytest.fixture
def generator(geometry):
    return BatchGenerator(ShapeFactory(geometry), random.Random(11))


@pytest.fixture
def scheduler(qt_app, generator, fake_threads):
    sched = GenerationScheduler(generator, fake_threads, shape_count=20, interval_ms=INTERVAL_MS)
    yield sched
    sched.stop()


@pytest.fixture
def recorder(scheduler):
    return Recorder(scheduler)


class TestLifecycle:
    def test_initial_state(self, scheduler):
        assert scheduler.state is SchedulerState.IDLE
        assert not scheduler.is_active
        assert not scheduler.is_timer_armed()
        assert scheduler.interval_ms == INTERVAL_MS

    def test_start_arms_timer(self, scheduler):
        scheduler.start()
        assert scheduler.is_active
        assert scheduler.is_timer_armed()
        assert scheduler.state is SchedulerState.IDLE

    def test_start_immediate_submits(self, scheduler, fake_threads):
        scheduler.start(immediate=True)
        assert fake_threads.pending == 1
        assert scheduler.state is SchedulerState.RUNNING

    def test_tick_ignored_before_start(self, scheduler, fake_threads):
        scheduler.tick()
        assert fake_threads.pending == 0
        assert scheduler.stats()['ticks'] == 0

    def test_stop_is_idempotent(self, scheduler):
        scheduler.stop()
        scheduler.start()
        scheduler.stop()
        scheduler.stop()
        assert not scheduler.is_active
        assert not scheduler.is_timer_armed()

    @pytest.mark.parametrize("interval", [0, -5, 1.5, True])
    def test_rejects_bad_interval(self, qt_app, generator, fake_threads, interval):
        with pytest.raises(ConfigurationError):
            GenerationScheduler(generator, fake_threads, 10, interval)


class TestCycle:
    def test_tick_while_idle_starts_generation(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()

        assert fake_threads.pending == 1
        task_id = fake_threads.submitted[0][0]
        assert task_id == "shape_batch_1"
        assert scheduler.is_running
        assert recorder.states == [SchedulerState.RUNNING]

    def test_success_delivers_batch_and_rearms(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()
        fake_threads.complete()

        assert len(recorder.batches) == 1
        assert isinstance(recorder.batches[0], Batch)
        assert len(recorder.batches[0]) == 20
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.is_timer_armed()
        assert recorder.states == [SchedulerState.RUNNING, SchedulerState.IDLE]
        assert scheduler.stats()['completed'] == 1

    def test_tick_while_running_skips(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()
        scheduler.tick()

        assert fake_threads.pending == 1
        assert recorder.skips == [1]
        assert scheduler.stats()['skipped'] == 1

    def test_generation_spanning_three_ticks_skips_twice(self, scheduler, recorder, fake_threads):
        """interval = 1 tick, generation takes 3 ticks: exactly 2 skips."""
        scheduler.start()
        scheduler.tick()           # t=1: generation starts
        scheduler.tick()           # t=2: skipped
        scheduler.tick()           # t=3: skipped
        assert recorder.batches == []
        fake_threads.complete()    # t=4: generation done

        assert recorder.skips == [1, 2]
        assert len(recorder.batches) == 1
        assert fake_threads.pending == 0

        # The next tick starts a fresh cycle with its own skip count
        scheduler.tick()
        scheduler.tick()
        assert fake_threads.pending == 1
        assert recorder.skips == [1, 2, 1]

    def test_never_two_generations_in_flight(self, scheduler, fake_threads):
        scheduler.start()
        for _ in range(10):
            scheduler.tick()
        assert fake_threads.pending == 1

    def test_consecutive_cycles(self, scheduler, recorder, fake_threads):
        scheduler.start()
        for _ in range(3):
            scheduler.tick()
            fake_threads.complete()

        assert [b.sequence for b in recorder.batches] == [1, 2, 3]
        assert scheduler.stats()['completed'] == 3


class TestFailures:
    def test_failure_reported_and_cycle_continues(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()
        fake_threads.fail(GenerationError("boom"))

        assert len(recorder.failures) == 1
        assert str(recorder.failures[0]) == "boom"
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.is_timer_armed()

        scheduler.tick()
        fake_threads.complete()
        assert len(recorder.batches) == 1
        assert scheduler.stats()['failed'] == 1

    def test_generator_exception_becomes_failure(self, qt_app, fake_threads):
        class BrokenGenerator:
            def generate(self, count, cancel_event=None):
                raise GenerationError("malformed shape")

        scheduler = GenerationScheduler(BrokenGenerator(), fake_threads, 5, INTERVAL_MS)
        failures = []
        scheduler.generation_failed.connect(failures.append)
        scheduler.start()
        scheduler.tick()
        fake_threads.complete()

        assert isinstance(failures[0], GenerationError)
        assert not scheduler.is_running
        scheduler.stop()

    def test_submit_failure_is_reported(self, scheduler, recorder, fake_threads):
        fake_threads.fail_submit = True
        scheduler.start()
        scheduler.tick()

        assert len(recorder.failures) == 1
        assert isinstance(recorder.failures[0], GenerationError)
        assert isinstance(recorder.failures[0].__cause__, RuntimeError)
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.is_timer_armed()


class TestStop:
    def test_stop_discards_late_result(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()
        scheduler.stop()
        result = fake_threads.complete()

        assert recorder.batches == []
        assert recorder.failures == []
        assert isinstance(result.error, GenerationCancelled)
        assert scheduler.stats()['discarded'] == 1

    def test_stop_cancels_in_flight_task(self, scheduler, fake_threads):
        scheduler.start()
        scheduler.tick()
        cancel_event = fake_threads.submitted[0][2][1]
        scheduler.stop()

        assert fake_threads.cancelled == ["shape_batch_1"]
        assert cancel_event.is_set()
        assert scheduler.state is SchedulerState.IDLE
        assert not scheduler.is_timer_armed()

    def test_ticks_after_stop_do_nothing(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.stop()
        scheduler.tick()
        assert fake_threads.pending == 0
        assert recorder.skips == []

    def test_restart_after_stop(self, scheduler, recorder, fake_threads):
        scheduler.start()
        scheduler.tick()
        scheduler.stop()
        fake_threads.complete()

        scheduler.start()
        scheduler.tick()
        fake_threads.complete()
        assert len(recorder.batches) == 1


class TestRestartWhileDraining:
    def test_restart_waits_for_abandoned_worker(self, scheduler, recorder, fake_threads):
        scheduler.start(immediate=True)
        scheduler.stop()
        assert scheduler.is_draining

        scheduler.start(immediate=True)
        scheduler.tick()

        # Only the abandoned generation is queued; both ticks were skipped
        assert fake_threads.pending == 1
        assert recorder.skips == [1, 2]
        assert not scheduler.is_running

        fake_threads.complete()

        assert not scheduler.is_draining
        assert fake_threads.pending == 1
        assert fake_threads.submitted[0][0] == "shape_batch_2"
        assert scheduler.is_running
        assert recorder.batches == []

        fake_threads.complete()
        assert [b.sequence for b in recorder.batches] == [1]
        assert scheduler.stats()['discarded'] == 1

    def test_plain_restart_rearms_after_drain(self, scheduler, fake_threads):
        scheduler.start(immediate=True)
        scheduler.stop()
        scheduler.start()
        fake_threads.complete()

        assert not scheduler.is_draining
        assert fake_threads.pending == 0
        assert scheduler.is_timer_armed()

        scheduler.tick()
        assert fake_threads.pending == 1

    def test_drain_after_final_stop_stays_idle(self, scheduler, fake_threads):
        scheduler.start(immediate=True)
        scheduler.stop()
        scheduler.start(immediate=True)
        scheduler.stop()
        fake_threads.complete()

        assert fake_threads.pending == 0
        assert not scheduler.is_draining
        assert not scheduler.is_timer_armed()

    def test_cancelled_queued_task_does_not_drain(self, scheduler, fake_threads, monkeypatch):
        monkeypatch.setattr(fake_threads, "cancel_task", lambda task_id: True)
        scheduler.start(immediate=True)
        scheduler.stop()
        assert not scheduler.is_draining

        scheduler.start(immediate=True)
        assert fake_threads.pending == 2
        assert scheduler.is_running


class _SlowFactory:
    """Wraps a ShapeFactory, sleeping per shape and counting concurrent callers."""

    def __init__(self, factory, delay):
        self._factory = factory
        self._delay = delay
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0
        self.entered = threading.Event()

    def produce(self, rng):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.entered.set()
        try:
            time.sleep(self._delay)
            return self._factory.produce(rng)
        finally:
            with self._lock:
                self.active -= 1


def test_restart_never_overlaps_on_multi_worker_pool(qtbot, geometry):
    factory = _SlowFactory(ShapeFactory(geometry), delay=0.1)
    threads = ThreadManager({ThreadPoolType.COMPUTE: 4})
    scheduler = GenerationScheduler(BatchGenerator(factory, random.Random(3)), threads,
                                    shape_count=5, interval_ms=INTERVAL_MS)
    batches = []
    scheduler.batch_ready.connect(batches.append)
    try:
        scheduler.start(immediate=True)
        assert factory.entered.wait(5.0)

        scheduler.stop()
        scheduler.start(immediate=True)
        assert scheduler.is_draining

        qtbot.waitUntil(lambda: len(batches) == 1, timeout=10000)
        assert factory.max_active == 1
        assert len(batches[0]) == 5
        assert batches[0].sequence == 1
    finally:
        scheduler.stop()
        threads.shutdown(wait=True)
