"""
Thread Manager for the shape overlay.

Centralized thread management over a COMPUTE pool for shape generation.
Results come back as TaskResult objects through a callback that runs on
the worker thread.
"""
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_THREADING

logger = get_logger(__name__)


class ThreadPoolType(Enum):
    """Thread pool types for overlay workloads"""
    COMPUTE = "compute"     # Shape batch generation


@dataclass
class TaskResult:
    """Container for task execution results"""
    success: bool
    result: Any = None
    error: Optional[BaseException] = None
    execution_time: float = 0.0
    task_id: Optional[str] = None


class Task:
    """Wrapper for executable tasks with metadata"""
    def __init__(self, func: Callable, *args, task_id: str = None,
                 pool_type: ThreadPoolType = ThreadPoolType.COMPUTE, **kwargs):
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.task_id = task_id or f"task_{id(self)}"
        self.pool_type = pool_type
        self.created_at = time.time()
        self.future: Optional[Future] = None


class ThreadManager:
    """
    Centralized thread manager for the overlay.

    Features:
    - A COMPUTE pool sized to the machine
    - Result handling via TaskResult callbacks (run on the worker thread)
    - Per-pool submitted/completed/failed counters
    """
    def __init__(self, config: Optional[Dict[ThreadPoolType, int]] = None):
        """
        Initialize thread manager.

        Args:
            config: Dictionary mapping ThreadPoolType to max_workers count
        """
        self._shutdown = False

        cpu_count = os.cpu_count() or 1
        default_config = {
            ThreadPoolType.COMPUTE: max(1, cpu_count - 1),
        }
        self.config = {**default_config, **(config or {})}

        self._executors: Dict[ThreadPoolType, ThreadPoolExecutor] = {}
        self._active_tasks: Dict[str, Task] = {}
        self._stats = {pool_type: {'submitted': 0, 'completed': 0, 'failed': 0}
                       for pool_type in ThreadPoolType}
        self._lock = threading.Lock()

        self._initialize_pools()

        logger.info("ThreadManager initialized with COMPUTE=%d workers",
                    self.config[ThreadPoolType.COMPUTE])

    def _initialize_pools(self):
        for pool_type, max_workers in self.config.items():
            try:
                self._executors[pool_type] = ThreadPoolExecutor(
                    max_workers=max_workers,
                    thread_name_prefix=f"{pool_type.value}_pool"
                )
            except Exception as e:
                logger.error(f"Failed to initialize {pool_type.value} pool: %s", e)
                self.shutdown()
                raise RuntimeError(f"Failed to initialize {pool_type.value} thread pool") from e
            logger.info(f"Initialized {pool_type.value} pool with {max_workers} workers")

    def submit_task(self, pool_type: ThreadPoolType, func: Callable, *args,
                    task_id: str = None,
                    callback: Callable[[TaskResult], None] = None, **kwargs) -> str:
        """
        Submit a task to the specified thread pool.

        Args:
            pool_type: Which thread pool to use
            func: Function to execute
            *args: Positional arguments for func
            task_id: Optional unique identifier
            callback: Optional callback receiving the TaskResult. It runs on
                the worker thread; use a queued signal to get back to the
                UI.
            **kwargs: Keyword arguments for func

        Returns:
            str: Task ID for tracking
        """
        if self._shutdown:
            raise RuntimeError("Thread manager is shut down")

        task = Task(func, *args, task_id=task_id, pool_type=pool_type, **kwargs)
        executor = self._executors[pool_type]

        def wrapped_func():
            start_time = time.perf_counter()
            try:
                result = task.func(*task.args, **task.kwargs)
                task_result = TaskResult(
                    success=True,
                    result=result,
                    execution_time=time.perf_counter() - start_time,
                    task_id=task.task_id
                )
                self._record(pool_type, 'completed')
            except Exception as e:
                task_result = TaskResult(
                    success=False,
                    error=e,
                    execution_time=time.perf_counter() - start_time,
                    task_id=task.task_id
                )
                logger.debug(f"{TAG_THREADING} Task {task.task_id} failed: {e}")
                self._record(pool_type, 'failed')
            finally:
                with self._lock:
                    self._active_tasks.pop(task.task_id, None)

            if callback:
                try:
                    callback(task_result)
                except Exception as e:
                    logger.error(f"Callback for task {task.task_id} failed: {e}")

            return task_result

        with self._lock:
            self._active_tasks[task.task_id] = task
            self._stats[pool_type]['submitted'] += 1
        task.future = executor.submit(wrapped_func)

        if is_verbose_logging():
            logger.debug(f"Submitted task {task.task_id} to {pool_type.value} pool")
        return task.task_id

    def submit_compute_task(self, func: Callable, *args, **kwargs) -> str:
        """Convenience method for COMPUTE pool submissions (shape generation)."""
        return self.submit_task(ThreadPoolType.COMPUTE, func, *args, **kwargs)

    def cancel_task(self, task_id: str) -> bool:
        """Attempt to cancel a task that has not started yet."""
        with self._lock:
            task = self._active_tasks.get(task_id)
        if task is None or task.future is None:
            return False
        cancelled = task.future.cancel()
        if cancelled:
            with self._lock:
                self._active_tasks.pop(task_id, None)
            logger.info(f"Cancelled task {task_id}")
        return cancelled

    def get_active_tasks(self) -> List[str]:
        """Get list of currently active task IDs"""
        with self._lock:
            return list(self._active_tasks.keys())

    def get_pool_stats(self) -> Dict[str, Dict[str, int]]:
        """Get statistics for all thread pools"""
        with self._lock:
            return {pool_type.value: stats.copy()
                    for pool_type, stats in self._stats.items()}

    def shutdown(self, wait: bool = True):
        """
        Shutdown all thread pools.

        Args:
            wait: Whether to wait for running tasks to finish
        """
        if self._shutdown:
            return
        self._shutdown = True
        logger.info("Shutting down thread manager...")

        for task_id in self.get_active_tasks():
            self.cancel_task(task_id)

        for pool_type, executor in self._executors.items():
            logger.debug(f"Shutting down {pool_type.value} pool...")
            executor.shutdown(wait=wait, cancel_futures=True)

        self._executors.clear()
        with self._lock:
            self._active_tasks.clear()

        logger.info("Thread manager shut down complete")

    def _record(self, pool_type: ThreadPoolType, kind: str) -> None:
        with self._lock:
            self._stats[pool_type][kind] += 1
