"""
Background execution for asynchronous fractal generation.

All asynchronous and progressive generations share one thread pool. A
generation runs to completion once submitted; there is no cancellation, a
caller that loses interest simply ignores the result. Callbacks run on the
worker thread that ran the generation, and redirecting them to a UI thread
is the caller's job.
"""

import os
import time
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from ..config import get_config

logger = logging.getLogger(__name__)

T = TypeVar('T')

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """
    Forward progress values to a callback as a non-decreasing sequence in [0, 1].

    Values are clamped into range and anything below the last reported value
    is dropped, so callers only ever observe monotonic progress.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        """
        Initialize progress reporter.

        Args:
            callback: Function called with each accepted progress value
        """
        self.callback = callback
        self.last: Optional[float] = None

    def report(self, value: float) -> None:
        """Report progress at a stage boundary."""
        value = min(1.0, max(0.0, float(value)))
        if self.last is not None and value < self.last:
            return
        self.last = value
        if self.callback is not None:
            self.callback(value)


def get_optimal_worker_count() -> int:
    """Get the default number of worker threads for generation."""
    cpu_count = os.cpu_count() or 1

    # Leave one core for the caller
    return max(1, cpu_count - 1)


# Global executor shared by every generator
_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Get the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            workers = get_config().max_workers or get_optimal_worker_count()
            _executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='fractal-gen')
            logger.info(f"Generation worker pool started: {workers} threads")
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    """Shut the shared worker pool down; the next submission starts a new one."""
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)
        logger.info("Generation worker pool shut down")


def submit_generation(task: Callable[[ProgressReporter], T],
                      on_progress: Optional[ProgressCallback] = None,
                      on_complete: Optional[Callable[[T], None]] = None,
                      label: str = 'generation') -> 'Future[T]':
    """
    Run a generation task on the shared worker pool.

    ``on_progress`` receives non-decreasing values in [0, 1]; ``on_complete``
    fires exactly once, after the last progress call, with the task's result.
    If the task raises, the error is logged and stored on the returned
    future and ``on_complete`` is not called.

    Args:
        task: Function computing the result given a progress reporter
        on_progress: Optional progress callback
        on_complete: Optional completion callback
        label: Name used in log messages

    Returns:
        Future resolving to the task's result
    """
    def run():
        reporter = ProgressReporter(on_progress)
        start_time = time.time()
        try:
            result = task(reporter)
        except Exception:
            logger.exception(f"{label} failed")
            raise
        logger.debug(f"{label} finished in {time.time() - start_time:.3f}s")
        if on_complete is not None:
            on_complete(result)
        return result

    return get_executor().submit(run)
