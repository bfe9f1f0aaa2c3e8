"""Fire-and-forget background work

A detached task runs on a shared thread pool, detached from the request that
scheduled it:
    - it gets its own Deadline, independent of the request's;
    - the caller never waits for it and never sees its result;
    - its failures are logged and swallowed, never retried.

Example:
    >>> runner = DetachedTaskRunner(timeout=30)
    >>> def flush(short, *, deadline):
    ...     dao.update(..., deadline=deadline)
    >>> runner.submit(flush, 'abc', name='flush-expiry-flag')
    <Future at 0x... state=running>

NOTE: Lambda freezes the execution environment as soon as the handler returns,
      so detached tasks may complete during a later invocation of the same
      environment, or never. They are best-effort by definition.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from collections.abc import Callable
from typing import Any

from golink.constants import Defaults, Timeout
from golink.utils.deadline import Deadline


logger = logging.getLogger(__name__)


DETACHED_TASK_FAILED = 'DETACHED_TASK_FAILED'


class DetachedTaskRunner:
    """Run callables in the background with their own deadline.

    Attributes:
        timeout (float | None):
            Default deadline (in seconds) given to every task.
        max_workers (int):
            Size of the underlying thread pool.

    Methods:
        submit(func, *args, name=None, timeout=None, **kwargs) -> Future:
            Schedule `func(*args, deadline=<fresh Deadline>, **kwargs)`.
        wait(timeout=None) -> bool:
            Block until every submitted task finished (used by tests and shutdown).
        shutdown(wait=True) -> None:
            Stop the thread pool.
    """

    def __init__(self, timeout: float | None = Timeout.DETACHED_TASK, max_workers: int = Defaults.DETACHED_TASK_WORKERS):
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='detached-task')
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, func: Callable[..., Any], *args, name: str | None = None, timeout: float | None = None, **kwargs) -> Future:
        task_name = name or getattr(func, '__name__', repr(func))
        task_timeout = self.timeout if timeout is None else timeout

        def run() -> Any:
            # The deadline starts ticking when the task starts, not when it is queued
            deadline = Deadline(timeout=task_timeout)
            try:
                return func(*args, deadline=deadline, **kwargs)
            except Exception:
                logger.exception(
                    'Detached task failed. Not retrying.',
                    extra={'event': DETACHED_TASK_FAILED, 'task': task_name},
                )
                return None

        future = self._executor.submit(run)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        logger.debug('Detached task submitted.', extra={'task': task_name, 'timeout': task_timeout})
        return future

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the currently pending tasks; True if all of them finished in time."""
        deadline = Deadline(timeout=timeout)
        while True:
            with self._lock:
                pending = [future for future in self._pending if not future.done()]
            if not pending:
                return True
            for future in pending:
                remaining = deadline.remaining()
                if remaining == 0.0:
                    return False
                try:
                    future.result(timeout=remaining)
                except TimeoutError:
                    return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
