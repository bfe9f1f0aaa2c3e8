import threading
from contextlib import contextmanager
from collections.abc import Iterator

from golink.exceptions import DeadlineExceededError


class ReadWriteLock:
    """Readers-writer lock: concurrent readers, exclusive writers.

    Waiting writers block new readers, so a steady stream of reads can't starve
    a write. Both context managers accept a timeout (seconds) and raise
    DeadlineExceededError if the lock can't be acquired in time.

    Example:
        >>> lock = ReadWriteLock()
        >>> with lock.read():
        ...     value = store.get('abc')
        >>> with lock.write(timeout=0.5):
        ...     store['abc'] = value
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self, timeout: float | None = None) -> Iterator[None]:
        with self._cond:
            acquired = self._cond.wait_for(lambda: not self._writer and not self._waiting_writers, timeout=timeout)
            if not acquired:
                raise DeadlineExceededError('Timed out waiting for read lock.')
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self, timeout: float | None = None) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                acquired = self._cond.wait_for(lambda: not self._writer and not self._readers, timeout=timeout)
            finally:
                self._waiting_writers -= 1
            if not acquired:
                # Readers held back by this writer may proceed now
                self._cond.notify_all()
                raise DeadlineExceededError('Timed out waiting for write lock.')
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()
