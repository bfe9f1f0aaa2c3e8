"""Deadlines and cancellation for repository calls

Every repository method accepts an optional `deadline` and must abort promptly
(by raising DeadlineExceededError) once it fires. A deadline fires either when
its timeout elapses or when it is cancelled explicitly.

Example:
    >>> deadline = Deadline(timeout=2.5)
    >>> deadline.check()          # no-op while time is left
    >>> deadline.cancel()
    >>> deadline.check()
    Traceback (most recent call last):
        ...
    golink.exceptions.DeadlineExceededError: Deadline cancelled.
"""

import threading
import time

from golink.exceptions import DeadlineExceededError


class Deadline:
    """Time budget and cancellation signal shared by the calls of one unit of work.

    Attributes:
        timeout (float | None):
            Seconds from construction until the deadline fires. None means no time limit.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancelled = threading.Event()

    def remaining(self) -> float | None:
        """Seconds left before the deadline fires (never negative), None if unbounded."""
        if self._cancelled.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() == 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self) -> None:
        """Raise DeadlineExceededError if the deadline has fired."""
        if self._cancelled.is_set():
            raise DeadlineExceededError('Deadline cancelled.')
        if self.expired:
            raise DeadlineExceededError(f'Deadline of {self.timeout}s exceeded.')

    def __repr__(self) -> str:
        return f'<Deadline timeout={self.timeout} remaining={self.remaining()}>'


def check_deadline(deadline: Deadline | None) -> None:
    if deadline is not None:
        deadline.check()
