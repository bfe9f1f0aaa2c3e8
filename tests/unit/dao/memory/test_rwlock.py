import threading

import pytest

from golink.exceptions import DeadlineExceededError
from golink.dao.memory import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()

    with lock.read(timeout=1):
        with lock.read(timeout=1):
            pass


def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()

    with lock.read():
        with pytest.raises(DeadlineExceededError, match='write lock'):
            with lock.write(timeout=0.05):
                pass

    with lock.write(timeout=1):
        pass


def test_reader_waits_for_writer() -> None:
    lock = ReadWriteLock()
    acquired = threading.Event()
    release = threading.Event()

    def writer():
        with lock.write():
            acquired.set()
            release.wait(timeout=5)

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        assert acquired.wait(timeout=5)
        with pytest.raises(DeadlineExceededError, match='read lock'):
            with lock.read(timeout=0.05):
                pass
    finally:
        release.set()
        thread.join(timeout=5)

    with lock.read(timeout=1):
        pass


def test_lock_is_released_on_error() -> None:
    lock = ReadWriteLock()

    with pytest.raises(ValueError):
        with lock.write():
            raise ValueError('boom')

    with lock.write(timeout=1):
        pass
