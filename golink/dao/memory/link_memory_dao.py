"""In-memory implementation of LinkBaseDAO

A second conforming implementation of the link repository, backed by plain
dicts and guarded by a readers-writer lock. It's used by tests and local runs;
it is not a mock of LinkRedisDAO and has no Redis-specific behavior.
"""

import copy
import logging
from datetime import datetime, UTC

from golink.constants import AccessLevel
from golink.models import LinkModel, LinkStatsModel
from golink.dao.base import LinkBaseDAO
from golink.dao.memory.rwlock import ReadWriteLock
from golink.dao.exceptions import LinkAlreadyExistsError, LinkNotFoundError
from golink.utils.deadline import Deadline, check_deadline
from golink.utils.expiry import is_expired
from golink.utils.tasks import DetachedTaskRunner


logger = logging.getLogger(__name__)


def _lock_timeout(deadline: Deadline | None) -> float | None:
    check_deadline(deadline)
    return None if deadline is None else deadline.remaining()


class LinkMemoryDAO(LinkBaseDAO):
    """Dict-backed link repository, safe for concurrent use.

    Links are immutable LinkModel values, so they are shared freely; stats are
    mutable and copied on the way in and out.
    """

    def __init__(self, task_runner: DetachedTaskRunner | None = None, detached_task_timeout: float | None = None):
        super().__init__(task_runner=task_runner, detached_task_timeout=detached_task_timeout)
        self._links: dict[str, LinkModel] = {}
        self._stats: dict[str, LinkStatsModel] = {}
        self._lock = ReadWriteLock()

    def create(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        now = datetime.now(UTC)
        stored = link.evolve(created_at=now, updated_at=now)
        with self._lock.write(timeout=_lock_timeout(deadline)):
            if link.short in self._links:
                raise LinkAlreadyExistsError(f"Link with short code '{link.short}' already exists.")
            self._links[link.short] = stored
        return stored

    def get_by_short(self, short: str, *, deadline: Deadline | None = None) -> LinkModel:
        with self._lock.read(timeout=_lock_timeout(deadline)):
            link = self._get(short)
        return self._observe_expiry(link)

    def get_all(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [self._observe_expiry(link) for link in self._snapshot(deadline)]

    def get_by_access_level(self, access_level: AccessLevel, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [self._observe_expiry(link) for link in self._snapshot(deadline) if link.access_level is access_level]

    def get_by_user(self, user_id: str, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [self._observe_expiry(link) for link in self._snapshot(deadline) if link.created_by == user_id]

    def count_links(self, *, deadline: Deadline | None = None) -> int:
        with self._lock.read(timeout=_lock_timeout(deadline)):
            return len(self._links)

    def update(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            existing = self._get(link.short)
            stored = link.evolve(created_at=link.created_at or existing.created_at, updated_at=datetime.now(UTC))
            self._links[link.short] = stored
        return stored

    def delete(self, short: str, *, deadline: Deadline | None = None) -> None:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            self._get(short)
            del self._links[short]
            self._stats.pop(short, None)

    def increment_click_count(self, short: str, *, deadline: Deadline | None = None) -> int:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            link = self._get(short)
            stored = link.evolve(click_count=link.click_count + 1, updated_at=datetime.now(UTC))
            self._links[short] = stored
        return stored.click_count

    def get_expired_links(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        now = datetime.now(UTC)
        return [link for link in self._snapshot(deadline) if link.is_expired or is_expired(link, now)]

    def get_links_by_expiry_status(self, is_expired: bool, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [link for link in self._snapshot(deadline) if link.is_expired is is_expired]

    def get_link_stats(self, short: str, *, deadline: Deadline | None = None) -> LinkStatsModel:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            self._get(short)
            stats = self._stats.setdefault(short, LinkStatsModel(short=short, created_at=datetime.now(UTC)))
            return copy.deepcopy(stats)

    def record_click(
        self,
        short: str,
        *,
        referrer: str = '',
        browser: str = '',
        operating_system: str = '',
        country: str = '',
        device_type: str = '',
        deadline: Deadline | None = None,
    ) -> LinkStatsModel:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            self._get(short)
            stats = self._stats.setdefault(short, LinkStatsModel(short=short, created_at=datetime.now(UTC)))
            stats.record_click(
                referrer=referrer,
                browser=browser,
                operating_system=operating_system,
                country=country,
                device_type=device_type,
            )
            return copy.deepcopy(stats)

    def _flag_expired(self, short: str, *, deadline: Deadline | None = None) -> None:
        with self._lock.write(timeout=_lock_timeout(deadline)):
            link = self._links.get(short)
            if link is None or link.is_expired or not is_expired(link, datetime.now(UTC)):
                return
            self._links[short] = link.evolve(is_expired=True, updated_at=datetime.now(UTC))
        logger.info('Persisted expiry flag of link.', extra={'short': short})

    def _get(self, short: str) -> LinkModel:
        try:
            return self._links[short]
        except KeyError:
            raise LinkNotFoundError(f"Link with short code '{short}' not found.") from None

    def _snapshot(self, deadline: Deadline | None) -> list[LinkModel]:
        with self._lock.read(timeout=_lock_timeout(deadline)):
            return [self._links[short] for short in sorted(self._links)]
