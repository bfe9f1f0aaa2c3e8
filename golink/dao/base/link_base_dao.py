"""Abstract base class for Link data access objects (DAOs).

This class establishes a consistent contract for all Link DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory).

Responsibilities:
    - Provide an interface for creating, reading, updating and deleting LinkModel objects.
    - Standardize error handling across multiple data store implementations.
    - Flip the sticky expiry flag of links observed as expired (as a detached task).
    - Enforce a consistent API for use by Lambda functions.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from golink.models import LinkModel
        >>> from golink.dao.redis import LinkRedisDAO

        >>> dao = LinkRedisDAO(...)

        >>> dao.create(LinkModel(short='docs', url='https://example.com/docs', created_by='u1'))
        LinkModel(short='docs', ...)

        >>> dao.get_by_short('docs').url
        'https://example.com/docs'

        >>> dao.check_access('docs', 'u2')
        True
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, UTC

from golink.constants import AccessLevel
from golink.models import LinkModel, LinkStatsModel
from golink.utils.access import check_access
from golink.utils.deadline import Deadline
from golink.utils.expiry import is_expired
from golink.utils.tasks import DetachedTaskRunner


logger = logging.getLogger(__name__)


class LinkBaseDAO(ABC):
    """Interface for Link data access objects (DAOs).

    Every method accepts a keyword-only `deadline` (golink.utils.deadline.Deadline)
    and raises DeadlineExceededError if it fires before the call completes.

    Methods:
        create(link) -> LinkModel:
            Persist a new link. Assigns created_at/updated_at.
            Raises LinkAlreadyExistsError if the short code is taken.

        get_by_short(short) -> LinkModel:
            Raises LinkNotFoundError if the short code doesn't exist.

        get_all() / get_by_access_level(level) / get_by_user(owner) -> list[LinkModel]:
            Unpaginated scans.

        count_links() -> int:
            Number of stored links, without loading them.

        update(link) -> LinkModel:
            Overwrite a link (last writer wins). Refreshes updated_at.
            Raises LinkNotFoundError if the short code doesn't exist.

        delete(short) -> None:
            Remove a link and its stats.
            Raises LinkNotFoundError if the short code doesn't exist.

        increment_click_count(short) -> int:
            Best-effort read-modify-write increment. Returns the new count.

        check_access(short, user_id) -> bool:
            Load a link and evaluate its access rules.

        get_expired_links() -> list[LinkModel]:
            Links flagged as expired or whose expiry moment has passed.

        get_links_by_expiry_status(is_expired) -> list[LinkModel]:
            Links whose persisted flag equals `is_expired`.

        get_link_stats(short) -> LinkStatsModel:
            Load the link's stats, creating a zeroed record on first access.

        record_click(short, **dimensions) -> LinkStatsModel:
            Account one click in the link's stats.

    Subclassing:
        Datastore-specific implementations must implement all abstract methods
        and call `_observe_expiry()` on every link returned by the read paths
        (get_by_short, get_all, get_by_access_level, get_by_user).

    Raises (all methods):
        DataStoreError:
            If there is an error in the data store.
    """

    def __init__(self, task_runner: DetachedTaskRunner | None = None, detached_task_timeout: float | None = None):
        self.task_runner = task_runner if task_runner is not None else DetachedTaskRunner()
        self.detached_task_timeout = detached_task_timeout

    @abstractmethod
    def create(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        pass

    @abstractmethod
    def get_by_short(self, short: str, *, deadline: Deadline | None = None) -> LinkModel:
        pass

    @abstractmethod
    def get_all(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        pass

    @abstractmethod
    def get_by_access_level(self, access_level: AccessLevel, *, deadline: Deadline | None = None) -> list[LinkModel]:
        pass

    @abstractmethod
    def get_by_user(self, user_id: str, *, deadline: Deadline | None = None) -> list[LinkModel]:
        pass

    @abstractmethod
    def count_links(self, *, deadline: Deadline | None = None) -> int:
        pass

    @abstractmethod
    def update(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        pass

    @abstractmethod
    def delete(self, short: str, *, deadline: Deadline | None = None) -> None:
        pass

    @abstractmethod
    def increment_click_count(self, short: str, *, deadline: Deadline | None = None) -> int:
        pass

    @abstractmethod
    def get_expired_links(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        pass

    @abstractmethod
    def get_links_by_expiry_status(self, is_expired: bool, *, deadline: Deadline | None = None) -> list[LinkModel]:
        pass

    @abstractmethod
    def get_link_stats(self, short: str, *, deadline: Deadline | None = None) -> LinkStatsModel:
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    def _flag_expired(self, short: str, *, deadline: Deadline | None = None) -> None:
        """Persist is_expired=True for a link (no-op if the link is gone)."""
        pass

    def check_access(self, short: str, user_id: str | None, *, deadline: Deadline | None = None) -> bool:
        """Load a link and decide whether `user_id` may access it.

        Raises:
            LinkNotFoundError:
                If the short code doesn't exist.
        """
        link = self.get_by_short(short, deadline=deadline)
        return check_access(link, user_id)

    def _observe_expiry(self, link: LinkModel) -> LinkModel:
        """Apply the sticky expiry flag to a link returned by a read path.

        If the link is past its expiry moment but not yet flagged, the flag is
        persisted by a detached task and the caller gets the flagged copy right away.
        """
        if link.is_expired or not is_expired(link, datetime.now(UTC)):
            return link

        logger.debug('Link observed as expired. Flagging it in the background.', extra={'short': link.short})
        self.task_runner.submit(
            self._flag_expired,
            link.short,
            name=f'flag-expired:{link.short}',
            timeout=self.detached_task_timeout,
        )
        return link.evolve(is_expired=True)
