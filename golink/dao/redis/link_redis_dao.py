"""Data Access Object (DAO) implementation for managing links in Redis

This module provides a Redis-based implementation of LinkBaseDAO. Links and their
click statistics are stored as JSON documents; a SET indexes all short codes so
scans don't have to walk the keyspace.

Responsibilities:
    - Create, read, update and delete links in Redis;
    - Track click counts and click statistics per link;
    - Persist the sticky expiry flag of links observed as expired;
    - Translate Redis errors into DAO exceptions.

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving LinkModel in a Redis datastore.

Example:
    >>> from golink.models import LinkModel
    >>> from golink.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="golink:dev")

    >>> dao.create(LinkModel(short='docs', url='https://example.com/docs', created_by='u1'))
    LinkModel(short='docs', url='https://example.com/docs', created_by='u1', ...)

    >>> dao.increment_click_count('docs')
    1
    >>> dao.get_by_short('docs').click_count
    1
"""

import json
import logging
from datetime import datetime, UTC

import redis
from beartype import beartype

from golink.constants import AccessLevel
from golink.models import LinkModel, LinkStatsModel
from golink.dao.base import LinkBaseDAO
from golink.dao.redis.mixins import RedisClientMixin
from golink.dao.redis.helpers import handle_redis_connection_error
from golink.dao.exceptions import LinkAlreadyExistsError, LinkNotFoundError
from golink.exceptions import InvalidLinkError
from golink.utils.deadline import Deadline, check_deadline
from golink.utils.expiry import is_expired
from golink.utils.tasks import DetachedTaskRunner


logger = logging.getLogger(__name__)


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing links

    This class implements the LinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
        task_runner (DetachedTaskRunner):
            Runs the background expiry-flag writes.
        detached_task_timeout (float | None):
            Deadline of each background write (None: the runner's default).

    Concurrency:
        Creation and deletion are Redis transactions. Updates and click increments
        are read-modify-write cycles without optimistic locking: the last writer
        wins and concurrent increments may be lost. The background expiry-flag write
        runs under WATCH and gives way to any write that lands before it.

    Example:
        >>> dao = LinkRedisDAO(redis_host="localhost", prefix="golink:test")
        >>> dao.create(LinkModel(short='abc', url='https://x.com'))
        >>> dao.check_access('abc', 'anyone')
        True
    """

    def __init__(self, task_runner: DetachedTaskRunner | None = None, detached_task_timeout: float | None = None, **kwargs):
        RedisClientMixin.__init__(self, **kwargs)
        LinkBaseDAO.__init__(self, task_runner=task_runner, detached_task_timeout=detached_task_timeout)

    @handle_redis_connection_error
    @beartype
    def create(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        """Insert a new link into Redis

        Args:
            link (LinkModel):
                Link to store. created_at and updated_at are overwritten with the current time.
            deadline (Deadline | None):
                Abort with DeadlineExceededError once it fires.

        Returns:
            LinkModel: the stored link (with timestamps).

        Raises:
            LinkAlreadyExistsError:
                If a link with the same short code already exists.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        now = datetime.now(UTC)
        stored = link.evolve(created_at=now, updated_at=now)

        check_deadline(deadline)
        # NOTE: SET NX decides uniqueness atomically. SADD runs regardless of the
        #       outcome, which is harmless: a taken short code is already indexed.
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(self.keys.link_key(link.short), json.dumps(stored.to_document()), nx=True)
            pipe.sadd(self.keys.links_index_key(), link.short)
            created, _ = pipe.execute()

        if not created:
            raise LinkAlreadyExistsError(f"Link with short code '{link.short}' already exists.")
        return stored

    @handle_redis_connection_error
    @beartype
    def get_by_short(self, short: str, *, deadline: Deadline | None = None) -> LinkModel:
        """Retrieve a link by its short code

        Raises:
            LinkNotFoundError:
                If the link does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        return self._observe_expiry(self._load(short, deadline=deadline))

    @handle_redis_connection_error
    @beartype
    def get_all(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [self._observe_expiry(link) for link in self._scan(deadline=deadline)]

    @handle_redis_connection_error
    @beartype
    def get_by_access_level(self, access_level: AccessLevel, *, deadline: Deadline | None = None) -> list[LinkModel]:
        links = self._scan(deadline=deadline)
        return [self._observe_expiry(link) for link in links if link.access_level is access_level]

    @handle_redis_connection_error
    @beartype
    def get_by_user(self, user_id: str, *, deadline: Deadline | None = None) -> list[LinkModel]:
        links = self._scan(deadline=deadline)
        return [self._observe_expiry(link) for link in links if link.created_by == user_id]

    @handle_redis_connection_error
    @beartype
    def count_links(self, *, deadline: Deadline | None = None) -> int:
        """Number of indexed short codes (SCARD, no document is read)"""
        check_deadline(deadline)
        return int(self.redis.scard(self.keys.links_index_key()))

    @handle_redis_connection_error
    @beartype
    def update(self, link: LinkModel, *, deadline: Deadline | None = None) -> LinkModel:
        """Overwrite an existing link (last writer wins)

        updated_at is refreshed; created_at is kept from the stored document when
        the given link doesn't carry one.

        Raises:
            LinkNotFoundError:
                If the link does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        existing = self._load(link.short, deadline=deadline)
        stored = link.evolve(created_at=link.created_at or existing.created_at, updated_at=datetime.now(UTC))
        self._store(stored, deadline=deadline)
        return stored

    @handle_redis_connection_error
    @beartype
    def delete(self, short: str, *, deadline: Deadline | None = None) -> None:
        """Delete a link together with its stats

        Raises:
            LinkNotFoundError:
                If the link does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        check_deadline(deadline)
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(self.keys.link_key(short))
            pipe.delete(self.keys.link_stats_key(short))
            pipe.srem(self.keys.links_index_key(), short)
            removed, _, _ = pipe.execute()

        if not removed:
            raise LinkNotFoundError(f"Link with short code '{short}' not found.")

    @handle_redis_connection_error
    @beartype
    def increment_click_count(self, short: str, *, deadline: Deadline | None = None) -> int:
        """Increment a link's click count

        NOTE: this is a plain GET/SET cycle over the whole document. Two concurrent
              increments may both read N and both write N+1. Click counts are
              therefore a lower bound under concurrency, never an overcount.

        Returns:
            int: click count after the increment.

        Raises:
            LinkNotFoundError:
                If the link does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        link = self._load(short, deadline=deadline)
        stored = link.evolve(click_count=link.click_count + 1, updated_at=datetime.now(UTC))
        self._store(stored, deadline=deadline)
        return stored.click_count

    @handle_redis_connection_error
    @beartype
    def get_expired_links(self, *, deadline: Deadline | None = None) -> list[LinkModel]:
        now = datetime.now(UTC)
        return [link for link in self._scan(deadline=deadline) if link.is_expired or is_expired(link, now)]

    @handle_redis_connection_error
    @beartype
    def get_links_by_expiry_status(self, is_expired: bool, *, deadline: Deadline | None = None) -> list[LinkModel]:
        return [link for link in self._scan(deadline=deadline) if link.is_expired is is_expired]

    @handle_redis_connection_error
    @beartype
    def get_link_stats(self, short: str, *, deadline: Deadline | None = None) -> LinkStatsModel:
        """Retrieve a link's click stats, creating a zeroed record on first access

        Raises:
            LinkNotFoundError:
                If the link does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        self._require_link(short, deadline=deadline)
        return self._load_stats(short, deadline=deadline)

    @handle_redis_connection_error
    @beartype
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
        """Account one click in a link's stats (best-effort, like increment_click_count)"""
        self._require_link(short, deadline=deadline)
        stats = self._load_stats(short, deadline=deadline)
        stats.record_click(
            referrer=referrer,
            browser=browser,
            operating_system=operating_system,
            country=country,
            device_type=device_type,
        )

        check_deadline(deadline)
        self.redis.set(self.keys.link_stats_key(short), json.dumps(stats.to_document()))
        return stats

    @handle_redis_connection_error
    @beartype
    def _flag_expired(self, short: str, *, deadline: Deadline | None = None) -> None:
        """Persist the sticky expiry flag of a link, unless the link changed meanwhile

        The GET/check/SET cycle runs under WATCH: if anything writes the link between
        the read and the write, the transaction is discarded and the concurrent write
        wins. A link that is still expired gets flagged again on its next read.
        """
        link_key = self.keys.link_key(short)

        check_deadline(deadline)
        with self.redis.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(link_key)
                raw = pipe.get(link_key)
                if raw is None:
                    logger.debug('Link deleted before its expiry flag was persisted.', extra={'short': short})
                    return

                # The expiry may have been cleared or extended since the read that scheduled this write
                link = LinkModel.from_document(json.loads(raw))
                if link.is_expired or not is_expired(link, datetime.now(UTC)):
                    return

                check_deadline(deadline)
                flagged = link.evolve(is_expired=True, updated_at=datetime.now(UTC))
                pipe.multi()
                pipe.set(link_key, json.dumps(flagged.to_document()), xx=True)
                pipe.execute()
            except redis.exceptions.WatchError:
                logger.info(
                    'Link changed while its expiry flag was being persisted. Keeping the newer write.',
                    extra={'short': short},
                )
                return

        logger.info('Persisted expiry flag of link.', extra={'short': short})

    def _load(self, short: str, *, deadline: Deadline | None) -> LinkModel:
        check_deadline(deadline)
        raw = self.redis.get(self.keys.link_key(short))
        if raw is None:
            raise LinkNotFoundError(f"Link with short code '{short}' not found.")
        return LinkModel.from_document(json.loads(raw))

    def _store(self, link: LinkModel, *, deadline: Deadline | None) -> None:
        check_deadline(deadline)
        # SET XX only overwrites: a link deleted in the meantime stays deleted
        if not self.redis.set(self.keys.link_key(link.short), json.dumps(link.to_document()), xx=True):
            raise LinkNotFoundError(f"Link with short code '{link.short}' not found.")

    def _require_link(self, short: str, *, deadline: Deadline | None) -> None:
        check_deadline(deadline)
        if not self.redis.exists(self.keys.link_key(short)):
            raise LinkNotFoundError(f"Link with short code '{short}' not found.")

    def _load_stats(self, short: str, *, deadline: Deadline | None) -> LinkStatsModel:
        stats_key = self.keys.link_stats_key(short)
        zeroed = LinkStatsModel(short=short, created_at=datetime.now(UTC))

        check_deadline(deadline)
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(stats_key, json.dumps(zeroed.to_document()), nx=True)
            pipe.get(stats_key)
            _, raw = pipe.execute()
        return LinkStatsModel.from_document(json.loads(raw))

    def _scan(self, *, deadline: Deadline | None) -> list[LinkModel]:
        """Load every indexed link, skipping stale index entries and malformed documents"""
        check_deadline(deadline)
        shorts = sorted(self.redis.smembers(self.keys.links_index_key()))
        if not shorts:
            return []

        check_deadline(deadline)
        documents = self.redis.mget([self.keys.link_key(short) for short in shorts])

        links = []
        for short, raw in zip(shorts, documents):
            if raw is None:
                continue
            try:
                links.append(LinkModel.from_document(json.loads(raw)))
            except (ValueError, KeyError, InvalidLinkError):
                logger.warning('Skipping malformed link document.', extra={'short': short})
        return links
