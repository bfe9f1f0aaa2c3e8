"""Connection plumbing shared by the Redis-backed link repositories.

A repository either receives a ready client (tests, fakeredis) or builds one
from the `redis` section of its lambda's AppConfig, e.g.

    {"host": "golink-cache.abc123.use1.cache.amazonaws.com", "port": 6379, "db": 0, "ssl": true}

Every key it touches is namespaced by RedisKeySchema under `<APP_NAME>:<APP_ENV>`.
The connection is verified with a PING at construction, so a misconfigured or
unreachable Redis surfaces as DataStoreError before any link is read.

Example:
    >>> dao = LinkRedisDAO(redis_host='localhost', prefix='golink:dev')
    >>> dao._healthcheck(raise_error=False)
    True
"""

from typing import Optional

import redis

from golink.dao.redis.redis_key_schema import RedisKeySchema
from golink.dao.exceptions import DataStoreError
from golink.dao.redis.helpers import UNREACHABLE_ERRORS, connection_label


class RedisClientMixin:
    """Give a link repository its Redis client and key schema.

    Attributes:
        redis (redis.Redis):
            Client every repository command goes through.
        keys (RedisKeySchema):
            Builds `links:<short>`, `links:<short>:stats` and `index:links` keys under the prefix.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_socket_timeout: Optional[float] = None,
        redis_ssl: Optional[bool] = False,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Attach a Redis client and check that it answers

        Args:
            redis_host, redis_port, redis_db:
                Where the link store lives. Ports and db indexes may come in as
                strings from AppConfig.
            redis_username, redis_password:
                ACL credentials, when the cluster requires them.
            redis_socket_timeout (Optional[float]):
                Seconds a single command may block. None waits forever; request
                deadlines are still checked between commands.
            redis_ssl (Optional[bool]):
                Use TLS (ElastiCache with in-transit encryption).
            redis_client (Optional[redis.Redis]):
                Ready client. All connection parameters are ignored when given.
            prefix (Optional[str]):
                Key namespace, normally golink.utils.config.app_prefix().

        Raises:
            DataStoreError:
                If Redis doesn't answer the PING.
        """
        if redis_client is None:
            options = dict(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
            )
            if redis_ssl:
                options['ssl'] = True
            redis_client = redis.Redis(**options)

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis; False (or DataStoreError when `raise_error`) if it's unreachable."""
        try:
            self.redis.ping()
        except UNREACHABLE_ERRORS as e:
            if not raise_error:
                return False
            raise DataStoreError(
                f"Can't connect to Redis at {connection_label(self.redis)}. Check the link store configuration."
            ) from e
        return True
