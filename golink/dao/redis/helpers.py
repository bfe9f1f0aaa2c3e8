import functools
import logging
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from golink.dao.exceptions import DataStoreError


__all__ = []

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])

# Failures of the link store itself, as opposed to bad commands (ResponseError)
UNREACHABLE_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def connection_label(client: redis.Redis) -> str:
    """'host:port/db' of a client, for error messages"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error(method: F) -> F:
    """Turn an unreachable link store into DataStoreError

    Decorates LinkRedisDAO methods. Connection failures and command timeouts
    become DataStoreError naming the Redis endpoint and the failed operation,
    so handlers can answer 500 without leaking redis-py types. Any other Redis
    error is a bug in the caller and propagates unchanged.

    Example:
        >>> @handle_redis_connection_error
        ... def get_by_short(self, short, *, deadline=None):
        ...     return self.redis.get(self.keys.link_key(short))
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except UNREACHABLE_ERRORS as e:
            label = connection_label(self.redis)
            logger.warning('Link store unreachable.', extra={'operation': method.__name__, 'redis': label})
            raise DataStoreError(f"Can't connect to Redis at {label} during {method.__name__}.") from e

    return wrapper
