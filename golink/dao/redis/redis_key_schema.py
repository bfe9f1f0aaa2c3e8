import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing links.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "golink:prod" or "golink:dev".

    Keys:
        <prefix>:links:<short>          JSON document of a link
        <prefix>:links:<short>:stats    JSON document of the link's click stats
        <prefix>:index:links            SET of all short codes
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, short: str) -> str:
        return f'links:{short}'

    @prefix_key
    def link_stats_key(self, short: str) -> str:
        return f'links:{short}:stats'

    @prefix_key
    def links_index_key(self) -> str:
        return 'index:links'
