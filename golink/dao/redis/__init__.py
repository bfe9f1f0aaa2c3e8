from golink.dao.redis.redis_key_schema import RedisKeySchema
from golink.dao.redis.mixins import RedisClientMixin
from golink.dao.redis.link_redis_dao import LinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'LinkRedisDAO',
]
