import pytest
import redis

from golink.dao.redis.helpers import handle_redis_connection_error
from golink.dao.exceptions import DataStoreError


class DummyDAO:
    def __init__(self, redis_client: redis.Redis, error: Exception | None = None):
        self.redis = redis_client
        self.error = error

    @handle_redis_connection_error
    def call(self):
        if self.error is not None:
            raise self.error
        return 'ok'


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ConnectionError('Cannot connect'),
        redis.exceptions.TimeoutError('Timed out'),
    ],
)
def test_handle_redis_connection_error(redis_client: redis.Redis, error: Exception):
    dao = DummyDAO(redis_client, error)

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0 during call."):
        dao.call()


def test_other_errors_pass_through(redis_client: redis.Redis):
    dao = DummyDAO(redis_client, redis.exceptions.ResponseError('WRONGTYPE'))

    with pytest.raises(redis.exceptions.ResponseError):
        dao.call()


def test_successful_call(redis_client: redis.Redis):
    assert DummyDAO(redis_client).call() == 'ok'
