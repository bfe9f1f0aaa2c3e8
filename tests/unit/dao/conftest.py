import fakeredis
import pytest

from golink.dao.base import LinkBaseDAO
from golink.dao.memory import LinkMemoryDAO
from golink.dao.redis import LinkRedisDAO
from golink.utils.tasks import DetachedTaskRunner


@pytest.fixture
def task_runner():
    runner = DetachedTaskRunner(timeout=5, max_workers=2)
    yield runner
    runner.shutdown(wait=True)


@pytest.fixture(params=['memory', 'redis'])
def link_dao(request: pytest.FixtureRequest, task_runner: DetachedTaskRunner) -> LinkBaseDAO:
    """Every conforming LinkBaseDAO implementation, each with an empty store."""
    if request.param == 'memory':
        return LinkMemoryDAO(task_runner=task_runner)
    fake_redis = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    return LinkRedisDAO(redis_client=fake_redis, prefix='golink:test', task_runner=task_runner)
