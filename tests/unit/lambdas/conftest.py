import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any, TypeAlias, cast

import pytest
from pytest import MonkeyPatch

from golink.constants import ENV
from golink.types import LambdaContext, LambdaEvent
from golink.dao.memory import LinkMemoryDAO
from golink.utils.config import Settings
from golink.utils.tasks import DetachedTaskRunner


EventFactory: TypeAlias = Callable[..., LambdaEvent]


@pytest.fixture(autouse=True)
def deployed_environment(monkeypatch: MonkeyPatch) -> None:
    """Handlers answer unexpected errors with 500 instead of re-raising them."""
    monkeypatch.setenv(ENV.App.APP_ENV, 'test')
    monkeypatch.delenv(ENV.App.AWS_SAM_LOCAL, raising=False)


@pytest.fixture
def context() -> LambdaContext:
    return cast(LambdaContext, SimpleNamespace(function_name='golink', get_remaining_time_in_millis=lambda: 30_000))


@pytest.fixture
def settings() -> Settings:
    return Settings(backend='redis', redis={'host': 'redis.test', 'port': 6379, 'db': 0})


@pytest.fixture
def dao_task_runner():
    runner = DetachedTaskRunner(timeout=5, max_workers=2)
    yield runner
    runner.shutdown(wait=True)


@pytest.fixture
def link_dao(dao_task_runner: DetachedTaskRunner) -> LinkMemoryDAO:
    return LinkMemoryDAO(task_runner=dao_task_runner)


@pytest.fixture
def api_event() -> EventFactory:
    """Build API Gateway proxy events."""

    def _api_event(
        *,
        user_id: str | None = 'u1',
        short: str | None = None,
        body: Any = None,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        method: str = 'GET',
    ) -> LambdaEvent:
        request_context = {'httpMethod': method, 'domainName': 'go.example.com', 'stage': 'Prod'}
        if user_id is not None:
            request_context['authorizer'] = {'claims': {'sub': user_id, 'email': 'pytest@example.com'}}
        return cast(
            LambdaEvent,
            {
                'httpMethod': method,
                'headers': {'User-Agent': 'pytest', **(headers or {})},
                'pathParameters': None if short is None else {'short': short},
                'queryStringParameters': query,
                'body': body if body is None or isinstance(body, str) else json.dumps(body),
                'requestContext': request_context,
            },
        )

    return _api_event
