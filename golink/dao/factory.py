"""Build the link repository selected by the application's settings."""

import logging

from golink.dao.base import LinkBaseDAO
from golink.dao.redis import LinkRedisDAO
from golink.exceptions import BadConfigurationError
from golink.utils.config import Settings, app_prefix
from golink.utils.tasks import DetachedTaskRunner


logger = logging.getLogger(__name__)


def build_link_dao(settings: Settings, task_runner: DetachedTaskRunner | None = None) -> LinkBaseDAO:
    """Create a LinkBaseDAO for the active backend.

    Raises:
        BadConfigurationError:
            If the active backend isn't supported.
        DataStoreError:
            If the backend can't be reached.
    """
    if settings.backend == 'redis':
        logger.debug('Using Redis as the backend database for links.')
        redis_config = {f'redis_{k}': v for k, v in settings.redis.items()}
        return LinkRedisDAO(
            **redis_config,
            prefix=app_prefix(),
            task_runner=task_runner,
            detached_task_timeout=settings.detached_task_timeout,
        )

    raise BadConfigurationError(f"Unsupported backend '{settings.backend}'.")
