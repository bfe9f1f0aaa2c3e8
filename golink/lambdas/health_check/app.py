import logging
from datetime import datetime, UTC

from golink.constants import ErrorCode
from golink.exceptions import GolinkError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, request_deadline
from golink.utils.responses import response_json
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.health_check.constants import HEALTHY, UNHEALTHY, HEALTH_CHECK_FAILED, HEALTH_CHECK_PASSED


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Report whether the service can read its configuration and its data store

    HTTP responses:
        200: {"status": "healthy", "timestamp": ..., "links": <count>}
        503: {"status": "unhealthy", "timestamp": ..., "error": "...", "error_code": "SERVICE_UNAVAILABLE"}
    """
    timestamp = datetime.now(UTC).isoformat(timespec='seconds').replace('+00:00', 'Z')
    try:
        settings = load_settings('health_check')
        link_dao = build_link_dao(settings, task_runner)
        links = link_dao.count_links(deadline=request_deadline(context, settings.request_timeout))
    except GolinkError as error:
        logger.exception(
            'Health check failed. Responding with 503.',
            extra={'event': HEALTH_CHECK_FAILED, 'error': error.__class__.__name__},
        )
        body = {
            'status': UNHEALTHY,
            'timestamp': timestamp,
            'error': 'Database connection failed',
            'error_code': ErrorCode.SERVICE_UNAVAILABLE.value,
        }
        return response_json(503, body)

    logger.info('Health check passed. Responding with 200.', extra={'event': HEALTH_CHECK_PASSED, 'links': links})
    return response_json(200, {'status': HEALTHY, 'timestamp': timestamp, 'links': links})
