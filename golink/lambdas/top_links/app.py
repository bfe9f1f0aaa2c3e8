import logging

from golink.constants import Defaults
from golink.exceptions import BadRequestError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import check_access
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, link_body, query_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.top_links.constants import INVALID_LIMIT, TOP_LINKS_RETRIEVED


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def parse_limit(value: str | None) -> int:
    if value is None or value == '':
        return Defaults.TOP_LINKS_LIMIT
    try:
        limit = int(value)
    except ValueError:
        limit = 0
    if limit <= 0:
        logger.info('Invalid limit. Responding with 400.', extra={'limit': value, 'event': INVALID_LIMIT})
        raise BadRequestError("'limit' must be a positive integer")
    return limit


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Return the most clicked links visible to the caller

    Query parameters:
        limit: number of links to return (default 10)

    HTTP responses:
        200: JSON array of links, most clicked first
        400: Invalid limit
        500: Internal server error
    """
    settings = load_settings('top_links')
    deadline = request_deadline(context, settings.request_timeout)
    limit = parse_limit(query_parameter(event, 'limit'))

    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    link_dao = build_link_dao(settings, task_runner)
    links = [link for link in link_dao.get_all(deadline=deadline) if check_access(link, user_id)]
    top = sorted(links, key=lambda link: link.click_count, reverse=True)[:limit]

    logger.info(
        'Top links retrieved. Responding with 200.',
        extra={'user_id': user_id, 'count': len(top), 'limit': limit, 'event': TOP_LINKS_RETRIEVED},
    )
    return response_json(200, [link_body(link, event) for link in top])
