import logging

from golink.constants import AccessLevel
from golink.exceptions import BadRequestError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import check_access
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, link_body, query_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.list_links.constants import INVALID_ACCESS_LEVEL, LINKS_LISTED


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def parse_access_level(value: str | None) -> AccessLevel | None:
    if not value:
        return None
    try:
        return AccessLevel(value)
    except ValueError as e:
        logger.info('Invalid access level filter. Responding with 400.', extra={'access_level': value, 'event': INVALID_ACCESS_LEVEL})
        raise BadRequestError(f"invalid access level '{value}'") from e


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """List the links visible to the caller

    Query parameters (both optional, combinable):
        access_level: Public | Private | Restricted
        created_by:   owner identity

    HTTP responses:
        200: JSON array of links the caller may access
        400: Bad client request (unknown access level)
        500: Internal server error
    """
    settings = load_settings('list_links')
    deadline = request_deadline(context, settings.request_timeout)
    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)

    access_level = parse_access_level(query_parameter(event, 'access_level'))
    created_by = query_parameter(event, 'created_by')

    link_dao = build_link_dao(settings, task_runner)
    if access_level is not None:
        links = link_dao.get_by_access_level(access_level, deadline=deadline)
        if created_by:
            links = [link for link in links if link.created_by == created_by]
    elif created_by:
        links = link_dao.get_by_user(created_by, deadline=deadline)
    else:
        links = link_dao.get_all(deadline=deadline)

    visible = [link for link in links if check_access(link, user_id)]

    logger.info(
        'Listing links. Responding with 200.',
        extra={'user_id': user_id, 'count': len(visible), 'filtered_out': len(links) - len(visible), 'event': LINKS_LISTED},
    )
    return response_json(200, [link_body(link, event) for link in visible])
