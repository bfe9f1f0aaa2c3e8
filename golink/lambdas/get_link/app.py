import logging

from golink.exceptions import BadRequestError, ForbiddenError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import check_access
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, link_body, path_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.get_link.constants import ACCESS_DENIED, LINK_RETRIEVED, MISSING_SHORT


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Return a single link if the caller may access it

    HTTP responses:
        200: Link document + expiry_status + short_url
        400: Missing short code in path
        403: Caller may not access the link
        404: Link doesn't exist
        500: Internal server error
    """
    settings = load_settings('get_link')
    deadline = request_deadline(context, settings.request_timeout)

    short = path_parameter(event, 'short')
    if not short:
        logger.info("Missing 'short' in path. Responding with 400.", extra={'event': MISSING_SHORT})
        raise BadRequestError("missing 'short' in path")

    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.get_by_short(short, deadline=deadline)

    if not check_access(link, user_id):
        logger.info('Access to link denied. Responding with 403.', extra={'short': short, 'user_id': user_id, 'event': ACCESS_DENIED})
        raise ForbiddenError('access denied')

    logger.info('Link retrieved. Responding with 200.', extra={'short': short, 'user_id': user_id, 'event': LINK_RETRIEVED})
    return response_json(200, link_body(link, event))
