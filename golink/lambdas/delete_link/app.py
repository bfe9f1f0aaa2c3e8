import logging

from golink.constants import ANONYMOUS_USER
from golink.exceptions import BadRequestError, ForbiddenError, UnauthorizedError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import can_modify
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, path_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_204
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.delete_link.constants import LINK_DELETED, MISSING_SHORT, MISSING_USER_ID, NOT_LINK_OWNER


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Delete a link and its stats (owner only, unless auth is disabled)

    HTTP responses:
        204: Link deleted
        400: Missing short code in path
        401: Unauthorized (auth enabled and no user identity)
        403: Caller doesn't own the link
        404: Link doesn't exist
        500: Internal server error
    """
    settings = load_settings('delete_link')
    deadline = request_deadline(context, settings.request_timeout)

    short = path_parameter(event, 'short')
    if not short:
        logger.info("Missing 'short' in path. Responding with 400.", extra={'event': MISSING_SHORT})
        raise BadRequestError("missing 'short' in path")

    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    if settings.auth_enabled and user_id == ANONYMOUS_USER:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'short': short, 'event': MISSING_USER_ID})
        raise UnauthorizedError("missing 'sub' in JWT claims")

    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.get_by_short(short, deadline=deadline)
    if not can_modify(link, user_id, auth_enabled=settings.auth_enabled):
        logger.info(
            'Delete attempt by non-owner. Responding with 403.',
            extra={'short': short, 'user_id': user_id, 'created_by': link.created_by, 'event': NOT_LINK_OWNER},
        )
        raise ForbiddenError('only the creator can delete this link')

    link_dao.delete(short, deadline=deadline)

    logger.info('Link deleted. Responding with 204.', extra={'short': short, 'user_id': user_id, 'event': LINK_DELETED})
    return response_204()
