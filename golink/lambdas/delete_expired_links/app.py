import logging

from golink.constants import ANONYMOUS_USER
from golink.exceptions import UnauthorizedError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.exceptions import LinkNotFoundError
from golink.dao.factory import build_link_dao
from golink.utils.access import can_modify
from golink.utils.config import load_settings
from golink.utils.helpers import guarantee_500_response, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.delete_expired_links.constants import EXPIRED_LINK_DELETED, EXPIRED_LINKS_DELETED, MISSING_USER_ID


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Delete the caller's expired links (every expired link when auth is disabled)

    HTTP responses:
        200: {"deleted_count": <n>, "message": "Expired links deleted successfully"}
        401: Unauthorized (auth enabled and no user identity)
        500: Internal server error
    """
    settings = load_settings('delete_expired_links')
    deadline = request_deadline(context, settings.request_timeout)

    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    if settings.auth_enabled and user_id == ANONYMOUS_USER:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
        raise UnauthorizedError("missing 'sub' in JWT claims")

    link_dao = build_link_dao(settings, task_runner)
    expired_links = link_dao.get_expired_links(deadline=deadline)

    deleted_count = 0
    for link in expired_links:
        if not can_modify(link, user_id, auth_enabled=settings.auth_enabled):
            continue
        try:
            link_dao.delete(link.short, deadline=deadline)
        except LinkNotFoundError:
            # Deleted concurrently
            continue
        deleted_count += 1
        logger.info('Deleted expired link.', extra={'short': link.short, 'user_id': user_id, 'event': EXPIRED_LINK_DELETED})

    logger.info(
        'Expired links deleted. Responding with 200.',
        extra={'user_id': user_id, 'deleted_count': deleted_count, 'event': EXPIRED_LINKS_DELETED},
    )
    return response_json(200, {'deleted_count': deleted_count, 'message': 'Expired links deleted successfully'})
