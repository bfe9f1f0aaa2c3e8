import logging
from datetime import datetime, timedelta, UTC
from typing import Any

from golink.exceptions import BadRequestError, ForbiddenError
from golink.models import LinkModel, LinkStatsModel
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import check_access
from golink.utils.config import load_settings
from golink.utils.expiry import expiry_status, is_expired
from golink.utils.helpers import guarantee_500_response, path_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.link_stats.constants import ACCESS_DENIED, MISSING_SHORT, STATS_RETRIEVED


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()

ONE_DAY = timedelta(days=1)


def analytics(link: LinkModel, stats: LinkStatsModel, now: datetime) -> dict[str, Any]:
    """Summarize a link's usage.

    The average clicks per day of an expired link is computed over its active
    lifetime (creation until expiry), not until now.
    """
    document = link.to_document()
    expired = link.is_expired or is_expired(link, now)
    flagged, reason = expiry_status(link, now)
    body = {
        'link_id': document['id'],
        'short': link.short,
        'url': link.url,
        'click_count': link.click_count,
        'access_level': str(link.access_level),
        'created_at': document['created_at'],
        'is_expired': expired,
        'expiry_status': {'flagged': flagged, 'reason': reason},
        'stats': stats.to_document(),
    }
    if link.expires_at is not None:
        body['expires_at'] = document['expires_at']

    if link.created_at is not None:
        body['age_days'] = (now - link.created_at) / ONE_DAY
        active_until = link.expires_at if expired and link.expires_at is not None else now
        active_days = (active_until - link.created_at) / ONE_DAY
        if active_days > 0:
            body['avg_clicks_per_day'] = link.click_count / active_days
    return body


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Return usage analytics of a link the caller may access

    HTTP responses:
        200: Analytics (click count, age, average clicks per day, expiry info, click stats)
        400: Missing short code in path
        403: Caller may not access the link
        404: Link doesn't exist
        500: Internal server error
    """
    settings = load_settings('link_stats')
    deadline = request_deadline(context, settings.request_timeout)

    short = path_parameter(event, 'short')
    if not short:
        logger.info("Missing 'short' in path. Responding with 400.", extra={'event': MISSING_SHORT})
        raise BadRequestError("missing 'short' in path")

    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.get_by_short(short, deadline=deadline)
    if not check_access(link, user_id):
        logger.info('Access to link stats denied. Responding with 403.', extra={'short': short, 'user_id': user_id, 'event': ACCESS_DENIED})
        raise ForbiddenError('access denied')

    stats = link_dao.get_link_stats(short, deadline=deadline)

    logger.info(
        'Link stats retrieved. Responding with 200.',
        extra={'short': short, 'user_id': user_id, 'click_count': link.click_count, 'event': STATS_RETRIEVED},
    )
    return response_json(200, analytics(link, stats, datetime.now(UTC)))
