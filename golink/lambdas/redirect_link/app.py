import logging
import urllib.parse

from golink.constants import RESERVED_PATHS, RESERVED_PATH_PREFIXES
from golink.exceptions import BadRequestError, ForbiddenError, LinkExpiredError
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.base import LinkBaseDAO
from golink.dao.exceptions import LinkNotFoundError
from golink.dao.factory import build_link_dao
from golink.utils.access import check_access
from golink.utils.config import load_settings
from golink.utils.deadline import Deadline
from golink.utils.expiry import is_expired
from golink.utils.helpers import get_short_url, guarantee_500_response, header, path_parameter, request_deadline
from golink.utils.responses import respond_with_error_kinds, response_302
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.redirect_link.constants import (
    ACCESS_DENIED,
    BROWSER_TOKENS,
    CLICK_TRACKED,
    COUNTRY_HEADER,
    DEVICE_HEADERS,
    LINK_EXPIRED,
    MISSING_SHORT,
    OPERATING_SYSTEM_TOKENS,
    REDIRECT_SUCCESS,
    REFERER_HEADER,
    RESERVED_PATH,
    USER_AGENT_HEADER,
)


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def is_reserved_path(short: str) -> bool:
    return short in RESERVED_PATHS or short.startswith(RESERVED_PATH_PREFIXES)


def _first_match(value: str, tokens: tuple[tuple[str, str], ...]) -> str:
    return next((name for token, name in tokens if token in value), '')


def click_dimensions(event: LambdaEvent) -> dict[str, str]:
    """Extract the click stats dimensions of a redirect request."""
    user_agent = header(event, USER_AGENT_HEADER) or ''
    referrer = urllib.parse.urlparse(header(event, REFERER_HEADER) or '').netloc
    device_type = next((device for name, device in DEVICE_HEADERS if header(event, name) == 'true'), '')
    return {
        'referrer': referrer,
        'browser': _first_match(user_agent, BROWSER_TOKENS),
        'operating_system': _first_match(user_agent, OPERATING_SYSTEM_TOKENS),
        'country': header(event, COUNTRY_HEADER) or '',
        'device_type': device_type,
    }


def track_click(link_dao: LinkBaseDAO, short: str, dimensions: dict[str, str], *, deadline: Deadline) -> None:
    """Detached task: count the click and record its stats."""
    clicks = link_dao.increment_click_count(short, deadline=deadline)
    link_dao.record_click(short, **dimensions, deadline=deadline)
    logger.debug('Click tracked.', extra={'short': short, 'click_count': clicks, 'event': CLICK_TRACKED})


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect short links

    This Lambda handler follows this procedure to redirect links:
    - Step 1: Extract short code from request path
    - Step 2: Load the link from the database
    - Step 3: Check the caller may access the link
    - Step 4: Check the link hasn't expired
    - Step 5: Track the click in the background
    - Step 6: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Missing short code in path
        403: Caller may not access the link
        404: Link doesn't exist (or the path is reserved for static assets)
        410: Link expired
        500: Internal server error

    Example:
        >>> event = {'pathParameters': {'short': 'docs'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/docs'
    """
    # 0- Get application's config
    settings = load_settings('redirect_link')
    deadline = request_deadline(context, settings.request_timeout)

    # 1- Extract short code from request's path
    short = path_parameter(event, 'short')
    if not short:
        logger.info("Missing 'short' in path. Responding with 400.", extra={'event': MISSING_SHORT})
        raise BadRequestError("missing 'short' in path")
    if is_reserved_path(short):
        logger.info('Reserved path requested. Responding with 404.', extra={'path': short, 'event': RESERVED_PATH})
        raise LinkNotFoundError(f"'{short}' is not a short link")
    logger.debug('Client requested short URL %s.', get_short_url(short, event))

    # 2- Load the link
    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.get_by_short(short, deadline=deadline)

    # 3- Check access
    if not check_access(link, user_id):
        logger.info('Access to link denied. Responding with 403.', extra={'short': short, 'user_id': user_id, 'event': ACCESS_DENIED})
        raise ForbiddenError('access denied')

    # 4- Check expiry
    if link.is_expired or is_expired(link):
        logger.info('Link expired. Responding with 410.', extra={'short': short, 'expires_at': link.expires_at, 'event': LINK_EXPIRED})
        raise LinkExpiredError('link has expired')

    # 5- Track the click without delaying the redirect
    task_runner.submit(
        track_click,
        link_dao,
        short,
        click_dimensions(event),
        name=f'track-click:{short}',
        timeout=settings.detached_task_timeout,
    )

    # 6- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'short': short, 'user_id': user_id, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=link.url)
