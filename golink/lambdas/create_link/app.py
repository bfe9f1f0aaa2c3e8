import logging
from typing import Any

from golink.constants import AccessLevel, ANONYMOUS_USER
from golink.exceptions import BadRequestError, UnauthorizedError
from golink.models import LinkModel
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.config import Settings, load_settings
from golink.utils.helpers import (
    guarantee_500_response,
    json_body,
    link_body,
    parse_string_list,
    parse_timestamp,
    request_deadline,
)
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.create_link.constants import DEFAULT_URL_APPLIED, LINK_CREATED, MISSING_USER_ID


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def link_from_request(body: dict[str, Any], user_id: str, settings: Settings) -> LinkModel:
    """Build the new link from the request body.

    Raises:
        BadRequestError:
            If a field is missing or malformed, or the link violates the link invariants.
    """
    short = body.get('short')
    if not short or not isinstance(short, str):
        raise BadRequestError("missing 'short' in JSON body")

    url = body.get('url')
    if url is not None and not isinstance(url, str):
        raise BadRequestError("'url' must be a string")
    if not url and settings.default_url:
        logger.info(
            'No URL given, falling back to the configured default URL.',
            extra={'short': short, 'event': DEFAULT_URL_APPLIED},
        )
        url = settings.default_url
    if not url:
        raise BadRequestError("missing 'url' in JSON body")

    allowed_users = body.get('allowed_users')
    expires_at = body.get('expires_at')

    return LinkModel(
        short=short,
        url=url,
        created_by=user_id,
        access_level=body.get('access_level') or AccessLevel.PUBLIC,
        allowed_users=() if allowed_users is None else parse_string_list(allowed_users, 'allowed_users'),
        expires_at=None if expires_at in (None, '') else parse_timestamp(expires_at, 'expires_at', future=True),
    )


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to create links

    This Lambda handler follows this procedure to create links:
    - Step 1: Resolve the caller's identity
    - Step 2: Validate the link in the request body
    - Step 3: Store the link (via DAO)
    - Step 4: Respond to user with 201 and the stored link

    Request body:
        {
            "short": "docs",                          (required, [A-Za-z0-9-]+)
            "url": "https://example.com/docs",        (required unless a default URL is configured)
            "access_level": "Restricted",             (optional, Public|Private|Restricted)
            "allowed_users": ["u2"],                  (optional, Restricted links only)
            "expires_at": "2030-01-01T00:00:00Z"      (optional, RFC 3339, must be in the future)
        }

    HTTP responses:
        201: Link created (body: link document + expiry_status + short_url)
        400: Bad client request (invalid JSON, missing or malformed fields)
        401: Unauthorized (auth enabled and no user identity)
        409: Conflict (short code already taken)
        500: Internal server error
    """
    # 0- Get application's config
    settings = load_settings('create_link')
    deadline = request_deadline(context, settings.request_timeout)

    # 1- Resolve the caller's identity
    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    if settings.auth_enabled and user_id == ANONYMOUS_USER:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'event': MISSING_USER_ID})
        raise UnauthorizedError("missing 'sub' in JWT claims")

    # 2- Validate the link in the request body
    link = link_from_request(json_body(event), user_id, settings)

    # 3- Store the link
    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.create(link, deadline=deadline)

    # 4- Respond with the stored link
    logger.info(
        'Link created. Responding with 201.',
        extra={'short': link.short, 'user_id': user_id, 'access_level': str(link.access_level), 'event': LINK_CREATED},
    )
    return response_json(201, link_body(link, event))
