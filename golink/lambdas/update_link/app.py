import logging
from typing import Any

from golink.constants import ANONYMOUS_USER
from golink.exceptions import BadRequestError, ForbiddenError, UnauthorizedError
from golink.models import LinkModel
from golink.types import LambdaEvent, LambdaContext, LambdaResponse
from golink.dao.factory import build_link_dao
from golink.utils.access import can_modify
from golink.utils.config import load_settings
from golink.utils.helpers import (
    guarantee_500_response,
    json_body,
    link_body,
    parse_string_list,
    parse_timestamp,
    path_parameter,
    request_deadline,
)
from golink.utils.responses import respond_with_error_kinds, response_json
from golink.utils.runtime import get_user_id
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.update_link.constants import (
    EXPIRY_CLEARED,
    LINK_UPDATED,
    MISSING_SHORT,
    MISSING_USER_ID,
    NOT_LINK_OWNER,
)


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def apply_changes(link: LinkModel, body: dict[str, Any]) -> LinkModel:
    """Apply the fields present in the request body to a link.

    Absent fields are left untouched. `expires_at` set to null or "" clears the
    expiry together with the sticky expiry flag; a new expiry keeps the flag.

    Raises:
        BadRequestError:
            If a field is malformed or the result violates the link invariants.
    """
    changes = {}

    if 'url' in body:
        if not body['url'] or not isinstance(body['url'], str):
            raise BadRequestError("'url' must be a non-empty string")
        changes['url'] = body['url']

    if 'access_level' in body:
        changes['access_level'] = body['access_level']

    if 'allowed_users' in body:
        changes['allowed_users'] = parse_string_list(body['allowed_users'], 'allowed_users')

    if 'expires_at' in body:
        if body['expires_at'] in (None, ''):
            logger.info('Clearing link expiry.', extra={'short': link.short, 'event': EXPIRY_CLEARED})
            changes['expires_at'] = None
            changes['is_expired'] = False
        else:
            changes['expires_at'] = parse_timestamp(body['expires_at'], 'expires_at', future=True)

    return link.evolve(**changes)


@guarantee_500_response
@respond_with_error_kinds
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Update a link (owner only, unless auth is disabled)

    This Lambda handler follows this procedure to update links:
    - Step 1: Resolve the caller's identity
    - Step 2: Load the link and check ownership
    - Step 3: Apply the requested changes
    - Step 4: Store the updated link (last writer wins)

    Request body (all fields optional):
        {
            "url": "https://example.com/new",
            "access_level": "Restricted",
            "allowed_users": ["u2", "u3"],
            "expires_at": "2030-01-01T00:00:00Z" | null
        }

    HTTP responses:
        200: Updated link
        400: Bad client request (invalid JSON or field values)
        401: Unauthorized (auth enabled and no user identity)
        403: Caller doesn't own the link
        404: Link doesn't exist
        500: Internal server error
    """
    settings = load_settings('update_link')
    deadline = request_deadline(context, settings.request_timeout)

    short = path_parameter(event, 'short')
    if not short:
        logger.info("Missing 'short' in path. Responding with 400.", extra={'event': MISSING_SHORT})
        raise BadRequestError("missing 'short' in path")

    # 1- Resolve the caller's identity
    user_id = get_user_id(event, auth_enabled=settings.auth_enabled)
    if settings.auth_enabled and user_id == ANONYMOUS_USER:
        logger.info("Missing 'sub' in JWT claims. Responding with 401.", extra={'short': short, 'event': MISSING_USER_ID})
        raise UnauthorizedError("missing 'sub' in JWT claims")

    # 2- Load the link and check ownership
    link_dao = build_link_dao(settings, task_runner)
    link = link_dao.get_by_short(short, deadline=deadline)
    if not can_modify(link, user_id, auth_enabled=settings.auth_enabled):
        logger.info(
            'Update attempt by non-owner. Responding with 403.',
            extra={'short': short, 'user_id': user_id, 'created_by': link.created_by, 'event': NOT_LINK_OWNER},
        )
        raise ForbiddenError('only the creator can update this link')

    # 3- Apply the requested changes
    updated = apply_changes(link, json_body(event))

    # 4- Store the updated link
    updated = link_dao.update(updated, deadline=deadline)

    logger.info(
        'Link updated. Responding with 200.',
        extra={'short': short, 'user_id': user_id, 'access_level': str(updated.access_level), 'event': LINK_UPDATED},
    )
    return response_json(200, link_body(updated, event))
