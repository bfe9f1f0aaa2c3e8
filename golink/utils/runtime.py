"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if lambda is running in local SAM, False otherwise.
    get_user_id(event, auth_enabled) -> str:
        Identity of the caller, 'anonymous' if there is none.

Example:
    >>> from golink.utils.runtime import running_locally
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> os.environ['APP_ENV'] = 'dev'
    >>> running_locally()
    False
"""

import os

from golink.types import LambdaEvent
from golink.constants import ENV, ANONYMOUS_USER, USER_ID_HEADER


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def get_user_id(event: LambdaEvent, *, auth_enabled: bool = True) -> str:
    """Resolve the caller's identity.

    Order:
        1. Cognito authorizer claim 'sub'.
        2. The X-User-ID header, honoured only when auth is disabled.
        3. 'anonymous'.
    """
    request_context = event.get('requestContext') or {}
    claims = (request_context.get('authorizer') or {}).get('claims') or {}
    user_id = claims.get('sub')
    if user_id:
        return user_id

    if not auth_enabled:
        headers = event.get('headers') or {}
        for name, value in headers.items():
            if name.lower() == USER_ID_HEADER.lower() and value:
                return value

    return ANONYMOUS_USER
