"""Helper utilities for AWS lambda functions.

Functions:
    base_url() -> str
        Extract correct public base URL from API Gateway event
    get_short_url() -> str
        Get string representation of short URL for a given short code
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Respond with 500 instead of crashing on unexpected errors
    path_parameter(), query_parameter(), header(), json_body()
        Read request data from API Gateway events
    parse_timestamp(value, field) -> datetime
        Parse RFC 3339 timestamps supplied by clients
    request_deadline(context, timeout) -> Deadline
        Deadline of a single invocation
    link_body(link, event) -> dict
        Serialize a link for API responses

Example:
    Typical usage inside a Lambda handler:

        >>> from golink.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import os
import json
import logging
import functools
from datetime import datetime, UTC
from typing import Any
from collections.abc import Callable

from golink.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from golink.exceptions import BadRequestError, MissingEnvironmentVariableError
from golink.models import LinkModel
from golink.types import LambdaContext, LambdaEvent
from golink.utils.deadline import Deadline
from golink.utils.expiry import expiry_status
from golink.utils.responses import response_error
from golink.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    Works seamlessly with both custom and default AWS API Gateway domains.
    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://go.example.com"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain.startswith(('localhost', '127.0.0.1')):
        return f'http://{domain}'
    elif domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(short: str, event: dict[str, Any]) -> str:
    return f'{base_url(event).rstrip("/")}/{short}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: answer unexpected handler errors with a 500 response.

    When running locally the error is re-raised instead, so SAM shows the traceback.
    """

    @functools.wraps(handler)
    def wrapper(event, context):
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled error in lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return response_error(500, 'Internal Server Error', UNKNOWN_INTERNAL_SERVER_ERROR)

    return wrapper


def path_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('pathParameters') or {}).get(name)


def query_parameter(event: LambdaEvent, name: str) -> str | None:
    return (event.get('queryStringParameters') or {}).get(name)


def header(event: LambdaEvent, name: str) -> str | None:
    """Case-insensitive header lookup."""
    for key, value in (event.get('headers') or {}).items():
        if key.lower() == name.lower():
            return value
    return None


def json_body(event: LambdaEvent) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Raises:
        BadRequestError:
            If the body isn't valid JSON or isn't an object.
    """
    raw = event.get('body') or '{}'
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BadRequestError('invalid JSON body') from e
    if not isinstance(body, dict):
        raise BadRequestError('JSON body must be an object')
    return body


def parse_timestamp(value: Any, field: str = 'expires_at', *, future: bool = False) -> datetime:
    """Parse an RFC 3339 timestamp, e.g. 2025-12-31T23:59:59Z

    Raises:
        BadRequestError:
            If the value isn't an RFC 3339 timestamp with a UTC offset,
            or isn't in the future when `future` is set.
    """
    message = f"invalid '{field}', use RFC 3339 format (e.g. 2025-12-31T23:59:59Z)"
    if not isinstance(value, str):
        raise BadRequestError(message)
    try:
        timestamp = datetime.fromisoformat(value)
    except ValueError as e:
        raise BadRequestError(message) from e
    if timestamp.tzinfo is None:
        raise BadRequestError(message)
    if future and timestamp <= datetime.now(UTC):
        raise BadRequestError(f"'{field}' must be in the future")
    return timestamp


def parse_string_list(value: Any, field: str) -> tuple[str, ...]:
    """Validate a JSON array of strings.

    Raises:
        BadRequestError:
            If the value isn't a list of strings.
    """
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise BadRequestError(f"'{field}' must be a list of strings")
    return tuple(value)


def request_deadline(context: LambdaContext, timeout: float | None) -> Deadline:
    """Deadline of one invocation: the configured timeout, capped by Lambda's remaining time."""
    get_remaining_time = getattr(context, 'get_remaining_time_in_millis', None)
    if callable(get_remaining_time):
        remaining = get_remaining_time() / 1000
        timeout = remaining if timeout is None else min(timeout, remaining)
    return Deadline(timeout=timeout)


def link_body(link: LinkModel, event: LambdaEvent | None = None) -> dict[str, Any]:
    """Serialize a link for API responses: its document plus expiry badge and public short URL."""
    flagged, reason = expiry_status(link)
    body = link.to_document()
    body['expiry_status'] = {'flagged': flagged, 'reason': reason}
    if event is not None:
        body['short_url'] = get_short_url(link.short, event)
    return body
