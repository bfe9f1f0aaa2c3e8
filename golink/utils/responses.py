"""API Gateway (Lambda proxy) responses

Every error response carries a human-readable message and a stable
machine-readable code:

    {"message": "Not Found (link 'abc' doesn't exist)", "error_code": "NOT_FOUND"}

Error kinds map to HTTP statuses as follows:

    LinkNotFoundError       -> 404 NOT_FOUND
    LinkAlreadyExistsError  -> 409 ALREADY_EXISTS
    BadRequestError         -> 400 BAD_REQUEST
    UnauthorizedError       -> 401 UNAUTHORIZED
    ForbiddenError          -> 403 FORBIDDEN
    LinkExpiredError        -> 410 GONE
    anything else           -> 500 INTERNAL_SERVER_ERROR (details only in logs)
"""

import json
import logging
import functools
from collections.abc import Callable
from typing import Any

from golink.constants import ErrorCode
from golink.dao.exceptions import LinkAlreadyExistsError, LinkNotFoundError
from golink.exceptions import (
    BadRequestError,
    ForbiddenError,
    GolinkError,
    LinkExpiredError,
    UnauthorizedError,
)
from golink.types import HttpHeaders, LambdaResponse


logger = logging.getLogger(__name__)


ERROR_RESPONSES: tuple[tuple[type[Exception], int, str, ErrorCode], ...] = (
    (LinkNotFoundError, 404, 'Not Found', ErrorCode.NOT_FOUND),
    (LinkAlreadyExistsError, 409, 'Conflict', ErrorCode.ALREADY_EXISTS),
    (BadRequestError, 400, 'Bad Request', ErrorCode.BAD_REQUEST),
    (UnauthorizedError, 401, 'Unauthorized', ErrorCode.UNAUTHORIZED),
    (ForbiddenError, 403, 'Forbidden', ErrorCode.FORBIDDEN),
    (LinkExpiredError, 410, 'Gone', ErrorCode.GONE),
)


def response_json(status_code: int, body: Any, headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **(headers or {})},
        'body': json.dumps(body, default=str),
    }


def response_error(status_code: int, base: str, error_code: str, message: str | None = None) -> LambdaResponse:
    body = {
        'message': base if not message else f'{base} ({message})',
        'error_code': str(error_code),
    }
    return response_json(status_code, body)


def response_500() -> LambdaResponse:
    return response_error(500, 'Internal Server Error', ErrorCode.INTERNAL_SERVER_ERROR)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': '',  # no body needed for redirects
    }


def response_204() -> LambdaResponse:
    return {'statusCode': 204, 'headers': {}, 'body': ''}


def error_response(error: Exception) -> LambdaResponse:
    """Translate an error kind into its HTTP response."""
    for error_type, status_code, base, error_code in ERROR_RESPONSES:
        if isinstance(error, error_type):
            return response_error(status_code, base, error_code, str(error) or None)
    return response_500()


def respond_with_error_kinds(handler: Callable) -> Callable:
    """Decorator: turn application errors raised by a handler into error responses.

    Caller errors are logged at INFO level. Everything else (data store, deadline,
    configuration) is logged with its traceback and answered with a generic 500.
    Exceptions outside the GolinkError hierarchy are left to guarantee_500_response.
    """

    @functools.wraps(handler)
    def wrapper(event, context):
        try:
            return handler(event, context)
        except GolinkError as e:
            response = error_response(e)
            if response['statusCode'] >= 500:
                logger.exception(
                    'Request failed with an internal error. Responding with 500.',
                    extra={'event': ErrorCode.INTERNAL_SERVER_ERROR.value, 'errorType': type(e).__name__},
                )
            else:
                logger.info(
                    'Request rejected. Responding with %s.',
                    response['statusCode'],
                    extra={'event': json.loads(response['body'])['error_code'], 'reason': str(e)},
                )
            return response

    return wrapper
