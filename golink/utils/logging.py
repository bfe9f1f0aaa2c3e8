"""JSON logging for the golink lambdas

Each lambda package calls `initialize_logging()` from its `__init__.py`, before
the handler module logs anything. Records go to stdout (CloudWatch) as one JSON
object per line, with every `extra` field merged in:

{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "golink.lambdas.redirect_link.app",
    "message": "Redirecting client to target URL. Responding with 302.",
    "event": "REDIRECT_SUCCESS",
    "short": "docs"
}

`event` carries the stable code of the outcome (see each lambda's constants.py)
and is what CloudWatch metric filters match on. Datetimes are written in ISO 8601,
enums as their value. Records logged with exc_info get an "exception" field.
"""

import os
import json
import logging
import logging.config
from datetime import date, datetime, UTC
from enum import Enum
from typing import Any

from golink.constants import ENV


# AWS SDK and HTTP client chatter that would otherwise drown the link events at DEBUG
QUIET_LOGGERS = ('boto3', 'botocore', 'urllib3')


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class JsonFormatter(logging.Formatter):
    """Render a LogRecord and its `extra` fields as a single JSON line"""

    # Attributes every LogRecord has; anything else on a record came from `extra`
    STANDARD_ATTRS = frozenset(logging.LogRecord('', logging.NOTSET, '', 0, '', None, None).__dict__) | {'message', 'asctime'}

    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in record.__dict__.items() if key not in self.STANDARD_ATTRS and key not in log)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=_json_default)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
