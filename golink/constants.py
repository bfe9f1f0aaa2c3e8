import re
from enum import StrEnum


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


class AccessLevel(StrEnum):
    """Who may resolve a link."""

    PUBLIC = 'Public'
    PRIVATE = 'Private'
    RESTRICTED = 'Restricted'


class ExpiryReason(StrEnum):
    """Badge reasons reported by expiry_status()."""

    NONE = ''
    EXPIRED = 'expired'
    EXPIRING_TODAY = 'expiring_today'
    EXPIRING_SOON = 'expiring_soon'


class Timeout:
    """Timeouts in seconds."""

    REQUEST = 10.0  # upper bound for a single handler's repository calls
    DETACHED_TASK = 30.0  # own deadline of every fire-and-forget task


class Defaults:
    """Default values for optional request parameters."""

    TOP_LINKS_LIMIT = 10
    CLEANUP_OLDER_THAN_DAYS = 30
    DETACHED_TASK_WORKERS = 4


# Identity used when no authenticated user is available
ANONYMOUS_USER = 'anonymous'

# Header honoured as the caller's identity when auth is disabled
USER_ID_HEADER = 'X-User-ID'

# Allowed characters in short codes
SHORT_CODE_PATTERN = re.compile(r'^[A-Za-z0-9-]+$')

# Links expiring within this many days are flagged "expiring_soon"
EXPIRING_SOON_DAYS = 7

# Paths served by the frontend which never resolve to a short code
RESERVED_PATHS = frozenset({'index.html', 'favicon.ico'})
RESERVED_PATH_PREFIXES = ('static/', 'assets/')

# Supported data store backends
SUPPORTED_BACKENDS = frozenset({'redis'})


class ErrorCode(StrEnum):
    """Machine-readable error codes returned in response bodies."""

    BAD_REQUEST = 'BAD_REQUEST'
    UNAUTHORIZED = 'UNAUTHORIZED'
    FORBIDDEN = 'FORBIDDEN'
    NOT_FOUND = 'NOT_FOUND'
    ALREADY_EXISTS = 'ALREADY_EXISTS'
    GONE = 'GONE'
    INTERNAL_SERVER_ERROR = 'INTERNAL_SERVER_ERROR'
    SERVICE_UNAVAILABLE = 'SERVICE_UNAVAILABLE'


UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
