class GolinkError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:golink_error'


class ConfigurationError(GolinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(GolinkError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'


class DeadlineExceededError(GolinkError):
    """Raised when an operation's deadline fires before it completes."""

    error_code = 'app:deadline_exceeded_error'


class RequestError(GolinkError):
    """Base exception for errors attributable to the caller."""

    error_code = 'request:request_error'


class BadRequestError(RequestError):
    """Raised on malformed client input."""

    error_code = 'request:bad_request_error'


class InvalidLinkError(BadRequestError):
    """Raised when link fields violate the link invariants."""

    error_code = 'request:invalid_link_error'


class UnauthorizedError(RequestError):
    """Raised when an operation requires an identity and none was supplied."""

    error_code = 'request:unauthorized_error'


class ForbiddenError(RequestError):
    """Raised when the caller's identity may not perform the operation."""

    error_code = 'request:forbidden_error'


class LinkExpiredError(RequestError):
    """Raised when a redirect targets an expired link."""

    error_code = 'request:link_expired_error'
