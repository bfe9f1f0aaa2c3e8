"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to access
configuration data stored in **AWS AppConfig**. Each environment (`APP_ENV`) has
a dedicated AppConfig *Environment* within the shared AppConfig *Application*
identified by `APP_NAME`. Configuration data is stored as a JSON document under
a configuration profile (typically `backend-config`) and deployed to the
corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "auth": {"enabled": true},
        "links": {
            "default_url": null,
            "request_timeout": 10,
            "detached_task_timeout": 30
        },
        "configs": {
            "create_link": {
                "redis": { ... }
            },
            "redirect_link": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"create_link"`) from this AppConfig
document together with the shared `auth` and `links` sections.

Typical usage inside a Lambda handler:
    >>> from golink.utils.config import load_settings
    >>> settings = load_settings('create_link')
    >>> settings.redis['host']
    'redis-15501.host.docker.internal'
    >>> settings.auth_enabled
    True
"""

import os
import json
import functools
import logging
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any
from collections.abc import Callable

import boto3

from golink.types import AppConfig, AppConfigDataClient, LambdaConfiguration
from golink.constants import ENV, SUPPORTED_BACKENDS, Timeout
from golink.exceptions import AppConfigError, BadConfigurationError
from golink.utils.helpers import require_environment
from golink.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _lambda_config(config: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Extract what a single lambda needs from the full AppConfig document.

    Raises:
        AppConfigError:
            If the document lacks the active backend or the lambda's section.
    """
    try:
        backend = config['active_backend']
        data = {
            'active_backend': backend,
            backend: config['configs'][lambda_name][backend],
        }
    except (KeyError, TypeError) as e:
        raise AppConfigError(f"AppConfig document has no '{lambda_name}' configuration for the active backend.") from e

    data['auth'] = config.get('auth') or {}
    data['links'] = config.get('links') or {}
    return data


def _sam_load_local_appconfig(func: Callable) -> Callable:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local
          AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     : Base URL of the local AppConfig Agent (e.g., http://appconfig-agent:2772).
        APPCONFIG_PROFILE_NAME  : Optional profile name (default: "backend-config").
    """

    # ruff: noqa: E701
    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    # ruff: enable

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        if not running_locally():
            return func(lambda_name)
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not agent_url:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            config = json.load(r)

        data = _lambda_config(config, lambda_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
        return data

    return wrapper


def _fetch_appconfig(client: AppConfigDataClient) -> AppConfig:
    # Start an AppConfig data session
    session_token = client.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = client.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    try:
        return json.loads(content.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise AppConfigError('AppConfig returned a document which is not valid JSON.') from e


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig.

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'create_link', 'redirect_link'),
    along with the shared 'auth' and 'links' sections.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    config = _fetch_appconfig(boto3.client('appconfigdata'))

    data = _lambda_config(config, lambda_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
    return data


def _positive_number(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise BadConfigurationError(f"'links.{key}' must be a positive number (given: {value!r}).")
    return float(value)


@dataclass(frozen=True)
class Settings:
    """Validated configuration of a single Lambda invocation.

    Attributes:
        backend (str):
            Active data store backend (only 'redis' is supported).
        redis (dict):
            Redis connection parameters (host, port, db, username, password, socket_timeout).
        auth_enabled (bool):
            If False, ownership checks are skipped and X-User-ID is trusted.
        default_url (str | None):
            Target used when a link is created without a URL. None rejects such links.
        request_timeout (float):
            Upper bound (seconds) for the repository calls of one request.
        detached_task_timeout (float):
            Deadline (seconds) of every background task.
    """

    backend: str
    redis: dict[str, Any] = field(default_factory=dict)
    auth_enabled: bool = True
    default_url: str | None = None
    request_timeout: float = Timeout.REQUEST
    detached_task_timeout: float = Timeout.DETACHED_TASK

    @classmethod
    def from_config(cls, config: LambdaConfiguration) -> 'Settings':
        """Validate a lambda configuration returned by load_config().

        Raises:
            BadConfigurationError:
                If the backend is unsupported or a value has the wrong type.
        """
        backend = config.get('active_backend')
        if backend not in SUPPORTED_BACKENDS:
            raise BadConfigurationError(f"Unsupported backend '{backend}'.")

        backend_config = config.get(backend)
        if not isinstance(backend_config, dict):
            raise BadConfigurationError(f"'{backend}' configuration must be an object.")

        auth = config.get('auth') or {}
        auth_enabled = auth.get('enabled', True)
        if not isinstance(auth_enabled, bool):
            raise BadConfigurationError(f"'auth.enabled' must be a boolean (given: {auth_enabled!r}).")

        links = config.get('links') or {}
        default_url = links.get('default_url')
        if default_url is not None and (not isinstance(default_url, str) or not default_url):
            raise BadConfigurationError(f"'links.default_url' must be a non-empty string or null (given: {default_url!r}).")

        return cls(
            backend=backend,
            redis=dict(backend_config),
            auth_enabled=auth_enabled,
            default_url=default_url,
            request_timeout=_positive_number(links, 'request_timeout', Timeout.REQUEST),
            detached_task_timeout=_positive_number(links, 'detached_task_timeout', Timeout.DETACHED_TASK),
        )


def load_settings(lambda_name: str) -> Settings:
    return Settings.from_config(load_config(lambda_name))
