from golink.utils.config import app_env, app_name, app_prefix, load_config, load_settings, Settings
from golink.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from golink.utils.logging import initialize_logging


__all__ = [
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'load_settings',
    'Settings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
