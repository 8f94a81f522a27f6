"""Configuration package for the share synchronizer."""

from .settings import LoggingSettings, AppSettings, get_settings
from .schema import ShareConfig, SUPPORTED_BACKENDS, SHARE_CONFIG_EXAMPLE
from .loader import ConfigLoader, ConfigurationError, load_share_config
from .manager import ConfigManager

__all__ = [
    # Application settings
    "LoggingSettings",
    "AppSettings",
    "get_settings",

    # Share configuration
    "ShareConfig",
    "SUPPORTED_BACKENDS",
    "SHARE_CONFIG_EXAMPLE",

    "ConfigLoader",
    "ConfigurationError",
    "load_share_config",

    "ConfigManager"
]
