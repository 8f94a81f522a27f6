"""Configuration loader for JSON/YAML files and environment variables."""

import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union, List

from pydantic import ValidationError

from .schema import ShareConfig
from .settings import get_settings
from ..utils.logging import get_logger


class ConfigurationError(Exception):
    """Raised when configuration loading fails."""
    pass


# Environment variable -> ShareConfig field
ENV_OVERRIDES = {
    "SHARESYNC_REMOTE_IP": "remote_ip",
    "SHARESYNC_SHARE_NAME": "share_name",
    "SHARESYNC_USERNAME": "username",
    "SHARESYNC_PASSWORD": "password",
    "SHARESYNC_DOMAIN": "domain",
    "SHARESYNC_LOCAL_BASE_PATH": "local_base_path",
    "SHARESYNC_BACKEND": "backend",
    "SHARESYNC_MOUNT_POINT": "mount_point",
}


class ConfigLoader:
    """Loads, validates and saves the share configuration."""

    def __init__(self):
        """Initialize the loader."""
        self.logger = get_logger(self.__class__.__name__)

    def load_from_file(self, file_path: Union[str, Path]) -> ShareConfig:
        """Load configuration from JSON or YAML file.

        Args:
            file_path: Path to configuration file

        Returns:
            Validated ShareConfig object

        Raises:
            ConfigurationError: If file cannot be loaded or validated
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        self.logger.info("Loading configuration from file", file_path=str(file_path))

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif file_path.suffix.lower() == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML format: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}")

        return self.load_from_dict(data or {})

    def load_from_dict(self, data: Dict[str, Any]) -> ShareConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration data as dictionary

        Returns:
            Validated ShareConfig object
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        data = self._apply_env_overrides(data)

        try:
            config = ShareConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

        self.logger.info(
            "Configuration loaded",
            share=config.network_path,
            backend=config.backend
        )
        return config

    def save_to_file(
        self,
        config: ShareConfig,
        file_path: Union[str, Path],
        format: Optional[str] = None
    ):
        """Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Output file path
            format: Output format ('yaml' or 'json'); taken from the suffix when omitted
        """
        file_path = Path(file_path)
        if format is None:
            format = 'yaml' if file_path.suffix.lower() in ['.yaml', '.yml'] else 'json'

        data = config.model_dump(mode="json")

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                if format.lower() == 'yaml':
                    yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True)
                elif format.lower() == 'json':
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    raise ConfigurationError(f"Unsupported format: {format}")
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}")

        self.logger.info("Configuration saved successfully", file_path=str(file_path))

    def create_default_config(self) -> ShareConfig:
        """Create the default configuration, with environment overrides applied."""
        config = self.load_from_dict({"backend": get_settings().default_backend})
        self.logger.info("Created default configuration")
        return config

    def _apply_env_overrides(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration data.

        Environment variables use the format SHARESYNC_<FIELD>, for example
        SHARESYNC_REMOTE_IP or SHARESYNC_PASSWORD.
        """
        env_overrides = {
            field: os.environ[variable]
            for variable, field in ENV_OVERRIDES.items()
            if os.environ.get(variable)
        }

        if env_overrides:
            self.logger.info(
                "Applied environment variable overrides",
                overrides=list(env_overrides)
            )
            data = {**data, **env_overrides}

        return data

    def validate_config(self, config: ShareConfig) -> List[str]:
        """Validate configuration and return list of warnings/issues.

        Args:
            config: Configuration to validate

        Returns:
            List of validation warnings
        """
        warnings = []

        if not config.username:
            warnings.append("No username configured; only anonymous access will be tried")

        if config.password.get_secret_value() and not config.username:
            warnings.append("Password configured without a username")

        if config.backend == "local" and not config.mount_point and os.name != "nt":
            warnings.append("Local backend without mount_point needs native UNC support")

        if warnings:
            self.logger.warning("Configuration validation warnings", warnings=warnings)
        else:
            self.logger.info("Configuration validation passed")

        return warnings


def load_share_config(file_path: Optional[Union[str, Path]] = None) -> ShareConfig:
    """Load the share configuration without ever failing.

    A missing file is replaced by the default configuration; the plain defaults
    (without environment overrides) are written out so they can be edited. An
    unreadable or invalid file is logged and the default configuration is returned.
    """
    loader = ConfigLoader()
    logger = get_logger("load_share_config")
    path = Path(file_path or get_settings().config_file)

    if not path.exists():
        logger.info("Configuration file not found, using defaults", file=str(path))
        try:
            config = loader.create_default_config()
        except ConfigurationError as e:
            logger.error("Invalid environment overrides, ignoring them", error=str(e))
            config = ShareConfig()
        try:
            loader.save_to_file(ShareConfig(), path)
        except ConfigurationError as e:
            logger.error("Failed to write default configuration", file=str(path), error=str(e))
        return config

    try:
        return loader.load_from_file(path)
    except ConfigurationError as e:
        logger.error("Failed to load configuration, using defaults", file=str(path), error=str(e))
        return ShareConfig()
