"""Configuration manager: holds the live share configuration and persists changes."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import SecretStr

from .schema import ShareConfig
from .loader import ConfigLoader, ConfigurationError, load_share_config
from .settings import get_settings
from ..utils.logging import get_logger, log_execution_time


class ConfigManager:
    """Loads, updates and saves the share configuration."""

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        config: Optional[ShareConfig] = None
    ):
        """Initialize configuration manager.

        Args:
            config_file: Configuration file path; defaults to the application setting
            config: Start from this configuration instead of reading the file
        """
        self.config_file = Path(config_file or get_settings().config_file)
        self.loader = ConfigLoader()
        self.logger = get_logger(self.__class__.__name__)

        self._config: Optional[ShareConfig] = config
        self._config_loaded_at: Optional[datetime] = datetime.now() if config else None

    @log_execution_time
    def load_config(self, force_reload: bool = False) -> ShareConfig:
        """Load configuration from file, falling back to defaults.

        Args:
            force_reload: Force reload even if config is already loaded

        Returns:
            Loaded configuration
        """
        if self._config and not force_reload:
            return self._config

        self._config = load_share_config(self.config_file)
        self._config_loaded_at = datetime.now()
        self.loader.validate_config(self._config)

        return self._config

    def get_config(self) -> ShareConfig:
        """Get the current configuration, loading it on first use."""
        return self.load_config()

    def save_config(self) -> None:
        """Write the current configuration to the configuration file.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        self.loader.save_to_file(self.get_config(), self.config_file)

    def update_config(
        self,
        ip: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        share_name: Optional[str] = None,
        local_base_path: Optional[str] = None,
        domain: Optional[str] = None,
        save_to_file: bool = True
    ) -> bool:
        """Change configuration values; None leaves a value untouched.

        Returns:
            True if anything changed
        """
        config = self.get_config()
        changes = {}

        if ip is not None and ip != config.remote_ip:
            changes["remote_ip"] = ip
        if username is not None and username != config.username:
            changes["username"] = username
        if password is not None and password != config.password.get_secret_value():
            changes["password"] = SecretStr(password)
        if share_name is not None and share_name != config.share_name:
            changes["share_name"] = share_name
        if local_base_path is not None and local_base_path != config.local_base_path:
            changes["local_base_path"] = local_base_path
        if domain is not None and domain != config.domain:
            changes["domain"] = domain

        if not changes:
            return False

        try:
            self._config = ShareConfig(**{**config.model_dump(), **changes})
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration update: {e}")

        self.logger.info("Configuration updated", fields=sorted(changes))

        if save_to_file:
            self.save_config()

        return True
