"""Share manager facade and one-shot copy helpers for unattended processes."""

import os
from typing import List, Optional, Union

from .catalog import FileCatalog
from .connection import ShareConnection, ShareConnectionError, ShareStateError
from .models import CredentialSet, FileRecord, SortKey
from .sync_engine import SyncEngine
from ..backends.base import ShareBackend
from ..backends.factory import BackendFactory
from ..config.manager import ConfigManager
from ..config.schema import ShareConfig
from ..utils.logging import get_logger, log_execution_time
from ..utils.paths import SharePath

PathLike = Union[str, os.PathLike]


def _share_path_of(config: ShareConfig) -> SharePath:
    return SharePath(config.remote_ip, config.share_name)


def _credentials_of(config: ShareConfig) -> CredentialSet:
    return CredentialSet(
        username=config.username,
        password=config.password.get_secret_value(),
        domain=config.domain
    )


class ShareManager:
    """Keeps one configured share connected and answers file requests against it.

    Connection failures are reported as False and logged; the caller decides
    whether to retry. Use it as a context manager to guarantee the disconnect.
    """

    def __init__(
        self,
        config: Optional[ShareConfig] = None,
        backend: Optional[ShareBackend] = None,
        config_manager: Optional[ConfigManager] = None
    ):
        """Initialize the share manager.

        Args:
            config: Share configuration; loaded through the config manager if omitted
            backend: Transport override; built from the configuration if omitted
            config_manager: Configuration source used for loading, updating and saving
        """
        self.config_manager = config_manager or ConfigManager(config=config)
        self.config = config or self.config_manager.get_config()
        self.logger = get_logger(self.__class__.__name__)

        self._backend_override = backend
        self._build_connection()

    def _build_connection(self) -> None:
        backend = self._backend_override or BackendFactory.create_from_config(self.config)
        self.connection = ShareConnection(
            _share_path_of(self.config),
            _credentials_of(self.config),
            backend
        )
        self.catalog = FileCatalog(self.connection)
        self.sync_engine = SyncEngine(self.connection, self.catalog)

    @property
    def network_path(self) -> str:
        """UNC path of the managed share."""
        return self.config.network_path

    @property
    def is_connected(self) -> bool:
        """True while the share is usable."""
        return self.connection.is_connected

    def connect(self, force_reconnect: bool = False) -> bool:
        """Connect through direct access first, then the credential ladder.

        Returns:
            True if connected; False when every way in failed
        """
        if self.connection.is_connected and not force_reconnect:
            return True

        try:
            return self.connection.connect(force_reconnect=force_reconnect, try_direct=True)
        except ShareConnectionError as e:
            self.logger.error(
                "Failed to connect to network share",
                share=self.network_path,
                code=e.code,
                error=e.description
            )
            return False

    def disconnect(self) -> None:
        """Release the share connection."""
        self.connection.disconnect()

    def ensure_connected(self) -> None:
        """Connect lazily.

        Raises:
            ShareStateError: If the share cannot be connected
        """
        if not self.connect():
            raise ShareStateError(f"Unable to access network share {self.network_path}")

    def get_files(self, relative_path: str = "") -> List[str]:
        """Full paths of the files in a share directory."""
        self.ensure_connected()
        return self.catalog.list_files(relative_path)

    def get_directories(self, relative_path: str = "") -> List[str]:
        """Full paths of the subdirectories of a share directory."""
        self.ensure_connected()
        return self.catalog.list_directories(relative_path)

    def find_files_by_extension(
        self,
        extension: str = "",
        count: Optional[int] = 10,
        ascending: bool = False,
        recursive: bool = False
    ) -> List[FileRecord]:
        """Newest (or oldest) files with an extension, by modification time."""
        self.ensure_connected()
        return self.catalog.find_by_extension(extension, count, ascending, recursive)

    def find_files_by_extension_by_creation_time(
        self,
        extension: str = "",
        count: Optional[int] = 10,
        ascending: bool = False,
        recursive: bool = False
    ) -> List[FileRecord]:
        """Newest (or oldest) files with an extension, by creation time."""
        self.ensure_connected()
        return self.catalog.find_by_extension_by_creation_time(
            extension, count, ascending, recursive
        )

    def read_text(self, relative_path: str, encoding: str = "utf-8") -> str:
        """Read a remote text file."""
        self.ensure_connected()
        return self.catalog.read_text(relative_path, encoding)

    def copy_file_to_local(
        self,
        remote_relative_path: str,
        local_destination_path: PathLike,
        overwrite: bool = True
    ) -> bool:
        """Copy one remote file to an exact local path."""
        self.ensure_connected()
        return self.sync_engine.copy_one(remote_relative_path, local_destination_path, overwrite)

    def copy_files_to_local(
        self,
        remote_relative_paths: List[str],
        local_directory: Optional[PathLike] = None,
        overwrite: bool = True
    ) -> int:
        """Copy several remote files into one local directory, by file name.

        The directory defaults to the configured local base path.
        """
        self.ensure_connected()
        target = local_directory or self.config.get_local_base_path()
        return self.sync_engine.copy_many(remote_relative_paths, target, overwrite)

    def copy_latest_files_by_extension(
        self,
        extension: str,
        count: Optional[int] = 10,
        local_directory: Optional[PathLike] = None,
        ascending: bool = False,
        overwrite: bool = True,
        recursive: bool = False,
        sort_key: SortKey = SortKey.MODIFIED
    ) -> int:
        """Copy the newest files with an extension below the local base path.

        Returns:
            Number of files copied successfully
        """
        self.ensure_connected()
        target = local_directory or self.config.get_local_base_path()
        return self.sync_engine.copy_latest_by_extension(
            extension,
            count,
            target,
            ascending=ascending,
            overwrite=overwrite,
            recursive=recursive,
            sort_key=sort_key
        )

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
        """Change configuration values and rebuild the connection if anything changed.

        Returns:
            True if the configuration changed
        """
        changed = self.config_manager.update_config(
            ip=ip,
            username=username,
            password=password,
            share_name=share_name,
            local_base_path=local_base_path,
            domain=domain,
            save_to_file=save_to_file
        )

        if changed:
            self.disconnect()
            self.config = self.config_manager.get_config()
            self._build_connection()
            self.logger.info("Share connection rebuilt", share=self.network_path)

        return changed

    def save_config(self) -> None:
        """Persist the current configuration."""
        self.config_manager.save_config()

    def __enter__(self) -> "ShareManager":
        """Enter the managed scope."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect when leaving the scope."""
        self.disconnect()


def copy_file_to_local(
    share_path: Union[SharePath, str],
    credentials: Optional[CredentialSet],
    remote_relative_path: str,
    local_destination_path: PathLike,
    overwrite: bool = True,
    backend: Optional[ShareBackend] = None
) -> bool:
    """Connect, copy one file and disconnect again.

    Returns:
        True if the file was copied; False on connection or copy failure
    """
    logger = get_logger("copy_file_to_local")

    with ShareConnection(share_path, credentials, backend) as connection:
        try:
            connection.connect(try_direct=True)
        except ShareConnectionError as e:
            logger.error("Failed to connect for copy", share=e.share_path, code=e.code)
            return False

        return SyncEngine(connection).copy_one(
            remote_relative_path, local_destination_path, overwrite
        )


@log_execution_time
def copy_latest_files_by_extension(
    source: Union[ShareConfig, SharePath, str],
    extension: str,
    count: Optional[int],
    local_directory: PathLike,
    credentials: Optional[CredentialSet] = None,
    ascending: bool = False,
    overwrite: bool = True,
    recursive: bool = True,
    sort_key: SortKey = SortKey.MODIFIED,
    backend: Optional[ShareBackend] = None
) -> int:
    """Connect, copy the newest files with an extension and disconnect again.

    Args:
        source: A ShareConfig, or a share path used together with ``credentials``
        extension: File extension to match
        count: Maximum number of files, None for all
        local_directory: Target directory; share-relative directories are recreated below it
        credentials: Identity for a bare share path; ignored for a ShareConfig
        ascending: Copy the oldest files instead of the newest
        overwrite: Replace existing local files
        recursive: Search subdirectories too
        sort_key: Order by modification or creation time
        backend: Transport override

    Returns:
        Number of files copied; 0 when the share cannot be connected
    """
    logger = get_logger("copy_latest_files_by_extension")

    if isinstance(source, ShareConfig):
        share_path = _share_path_of(source)
        credentials = _credentials_of(source)
        backend = backend or BackendFactory.create_from_config(source)
    else:
        share_path = source

    with ShareConnection(share_path, credentials, backend) as connection:
        try:
            connection.connect(try_direct=True)
        except ShareConnectionError as e:
            logger.error("Failed to connect for copy", share=e.share_path, code=e.code)
            return 0

        return SyncEngine(connection).copy_latest_by_extension(
            extension,
            count,
            local_directory,
            ascending=ascending,
            overwrite=overwrite,
            recursive=recursive,
            sort_key=sort_key
        )
