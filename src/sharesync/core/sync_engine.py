"""Copy engine: pulls remote files onto local storage with per-file fault isolation."""

import os
import shutil
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .catalog import FileCatalog
from .connection import ShareConnection
from .models import CopyOutcome, SortKey, SyncResult
from ..utils.logging import get_logger
from ..utils.paths import normalize_relative_path

PathLike = Union[str, os.PathLike]


class SyncEngine:
    """Copies files from a connected share to local storage.

    A failing file never aborts a batch; it shows up as a failed CopyOutcome and
    a lower success count.
    """

    def __init__(self, connection: ShareConnection, catalog: Optional[FileCatalog] = None):
        """Initialize sync engine.

        Args:
            connection: Connected share to copy from
            catalog: Catalog used for newest-file queries; built from the connection if omitted
        """
        self.connection = connection
        self.catalog = catalog or FileCatalog(connection)
        self.logger = get_logger(self.__class__.__name__)

        self.chunk_size = 1024 * 1024
        self.partial_suffix = ".partial"
        self.last_result: Optional[SyncResult] = None

    def copy_one(
        self,
        remote_relative_path: str,
        local_destination_path: PathLike,
        overwrite: bool = True
    ) -> bool:
        """Copy a single remote file to an exact local path.

        Args:
            remote_relative_path: File path relative to the share root (a full UNC
                path inside the share is accepted too)
            local_destination_path: Local file to write; missing parent directories are created
            overwrite: Replace an existing local file

        Returns:
            True only if the local file exists after the copy
        """
        self.connection.require_connected()
        return self._copy(remote_relative_path, Path(local_destination_path), overwrite).succeeded

    def copy_many(
        self,
        remote_relative_paths: Iterable[str],
        local_directory: PathLike,
        overwrite: bool = True,
        preserve_structure: bool = False
    ) -> int:
        """Copy several remote files into a local directory.

        Args:
            remote_relative_paths: Files relative to the share root
            local_directory: Target directory, created if missing
            overwrite: Replace existing local files
            preserve_structure: Recreate each file's share-relative directories
                under the target instead of placing every file directly in it

        Returns:
            Number of files copied successfully
        """
        return self.run_batch(
            remote_relative_paths, local_directory, overwrite, preserve_structure
        ).files_copied

    def copy_latest_by_extension(
        self,
        extension: str,
        count: Optional[int],
        local_directory: PathLike,
        ascending: bool = False,
        overwrite: bool = True,
        recursive: bool = False,
        sort_key: SortKey = SortKey.MODIFIED
    ) -> int:
        """Copy the newest files with an extension, keeping their share-relative layout.

        A remote ``sub/dir/file.csv`` lands at ``<local_directory>/sub/dir/file.csv``.

        Returns:
            Number of files copied successfully
        """
        records = self.catalog.find_by_extension(
            extension, count, ascending, recursive, sort_key=sort_key
        )

        if not records:
            self.logger.info(
                "No matching files to copy",
                share=str(self.connection.share_path),
                extension=extension or "*"
            )
            self.last_result = SyncResult(local_directory=str(local_directory), duration=0.0)
            return 0

        return self.copy_many(
            [record.relative_path for record in records],
            local_directory,
            overwrite=overwrite,
            preserve_structure=True
        )

    def run_batch(
        self,
        remote_relative_paths: Iterable[str],
        local_directory: PathLike,
        overwrite: bool = True,
        preserve_structure: bool = False
    ) -> SyncResult:
        """Copy a batch and return the full per-file result."""
        self.connection.require_connected()
        start_time = time.monotonic()
        target = Path(local_directory)
        result = SyncResult(local_directory=str(target))

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(
                "Failed to create local directory",
                directory=str(target),
                error=str(e)
            )

        for remote in remote_relative_paths:
            result.outcomes.append(
                self._copy(remote, self._destination(remote, target, preserve_structure), overwrite)
            )

        result.duration = time.monotonic() - start_time
        self.last_result = result

        self.logger.info(
            "Copy batch completed",
            share=str(self.connection.share_path),
            directory=str(target),
            copied=result.files_copied,
            attempted=result.files_attempted,
            duration=f"{result.duration:.2f}s"
        )
        return result

    def _relative(self, remote: str) -> str:
        if remote.startswith(("\\\\", "//")):
            return self.connection.share_path.relative_to(remote)
        return normalize_relative_path(remote)

    def _destination(self, remote: str, target: Path, preserve_structure: bool) -> Path:
        parts = remote.replace("\\", "/").split("/")
        if not preserve_structure:
            return target / parts[-1]
        try:
            relative = self._relative(remote)
        except ValueError:
            return target / parts[-1]
        return target.joinpath(*relative.split("/"))

    def _copy(self, remote: str, destination: Path, overwrite: bool) -> CopyOutcome:
        """Copy one file; every failure becomes a failed outcome."""
        share = self.connection.share_path
        source = remote
        partial: Optional[Path] = None

        try:
            relative = self._relative(remote)
            source = share.join(relative)

            if not destination.name:
                raise IsADirectoryError(f"Destination has no file name: {destination}")
            if destination.exists() and not overwrite:
                raise FileExistsError(f"Destination already exists: {destination}")

            partial = destination.with_name(destination.name + self.partial_suffix)
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self.connection.backend.open_file(share, relative) as src, \
                    open(partial, "wb") as dst:
                shutil.copyfileobj(src, dst, self.chunk_size)
            os.replace(partial, destination)

        except Exception as e:
            if partial is not None:
                self._discard(partial)
            self.logger.error(
                "Failed to copy file",
                source=source,
                destination=str(destination),
                error=str(e)
            )
            return CopyOutcome(source, str(destination), False, str(e))

        if not destination.exists():
            self.logger.error(
                "Copied file missing at destination",
                source=source,
                destination=str(destination)
            )
            return CopyOutcome(source, str(destination), False, "destination missing after copy")

        self.logger.info("File copied", source=source, destination=str(destination))
        return CopyOutcome(source, str(destination), True)

    def _discard(self, partial: Path) -> None:
        try:
            partial.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning("Failed to remove partial file", path=str(partial), error=str(e))

    def failed_sources(self) -> List[str]:
        """Remote paths that failed in the last batch."""
        if not self.last_result:
            return []
        return [o.source_path for o in self.last_result.outcomes if not o.succeeded]
