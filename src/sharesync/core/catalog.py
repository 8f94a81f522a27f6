"""Time-ordered, extension-filtered file discovery on a connected share."""

from typing import List, Optional

from .connection import ShareConnection
from .models import FileRecord, SortKey
from ..backends.base import RemoteEntry
from ..utils.logging import get_logger


def normalize_extension(extension: Optional[str]) -> str:
    """Lower-case an extension and make sure it starts with a dot; empty stays empty."""
    extension = (extension or "").strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


class FileCatalog:
    """Answers listing and newest-file queries against a connected share.

    Listing failures never propagate: an unreachable or unreadable directory
    yields an empty result and a logged error.
    """

    def __init__(self, connection: ShareConnection):
        """Initialize the catalog over a connection."""
        self.connection = connection
        self.logger = get_logger(self.__class__.__name__)

    @property
    def share_path(self):
        """Share this catalog reads from."""
        return self.connection.share_path

    def list_files(self, relative_path: str = "") -> List[str]:
        """Full UNC paths of the files directly under a share directory."""
        return [
            self.share_path.join(entry.relative_path)
            for entry in self._entries(relative_path)
            if not entry.is_dir
        ]

    def list_directories(self, relative_path: str = "") -> List[str]:
        """Full UNC paths of the directories directly under a share directory."""
        return [
            self.share_path.join(entry.relative_path)
            for entry in self._entries(relative_path)
            if entry.is_dir
        ]

    def find_by_extension(
        self,
        extension: str = "",
        count: Optional[int] = 10,
        ascending: bool = False,
        recursive: bool = False,
        sort_key: SortKey = SortKey.MODIFIED
    ) -> List[FileRecord]:
        """Find the newest (or oldest) files with a given extension.

        Args:
            extension: Suffix to match case-insensitively; the leading dot is
                optional and an empty extension matches every file
            count: Maximum number of records to return, None for all
            ascending: Oldest first when True, newest first otherwise
            recursive: Descend into subdirectories
            sort_key: Order by modification time or by creation time

        Returns:
            Matching records, ordered and truncated. Equal timestamps keep the
            order the share listed them in.
        """
        self.connection.require_connected()
        suffix = normalize_extension(extension)

        try:
            entries = self._walk(recursive)
        except Exception as e:
            self.logger.error(
                "Failed to search share",
                share=str(self.share_path),
                extension=suffix,
                error=str(e)
            )
            return []

        records = [
            self._to_record(entry)
            for entry in entries
            if not suffix or entry.name.lower().endswith(suffix)
        ]
        records.sort(key=lambda record: record.timestamp(sort_key), reverse=not ascending)

        if count is not None:
            records = records[:max(count, 0)]

        self.logger.info(
            "Search completed",
            share=str(self.share_path),
            extension=suffix or "*",
            recursive=recursive,
            sort_key=sort_key.value,
            found=len(records)
        )
        return records

    def find_by_extension_by_creation_time(
        self,
        extension: str = "",
        count: Optional[int] = 10,
        ascending: bool = False,
        recursive: bool = False
    ) -> List[FileRecord]:
        """Same as ``find_by_extension`` but ordered by creation time."""
        return self.find_by_extension(
            extension, count, ascending, recursive, sort_key=SortKey.CREATED
        )

    def read_text(self, relative_path: str, encoding: str = "utf-8") -> str:
        """Read a remote text file. I/O errors propagate to the caller."""
        self.connection.require_connected()
        with self.connection.backend.open_file(self.share_path, relative_path) as handle:
            return handle.read().decode(encoding)

    def _entries(self, relative_path: str) -> List[RemoteEntry]:
        self.connection.require_connected()
        try:
            return self.connection.backend.list_entries(self.share_path, relative_path)
        except Exception as e:
            self.logger.error(
                "Failed to list share directory",
                share=str(self.share_path),
                path=relative_path,
                error=str(e)
            )
            return []

    def _walk(self, recursive: bool) -> List[RemoteEntry]:
        """Files under the share root; a root listing failure propagates."""
        backend = self.connection.backend
        files: List[RemoteEntry] = []
        listings = [backend.list_entries(self.share_path)]

        while listings:
            for entry in listings.pop(0):
                if not entry.is_dir:
                    files.append(entry)
                elif recursive:
                    try:
                        listings.append(backend.list_entries(self.share_path, entry.relative_path))
                    except Exception as e:
                        self.logger.warning(
                            "Skipping unreadable directory",
                            path=self.share_path.join(entry.relative_path),
                            error=str(e)
                        )

        return files

    def _to_record(self, entry: RemoteEntry) -> FileRecord:
        return FileRecord(
            full_path=self.share_path.join(entry.relative_path),
            relative_path=entry.relative_path,
            last_modified=entry.modified,
            created=entry.created,
            size=entry.size
        )
