"""Backend for shares the operating system has already made reachable."""

import os
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, List, Optional, Dict, Any

from .base import ShareBackend, ShareBackendError, ShareErrorCode, ConnectFlags, RemoteEntry
from ..utils.paths import SharePath, normalize_relative_path


class LocalShareBackend(ShareBackend):
    """Reads a share through the local filesystem.

    With ``mount_point`` set, the share root is that directory (a CIFS mount, a
    synced folder, a test fixture). Without it, the UNC path is handed to the OS
    as-is, which Windows resolves natively. Authentication belongs to whatever
    made the path reachable, so ``connect`` only checks reachability.
    """

    def __init__(self, mount_point: Optional[str] = None, **kwargs):
        """Serve shares from ``mount_point``, or from native UNC paths when it is None."""
        super().__init__(**kwargs)
        self.mount_point = mount_point

    def root_of(self, share: SharePath) -> Path:
        """Local directory backing the share root."""
        if self.mount_point:
            return Path(self.mount_point)
        return Path(share.unc)

    def resolve(self, share: SharePath, relative_path: str = "") -> Path:
        """Local path of an item inside the share."""
        relative = normalize_relative_path(relative_path)
        root = self.root_of(share)
        return root.joinpath(*relative.split("/")) if relative else root

    def connect(
        self,
        share: SharePath,
        username: Optional[str],
        password: Optional[str],
        flags: ConnectFlags = ConnectFlags.NONE
    ) -> None:
        """Verify the share root is a reachable directory."""
        root = self.root_of(share)
        try:
            reachable = root.is_dir()
        except OSError as e:
            raise ShareBackendError(e.errno or int(ShareErrorCode.BAD_NETPATH), str(e)) from e

        if not reachable:
            raise ShareBackendError(
                int(ShareErrorCode.BAD_NETPATH),
                f"The network path was not found: {root}"
            )

    def disconnect(self, share: SharePath, force: bool = True) -> None:
        """Nothing to release; the mount is owned by the OS."""

    def list_entries(self, share: SharePath, relative_path: str = "") -> List[RemoteEntry]:
        """List a directory with ``os.scandir``."""
        relative = normalize_relative_path(relative_path)
        entries: List[RemoteEntry] = []

        with os.scandir(self.resolve(share, relative)) as iterator:
            for entry in iterator:
                st = entry.stat()
                created = getattr(st, "st_birthtime", st.st_ctime)
                entries.append(RemoteEntry(
                    name=entry.name,
                    relative_path=f"{relative}/{entry.name}" if relative else entry.name,
                    is_dir=entry.is_dir(),
                    modified=datetime.fromtimestamp(st.st_mtime),
                    created=datetime.fromtimestamp(created),
                    size=st.st_size
                ))

        return entries

    def open_file(self, share: SharePath, relative_path: str) -> BinaryIO:
        """Open a file for binary reading."""
        return open(self.resolve(share, relative_path), "rb")

    def describe(self) -> Dict[str, Any]:
        """Get information about this backend."""
        return {"backend": self.__class__.__name__, "mount_point": self.mount_point}
