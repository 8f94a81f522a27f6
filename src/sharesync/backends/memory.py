"""In-memory share backend with scriptable authentication and failure injection."""

import io
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Dict, List, Optional, Set, Tuple, Any

from .base import ShareBackend, ShareBackendError, ShareErrorCode, ConnectFlags, RemoteEntry
from ..utils.paths import SharePath, normalize_relative_path


@dataclass
class MemoryFile:
    """File content and timestamps held by the in-memory share."""

    content: bytes
    modified: datetime
    created: datetime


class MemoryShareBackend(ShareBackend):
    """A share that lives entirely in process memory.

    Useful for dry runs and for exercising the connection ladder, catalog and
    copy engine without a network.
    """

    def __init__(
        self,
        accounts: Optional[Dict[str, str]] = None,
        allow_anonymous: bool = False,
        direct_access: bool = False,
        required_flags: ConnectFlags = ConnectFlags.NONE,
        online: bool = True,
        fail_disconnect: bool = False,
        **kwargs
    ):
        """Initialize the in-memory share.

        Args:
            accounts: Accepted principal -> password pairs (principal compared case-insensitively)
            allow_anonymous: Accept connections that present no credentials
            direct_access: Allow listing without any session
            required_flags: Flags a credentialed connect must carry to succeed
            online: Whether the host answers at all
            fail_disconnect: Make every disconnect fail
            **kwargs: Additional configuration parameters
        """
        super().__init__(**kwargs)
        self.accounts = {k.lower(): v for k, v in (accounts or {}).items()}
        self.allow_anonymous = allow_anonymous
        self.direct_access = direct_access
        self.required_flags = required_flags
        self.online = online
        self.fail_disconnect = fail_disconnect

        self.files: Dict[str, MemoryFile] = {}
        self.directories: Set[str] = {""}
        self.unreadable: Set[str] = set()
        self.unlistable: Set[str] = set()

        self.sessions: Set[str] = set()
        self.connect_calls: List[Tuple[Optional[str], ConnectFlags]] = []
        self.disconnect_calls = 0

    def add_file(
        self,
        relative_path: str,
        content: bytes = b"",
        modified: Optional[datetime] = None,
        created: Optional[datetime] = None
    ) -> None:
        """Place a file in the share, creating parent directories."""
        path = normalize_relative_path(relative_path)
        now = datetime.now()
        self.files[path] = MemoryFile(
            content=content,
            modified=modified or now,
            created=created or modified or now
        )
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            self.directories.add("/".join(parts[:depth]))

    def add_directory(self, relative_path: str) -> None:
        """Create an empty directory (and its parents)."""
        parts = normalize_relative_path(relative_path).split("/")
        for depth in range(1, len(parts) + 1):
            self.directories.add("/".join(parts[:depth]))

    def _session_key(self, share: SharePath) -> str:
        return share.unc.lower()

    def connect(
        self,
        share: SharePath,
        username: Optional[str],
        password: Optional[str],
        flags: ConnectFlags = ConnectFlags.NONE
    ) -> None:
        """Accept or refuse the connection according to the configured accounts."""
        self.connect_calls.append((username, flags))

        if not self.online:
            raise ShareBackendError(
                int(ShareErrorCode.BAD_NETPATH),
                "The network path was not found"
            )

        if username is None:
            if not self.allow_anonymous:
                raise ShareBackendError(
                    int(ShareErrorCode.ACCESS_DENIED),
                    "Access is denied"
                )
        else:
            expected = self.accounts.get(username.lower())
            if expected is None or expected != (password or ""):
                raise ShareBackendError(
                    int(ShareErrorCode.LOGON_FAILURE),
                    "The user name or password is incorrect"
                )
            if (flags & self.required_flags) != self.required_flags:
                raise ShareBackendError(
                    int(ShareErrorCode.SESSION_CREDENTIAL_CONFLICT),
                    "Multiple connections to a server by the same user are not allowed"
                )

        self.sessions.add(self._session_key(share))

    def disconnect(self, share: SharePath, force: bool = True) -> None:
        """Drop the session, or fail when configured to."""
        self.disconnect_calls += 1
        if self.fail_disconnect:
            raise ShareBackendError(
                int(ShareErrorCode.NOT_CONNECTED),
                "This network connection does not exist"
            )
        self.sessions.discard(self._session_key(share))

    def _check_access(self, share: SharePath) -> None:
        if not self.online:
            raise ShareBackendError(
                int(ShareErrorCode.BAD_NETPATH), "The network path was not found"
            )
        if not self.direct_access and self._session_key(share) not in self.sessions:
            raise ShareBackendError(int(ShareErrorCode.ACCESS_DENIED), "Access is denied")

    def list_entries(self, share: SharePath, relative_path: str = "") -> List[RemoteEntry]:
        """List the immediate children of a directory."""
        self._check_access(share)
        directory = normalize_relative_path(relative_path)
        if directory not in self.directories:
            raise FileNotFoundError(f"No such directory: {share.join(directory)}")
        if directory in self.unlistable:
            raise PermissionError(f"Cannot list directory: {share.join(directory)}")

        prefix = f"{directory}/" if directory else ""
        entries: List[RemoteEntry] = []

        for path in sorted(self.directories):
            if path and path.startswith(prefix) and "/" not in path[len(prefix):]:
                entries.append(
                    RemoteEntry(name=path[len(prefix):], relative_path=path, is_dir=True)
                )

        for path, item in self.files.items():
            if path.startswith(prefix) and "/" not in path[len(prefix):]:
                entries.append(RemoteEntry(
                    name=path[len(prefix):],
                    relative_path=path,
                    is_dir=False,
                    modified=item.modified,
                    created=item.created,
                    size=len(item.content)
                ))

        return entries

    def open_file(self, share: SharePath, relative_path: str) -> BinaryIO:
        """Open a file for binary reading."""
        self._check_access(share)
        path = normalize_relative_path(relative_path)
        if path in self.unreadable:
            raise PermissionError(f"The file is locked: {share.join(path)}")
        if path not in self.files:
            raise FileNotFoundError(f"No such file: {share.join(path)}")
        return io.BytesIO(self.files[path].content)

    def describe(self) -> Dict[str, Any]:
        """Get information about this backend."""
        return {
            "backend": self.__class__.__name__,
            "files": len(self.files),
            "directories": len(self.directories) - 1,
            "sessions": len(self.sessions)
        }
