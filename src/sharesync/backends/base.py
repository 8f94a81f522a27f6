"""Share backend interface: the transport a ShareConnection drives."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, IntFlag
from typing import BinaryIO, List, Optional, Dict, Any

from ..utils.logging import get_logger
from ..utils.paths import SharePath


class ConnectFlags(IntFlag):
    """Connection flags, numerically identical to the Windows WNet CONNECT_* values."""

    NONE = 0x0
    UPDATE_PROFILE = 0x1
    INTERACTIVE = 0x8
    PROMPT = 0x10
    REDIRECT = 0x80


class ShareErrorCode(IntEnum):
    """Network error numbers reported by backends without a protocol status of their own."""

    ACCESS_DENIED = 5
    BAD_NETPATH = 53
    SESSION_CREDENTIAL_CONFLICT = 1219
    LOGON_FAILURE = 1326
    NOT_CONNECTED = 2250
    UNKNOWN = -1


class ShareBackendError(Exception):
    """Raised by a backend when a transport operation fails."""

    def __init__(self, code: int, description: str):
        """Store the platform error code and its description."""
        super().__init__(f"error code {code}: {description}")
        self.code = code
        self.description = description


@dataclass
class RemoteEntry:
    """One child of a remote directory as reported by a backend."""

    name: str
    relative_path: str
    is_dir: bool
    modified: Optional[datetime] = None
    created: Optional[datetime] = None
    size: Optional[int] = None


class ShareBackend(ABC):
    """Abstract base class for share transports."""

    def __init__(self, **kwargs):
        """Initialize the backend logger; extra keyword options are ignored."""
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def connect(
        self,
        share: SharePath,
        username: Optional[str],
        password: Optional[str],
        flags: ConnectFlags = ConnectFlags.NONE
    ) -> None:
        """Establish a session to the share.

        Args:
            share: Share to connect to
            username: Principal to present, None to present no credentials
            password: Password for the principal, None to present no credentials
            flags: Connection flags

        Raises:
            ShareBackendError: If the session cannot be established
        """

    @abstractmethod
    def disconnect(self, share: SharePath, force: bool = True) -> None:
        """Tear down the session to the share.

        Raises:
            ShareBackendError: If the session cannot be cancelled
        """

    @abstractmethod
    def list_entries(self, share: SharePath, relative_path: str = "") -> List[RemoteEntry]:
        """List the immediate children of a directory inside the share."""

    @abstractmethod
    def open_file(self, share: SharePath, relative_path: str) -> BinaryIO:
        """Open a file inside the share for binary reading."""

    def describe(self) -> Dict[str, Any]:
        """Get information about this backend."""
        return {"backend": self.__class__.__name__}
