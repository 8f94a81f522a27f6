"""SMB transport built on smbclient / smbprotocol."""

import getpass
import sys
from datetime import datetime
from typing import BinaryIO, List, Optional, Dict, Any

import smbclient
from smbprotocol.exceptions import SMBException

from .base import ShareBackend, ShareBackendError, ShareErrorCode, ConnectFlags, RemoteEntry
from ..utils.paths import SharePath, normalize_relative_path


def error_code_of(exc: BaseException) -> int:
    """Extract the most specific numeric error code carried by an smbprotocol/OS exception."""
    for attribute in ("status", "ntstatus", "errno"):
        code = getattr(exc, attribute, None)
        if isinstance(code, int):
            return code
    return int(ShareErrorCode.UNKNOWN)


def _timestamp(value: Optional[float]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value)


class SmbProtocolBackend(ShareBackend):
    """Connects to SMB2/3 shares directly, without any OS-level mount."""

    def __init__(
        self,
        port: int = 445,
        connection_timeout: int = 60,
        require_signing: bool = True,
        **kwargs
    ):
        """Initialize the SMB backend.

        Args:
            port: SMB port on the remote host
            connection_timeout: Seconds to wait for the TCP connection
            require_signing: Whether message signing is mandatory
            **kwargs: Additional configuration parameters
        """
        super().__init__(**kwargs)
        self.port = port
        self.connection_timeout = connection_timeout
        self.require_signing = require_signing

    def connect(
        self,
        share: SharePath,
        username: Optional[str],
        password: Optional[str],
        flags: ConnectFlags = ConnectFlags.NONE
    ) -> None:
        """Register an smbclient session for the share host and verify the share is reachable."""
        session_kwargs: Dict[str, Any] = {
            "port": self.port,
            "connection_timeout": self.connection_timeout,
            "require_signing": self.require_signing,
            "auth_protocol": "negotiate",
        }

        previous_profile: Optional[Dict[str, Any]] = None

        if username is not None:
            if flags & ConnectFlags.INTERACTIVE:
                session_kwargs["auth_protocol"] = "ntlm"
                if not password and sys.stdin is not None and sys.stdin.isatty():
                    password = getpass.getpass(f"Password for {username}@{share.unc}: ")

            if flags & ConnectFlags.UPDATE_PROFILE:
                # Later sessions without explicit credentials fall back to this profile,
                # so it only survives a successful connect
                profile = smbclient.ClientConfig()
                previous_profile = {"username": profile.username, "password": profile.password}
                smbclient.ClientConfig(username=username, password=password)
            else:
                session_kwargs["username"] = username
                session_kwargs["password"] = password

        self.logger.debug(
            "Registering SMB session",
            host=share.host,
            port=self.port,
            principal=username,
            flags=int(flags),
            auth_protocol=session_kwargs["auth_protocol"]
        )

        try:
            smbclient.register_session(share.host, **session_kwargs)
            smbclient.stat(share.unc)
        except (SMBException, OSError, ValueError) as e:
            if previous_profile is not None:
                smbclient.ClientConfig(**previous_profile)
            raise ShareBackendError(error_code_of(e), str(e)) from e

    def disconnect(self, share: SharePath, force: bool = True) -> None:
        """Drop the pooled smbclient session for the share host."""
        try:
            smbclient.delete_session(share.host, port=self.port)
        except (SMBException, OSError) as e:
            raise ShareBackendError(error_code_of(e), str(e)) from e

    def list_entries(self, share: SharePath, relative_path: str = "") -> List[RemoteEntry]:
        """List a directory with ``smbclient.scandir``."""
        relative = normalize_relative_path(relative_path)
        entries: List[RemoteEntry] = []

        for entry in smbclient.scandir(share.join(relative)):
            if entry.name in (".", ".."):
                continue

            child = f"{relative}/{entry.name}" if relative else entry.name
            st = entry.stat()
            # smbclient follows Windows semantics: st_ctime is the creation time
            entries.append(RemoteEntry(
                name=entry.name,
                relative_path=child,
                is_dir=entry.is_dir(),
                modified=_timestamp(st.st_mtime),
                created=_timestamp(st.st_ctime),
                size=int(st.st_size)
            ))

        return entries

    def open_file(self, share: SharePath, relative_path: str) -> BinaryIO:
        """Open a remote file for binary reading."""
        return smbclient.open_file(share.join(relative_path), mode="rb")

    def describe(self) -> Dict[str, Any]:
        """Get information about this backend."""
        return {
            "backend": self.__class__.__name__,
            "port": self.port,
            "connection_timeout": self.connection_timeout,
            "require_signing": self.require_signing
        }
