"""Data types shared by the connection, catalog and sync components."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any


class ConnectionState(str, Enum):
    """Connection lifecycle state of a ShareConnection."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class SortKey(str, Enum):
    """Timestamp used to order catalog queries."""
    MODIFIED = "modified"
    CREATED = "created"


@dataclass(frozen=True)
class CredentialSet:
    """One candidate identity for a connection attempt."""

    username: str = ""
    password: str = field(default="", repr=False)
    domain: str = ""
    label: str = "standard"

    @property
    def principal(self) -> Optional[str]:
        """``domain\\username`` when a domain is given, the bare username otherwise.

        None when there is no username to present.
        """
        if not self.username:
            return None
        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username

    @property
    def is_anonymous(self) -> bool:
        """True when the set carries neither username nor password."""
        return not self.username and not self.password


@dataclass
class FileRecord:
    """A remote file found by a catalog query."""

    full_path: str
    relative_path: str
    last_modified: Optional[datetime]
    created: Optional[datetime]
    size: Optional[int] = None

    @property
    def name(self) -> str:
        """File name without directories."""
        return self.relative_path.rsplit("/", 1)[-1]

    def timestamp(self, key: SortKey) -> datetime:
        """Timestamp for ordering; missing times sort as the oldest."""
        value = self.created if key == SortKey.CREATED else self.last_modified
        return value or datetime.min


@dataclass
class CopyOutcome:
    """Result of copying one remote file."""

    source_path: str
    destination_path: str
    succeeded: bool
    error_detail: Optional[str] = None


@dataclass
class SyncResult:
    """Aggregate of one copy batch."""

    local_directory: str
    outcomes: List[CopyOutcome] = field(default_factory=list)
    duration: Optional[float] = None

    @property
    def files_attempted(self) -> int:
        """Number of files the batch tried to copy."""
        return len(self.outcomes)

    @property
    def files_copied(self) -> int:
        """Number of files copied successfully."""
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def files_failed(self) -> int:
        """Number of files that could not be copied."""
        return self.files_attempted - self.files_copied

    @property
    def success(self) -> bool:
        """True when every attempted file was copied."""
        return self.files_failed == 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.files_attempted == 0:
            return 0.0
        return (self.files_copied / self.files_attempted) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "local_directory": self.local_directory,
            "files_attempted": self.files_attempted,
            "files_copied": self.files_copied,
            "files_failed": self.files_failed,
            "duration": self.duration,
            "failures": [
                {"source": o.source_path, "error": o.error_detail}
                for o in self.outcomes if not o.succeeded
            ]
        }
