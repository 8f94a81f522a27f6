"""Core share connection, catalog and copy functionality."""

from .models import ConnectionState, CredentialSet, FileRecord, SortKey, CopyOutcome, SyncResult
from .connection import ShareConnection, ShareConnectionError, ShareStateError, AttemptOutcome
from .connection import ConnectStrategy, FALLBACK_LADDER
from .catalog import FileCatalog
from .sync_engine import SyncEngine
from .orchestrator import ConnectionOrchestrator, OrchestrationReport, default_credential_sets
from .manager import ShareManager, copy_file_to_local, copy_latest_files_by_extension

__all__ = [
    # Data types
    "ConnectionState",
    "CredentialSet",
    "FileRecord",
    "SortKey",
    "CopyOutcome",
    "SyncResult",

    # Connection
    "ShareConnection",
    "ShareConnectionError",
    "ShareStateError",
    "AttemptOutcome",
    "ConnectStrategy",
    "FALLBACK_LADDER",

    # Queries and copies
    "FileCatalog",
    "SyncEngine",
    "ConnectionOrchestrator",
    "OrchestrationReport",
    "default_credential_sets",

    # Facade
    "ShareManager",
    "copy_file_to_local",
    "copy_latest_files_by_extension"
]
