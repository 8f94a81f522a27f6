"""Share backends: the transports behind a ShareConnection."""

from .base import ShareBackend, ShareBackendError, ShareErrorCode, ConnectFlags, RemoteEntry
from .smb import SmbProtocolBackend
from .local import LocalShareBackend
from .memory import MemoryShareBackend
from .factory import BackendFactory

__all__ = [
    # Base classes and exceptions
    "ShareBackend",
    "ShareBackendError",
    "ShareErrorCode",
    "ConnectFlags",
    "RemoteEntry",

    # Backend implementations
    "SmbProtocolBackend",
    "LocalShareBackend",
    "MemoryShareBackend",

    # Factory
    "BackendFactory"
]
