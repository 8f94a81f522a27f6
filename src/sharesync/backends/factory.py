"""Backend factory for creating the transport named in configuration."""

from typing import Dict, Any, Type, List

from .base import ShareBackend
from .smb import SmbProtocolBackend
from .local import LocalShareBackend
from .memory import MemoryShareBackend


class BackendFactory:
    """Factory for creating share backend instances."""

    _backend_classes: Dict[str, Type[ShareBackend]] = {
        "smb": SmbProtocolBackend,
        "local": LocalShareBackend,
        "memory": MemoryShareBackend,
    }

    @classmethod
    def create_backend(cls, backend_type: str, **kwargs: Any) -> ShareBackend:
        """Create a backend instance.

        Args:
            backend_type: Registered backend name (smb, local, memory, ...)
            **kwargs: Backend-specific parameters

        Returns:
            Configured backend instance

        Raises:
            ValueError: If backend type is not supported
        """
        key = (backend_type or "").lower()
        if key not in cls._backend_classes:
            raise ValueError(f"Unsupported backend type: {backend_type}")

        return cls._backend_classes[key](**kwargs)

    @classmethod
    def create_from_config(cls, config) -> ShareBackend:
        """Create the backend described by a ShareConfig."""
        if config.backend == "smb":
            return cls.create_backend(
                "smb",
                port=config.port,
                connection_timeout=config.connection_timeout
            )
        if config.backend == "local":
            return cls.create_backend("local", mount_point=config.mount_point)
        return cls.create_backend(config.backend)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        """Get list of supported backend types."""
        return list(cls._backend_classes.keys())

    @classmethod
    def register_backend(cls, backend_type: str, backend_class: Type[ShareBackend]):
        """Register a new backend type.

        Args:
            backend_type: Name used in configuration
            backend_class: Backend class to register

        Raises:
            ValueError: If the class is not a ShareBackend
        """
        if not (isinstance(backend_class, type) and issubclass(backend_class, ShareBackend)):
            raise ValueError(f"Backend class must subclass ShareBackend: {backend_class!r}")
        cls._backend_classes[backend_type.lower()] = backend_class
