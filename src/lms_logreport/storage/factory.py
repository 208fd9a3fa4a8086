"""
Storage backend factory.

Backends register under a name; built-in ones are imported the first
time they are requested.
"""

import logging
from pathlib import Path
from typing import Optional

from .base import StorageBackend, StorageError

logger = logging.getLogger(__name__)

_BUILTIN_BACKENDS = ("sqlite",)

_BACKEND_REGISTRY: dict[str, type[StorageBackend]] = {}


def register_backend(backend_type: str, backend_class: type[StorageBackend]) -> None:
    """Make a StorageBackend subclass available to get_backend()."""
    _BACKEND_REGISTRY[backend_type.lower()] = backend_class
    logger.debug(f"Registered storage backend: {backend_type}")


def get_backend(backend_type: Optional[str] = None, **kwargs) -> StorageBackend:
    """
    Create a storage backend.

    Args:
        backend_type: Registered backend name; defaults to the configured one
        **kwargs: Constructor arguments. Without any, the configured
            database path is used.

    Returns:
        Backend instance; call initialize() before reading log tables

    Raises:
        StorageError: If the backend is unknown or cannot be constructed

    Example:
        with get_backend("sqlite", db_path="data/lms-logs.db") as backend:
            backend.initialize()
    """
    if backend_type is None:
        from ..config.settings import get_settings

        backend_type = get_settings().storage_backend

    backend_type = backend_type.lower()
    if backend_type not in _BACKEND_REGISTRY:
        _load_builtin(backend_type)

    backend_class = _BACKEND_REGISTRY.get(backend_type)
    if backend_class is None:
        raise StorageError(
            f"Unknown storage backend: '{backend_type}'. "
            f"Available backends: {', '.join(list_available_backends())}"
        )

    if not kwargs:
        kwargs = _configured_kwargs(backend_type)

    try:
        backend = backend_class(**kwargs)
    except (OSError, TypeError, ValueError) as e:
        raise StorageError(f"Failed to create {backend_type} backend: {e}") from e

    logger.info(f"Created {backend_type} storage backend")
    return backend


def _load_builtin(backend_type: str) -> None:
    if backend_type == "sqlite":
        from .sqlite_backend import SQLiteBackend

        register_backend("sqlite", SQLiteBackend)


def _configured_kwargs(backend_type: str) -> dict:
    """Constructor arguments taken from settings."""
    from ..config.settings import get_settings

    if backend_type == "sqlite":
        return {"db_path": Path(get_settings().sqlite_db_path)}
    return {}


def list_available_backends() -> list[str]:
    """Names of built-in and registered backends."""
    for backend_type in _BUILTIN_BACKENDS:
        if backend_type not in _BACKEND_REGISTRY:
            _load_builtin(backend_type)
    return sorted(_BACKEND_REGISTRY)
