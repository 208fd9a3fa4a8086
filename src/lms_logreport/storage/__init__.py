"""
Storage abstraction layer for the log report.

Usage:
    from lms_logreport.storage import get_backend

    with get_backend('sqlite', db_path='data/lms-logs.db') as backend:
        backend.initialize()
        rows = backend.query("SELECT COUNT(*) AS n FROM logstore_standard_log")
"""

from .base import (
    QueryError,
    SchemaError,
    StorageBackend,
    StorageConnectionError,
    StorageError,
)
from .factory import get_backend, list_available_backends, register_backend

__all__ = [
    # Base classes and exceptions
    "StorageBackend",
    "StorageError",
    "StorageConnectionError",
    "QueryError",
    "SchemaError",
    # Factory functions
    "get_backend",
    "register_backend",
    "list_available_backends",
]
