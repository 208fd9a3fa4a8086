"""
Storage backend interface for event log tables.

The log readers, group lookup and hits reporter only need parameterized
SQL with ``:name`` placeholders, plus a way to load log rows. Backends
own their connection and schema.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional


class StorageError(Exception):
    """Base exception for storage backend errors."""

    pass


class StorageConnectionError(StorageError):
    """The backend could not open its database."""

    pass


class QueryError(StorageError):
    """A statement failed; the backend's own error is chained."""

    pass


class SchemaError(StorageError):
    """A table is missing or a row does not fit its table."""

    pass


class StorageBackend(ABC):
    """
    Connection to a database holding the event log tables.

    Usable as a context manager; leaving the block closes the connection.
    """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Identifier used for dialect-specific SQL, e.g. 'sqlite'."""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """Create the log, legacy log and group tables if missing."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def insert_log_records(self, records: list[dict]) -> int:
        """
        Load events into the standard log table.

        Args:
            records: Event dictionaries keyed by standard log column

        Returns:
            Number of events written

        Raises:
            SchemaError: If an event lacks a required column
            QueryError: If the insert fails
        """
        pass

    @abstractmethod
    def query(self, sql: str, params: Optional[dict] = None) -> list[dict]:
        """
        Run a select and return every row as a dictionary.

        Raises:
            QueryError: If the statement fails
        """
        pass

    def iter_query(self, sql: str, params: Optional[dict] = None) -> Iterator[dict]:
        """
        Run a select and yield rows as they are read.

        Backends without cursor streaming fall back to ``query``.
        """
        yield from self.query(sql, params)

    @abstractmethod
    def execute(self, sql: str, params: Optional[dict] = None) -> int:
        """Run a write or DDL statement and return the affected row count."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        pass

    def health_check(self) -> dict:
        """
        Probe the connection with a trivial select.

        Returns:
            {"healthy": bool, "backend_type": str, "message": str, "details": dict}
        """
        try:
            self.query("SELECT 1 AS probe")
        except StorageError as e:
            return {
                "healthy": False,
                "backend_type": self.backend_type,
                "message": f"Health check failed: {e}",
                "details": {"error": str(e)},
            }
        return {
            "healthy": True,
            "backend_type": self.backend_type,
            "message": "Backend is operational",
            "details": {},
        }

    def __enter__(self) -> "StorageBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
