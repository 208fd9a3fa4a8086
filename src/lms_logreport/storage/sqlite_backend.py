"""
SQLite storage backend implementation.

Provides a local SQLite-based event log store with the standard log
table, the legacy log table and group membership, for development,
operator scripts and tests.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from ..config.constants import (
    TABLE_GROUPS_MEMBERS,
    TABLE_LEGACY_LOG,
    TABLE_STANDARD_LOG,
)
from .base import QueryError, SchemaError, StorageBackend, StorageConnectionError

logger = logging.getLogger(__name__)


# =============================================================================
# SQLite Schema Definitions
# =============================================================================

STANDARD_LOG_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_STANDARD_LOG} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    eventname TEXT NOT NULL DEFAULT '',
    component TEXT NOT NULL DEFAULT '',
    action TEXT NOT NULL DEFAULT '',
    target TEXT NOT NULL DEFAULT '',
    objecttable TEXT,
    objectid INTEGER,
    crud TEXT NOT NULL DEFAULT 'r',
    edulevel INTEGER NOT NULL DEFAULT 0,
    contextid INTEGER NOT NULL DEFAULT 0,
    contextlevel INTEGER NOT NULL DEFAULT 0,
    contextinstanceid INTEGER NOT NULL DEFAULT 0,
    userid INTEGER NOT NULL DEFAULT 0,
    courseid INTEGER,
    relateduserid INTEGER,
    anonymous INTEGER NOT NULL DEFAULT 0,
    other TEXT,
    timecreated INTEGER NOT NULL,
    origin TEXT,
    ip TEXT,
    realuserid INTEGER
)
"""

LEGACY_LOG_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_LEGACY_LOG} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    time INTEGER NOT NULL DEFAULT 0,
    userid INTEGER NOT NULL DEFAULT 0,
    ip TEXT NOT NULL DEFAULT '',
    course INTEGER NOT NULL DEFAULT 0,
    module TEXT NOT NULL DEFAULT '',
    cmid INTEGER NOT NULL DEFAULT 0,
    action TEXT NOT NULL DEFAULT '',
    url TEXT NOT NULL DEFAULT '',
    info TEXT NOT NULL DEFAULT ''
)
"""

GROUPS_MEMBERS_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_GROUPS_MEMBERS} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    groupid INTEGER NOT NULL,
    userid INTEGER NOT NULL,
    timeadded INTEGER NOT NULL DEFAULT 0,
    UNIQUE (groupid, userid)
)
"""

INDEX_DEFINITIONS = [
    # Standard log indexes
    f"CREATE INDEX IF NOT EXISTS idx_std_time ON {TABLE_STANDARD_LOG}(timecreated)",
    f"CREATE INDEX IF NOT EXISTS idx_std_course_time "
    f"ON {TABLE_STANDARD_LOG}(courseid, anonymous, timecreated)",
    f"CREATE INDEX IF NOT EXISTS idx_std_user_module "
    f"ON {TABLE_STANDARD_LOG}"
    f"(userid, contextlevel, contextinstanceid, crud, edulevel, timecreated)",
    # Legacy log indexes
    f"CREATE INDEX IF NOT EXISTS idx_legacy_course_time "
    f"ON {TABLE_LEGACY_LOG}(course, time)",
    f"CREATE INDEX IF NOT EXISTS idx_legacy_user ON {TABLE_LEGACY_LOG}(userid)",
    # Group membership
    f"CREATE INDEX IF NOT EXISTS idx_members_group "
    f"ON {TABLE_GROUPS_MEMBERS}(groupid)",
]

STANDARD_LOG_COLUMNS = (
    "eventname",
    "component",
    "action",
    "target",
    "objecttable",
    "objectid",
    "crud",
    "edulevel",
    "contextid",
    "contextlevel",
    "contextinstanceid",
    "userid",
    "courseid",
    "relateduserid",
    "anonymous",
    "other",
    "timecreated",
    "origin",
    "ip",
    "realuserid",
)

LEGACY_LOG_COLUMNS = (
    "time",
    "userid",
    "ip",
    "course",
    "module",
    "cmid",
    "action",
    "url",
    "info",
)

# Defaults applied to NOT NULL columns missing from an inserted record
_STANDARD_DEFAULTS: dict[str, Any] = {
    "eventname": "",
    "component": "",
    "action": "",
    "target": "",
    "crud": "r",
    "edulevel": 0,
    "contextid": 0,
    "contextlevel": 0,
    "contextinstanceid": 0,
    "userid": 0,
    "anonymous": 0,
}

_LEGACY_DEFAULTS: dict[str, Any] = {
    "time": 0,
    "userid": 0,
    "ip": "",
    "course": 0,
    "module": "",
    "cmid": 0,
    "action": "",
    "url": "",
    "info": "",
}


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _to_sqlite_bool(value: Any) -> Optional[int]:
    """Convert boolean to INTEGER (0/1) for SQLite."""
    if value is None:
        return None
    return 1 if value else 0


def _convert_record(
    record: dict, columns: tuple[str, ...], defaults: dict[str, Any]
) -> dict:
    """Project a record onto the table columns, filling NOT NULL defaults."""
    converted = {}
    for column in columns:
        value = record.get(column)
        if value is None:
            value = defaults.get(column)
        converted[column] = value
    return converted


# =============================================================================
# SQLite Backend Implementation
# =============================================================================


class SQLiteBackend(StorageBackend):
    """
    SQLite storage backend for the event log.

    Holds both the standard and legacy log tables so either reader
    kind can be exercised against the same database.
    """

    def __init__(
        self,
        db_path: Path | str = "data/lms-logs.db",
        *,
        check_same_thread: bool = False,
        timeout: float = 30.0,
        fetch_size: int = 500,
    ):
        """
        Args:
            db_path: Database file; its directory is created if missing
            check_same_thread: Passed to sqlite3.connect
            timeout: Seconds to wait on a locked database
            fetch_size: Rows pulled per cursor fetch when streaming
        """
        self.db_path = Path(db_path)
        self._check_same_thread = check_same_thread
        self._timeout = timeout
        self._fetch_size = fetch_size
        self._connection: Optional[sqlite3.Connection] = None

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        return "sqlite"

    def _get_connection(self) -> sqlite3.Connection:
        """Open the connection on first use."""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    str(self.db_path),
                    check_same_thread=self._check_same_thread,
                    timeout=self._timeout,
                )
                self._connection.row_factory = sqlite3.Row
                logger.debug(f"Connected to SQLite database: {self.db_path}")
            except sqlite3.Error as e:
                raise StorageConnectionError(
                    f"Failed to connect to SQLite database: {e}"
                ) from e
        return self._connection

    @contextmanager
    def _cursor(self):
        """Cursor that commits on success and rolls back on sqlite3.Error."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(f"SQLite query failed: {e}") from e
        finally:
            cursor.close()

    def initialize(self) -> None:
        """Create the log tables, group table and indexes (idempotent)."""
        logger.info(f"Initializing SQLite database: {self.db_path}")

        with self._cursor() as cursor:
            cursor.execute(STANDARD_LOG_SCHEMA)
            cursor.execute(LEGACY_LOG_SCHEMA)
            cursor.execute(GROUPS_MEMBERS_SCHEMA)

            for index_sql in INDEX_DEFINITIONS:
                cursor.execute(index_sql)

        logger.info("Log tables ready")

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("SQLite connection closed")

    def _insert_many(
        self,
        table_name: str,
        columns: tuple[str, ...],
        converted_records: list[dict],
    ) -> int:
        column_list = ", ".join(columns)
        placeholders = ", ".join(f":{column}" for column in columns)
        sql = f"INSERT INTO {table_name} ({column_list}) VALUES ({placeholders})"

        with self._cursor() as cursor:
            cursor.executemany(sql, converted_records)
            # executemany may not set rowcount correctly; use len instead
            return len(converted_records)

    def insert_log_records(self, records: list[dict]) -> int:
        """
        Insert events into the standard log table.

        Args:
            records: List of event dictionaries; ``timecreated`` is required

        Returns:
            Number of records inserted
        """
        if not records:
            return 0

        converted_records = []
        for record in records:
            if record.get("timecreated") is None:
                raise SchemaError("Standard log records require 'timecreated'")
            converted = _convert_record(
                record, STANDARD_LOG_COLUMNS, _STANDARD_DEFAULTS
            )
            converted["anonymous"] = _to_sqlite_bool(converted["anonymous"])
            converted_records.append(converted)

        return self._insert_many(
            TABLE_STANDARD_LOG, STANDARD_LOG_COLUMNS, converted_records
        )

    def insert_legacy_records(self, records: list[dict]) -> int:
        """
        Insert entries into the legacy log table.

        Args:
            records: List of legacy log dictionaries (time, userid, course,
                     module, cmid, action, url, info)

        Returns:
            Number of records inserted
        """
        if not records:
            return 0

        converted_records = [
            _convert_record(record, LEGACY_LOG_COLUMNS, _LEGACY_DEFAULTS)
            for record in records
        ]
        return self._insert_many(
            TABLE_LEGACY_LOG, LEGACY_LOG_COLUMNS, converted_records
        )

    def add_group_members(self, group_id: int, user_ids: list[int]) -> int:
        """
        Add users to a group, ignoring existing memberships.

        Returns:
            Number of membership rows written
        """
        if not user_ids:
            return 0

        sql = f"""
            INSERT OR IGNORE INTO {TABLE_GROUPS_MEMBERS} (groupid, userid)
            VALUES (:groupid, :userid)
        """
        with self._cursor() as cursor:
            cursor.executemany(
                sql, [{"groupid": group_id, "userid": uid} for uid in user_ids]
            )
            return len(user_ids)

    def query(
        self,
        sql: str,
        params: Optional[dict] = None,
    ) -> list[dict]:
        """Run a select with named parameters; rows come back as dicts."""
        with self._cursor() as cursor:
            cursor.execute(sql, params or {})
            columns = [desc[0] for desc in cursor.description or []]
            rows = cursor.fetchall()
            return [dict(zip(columns, row)) for row in rows]

    def iter_query(
        self,
        sql: str,
        params: Optional[dict] = None,
    ) -> Iterator[dict]:
        """
        Stream query results from an open cursor.

        The cursor stays open until the iterator is exhausted or closed.
        """
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            try:
                cursor.execute(sql, params or {})
            except sqlite3.Error as e:
                raise QueryError(f"SQLite query failed: {e}") from e

            columns = [desc[0] for desc in cursor.description or []]
            while True:
                try:
                    rows = cursor.fetchmany(self._fetch_size)
                except sqlite3.Error as e:
                    raise QueryError(f"SQLite fetch failed: {e}") from e
                if not rows:
                    break
                for row in rows:
                    yield dict(zip(columns, row))
        finally:
            cursor.close()

    def execute(
        self,
        sql: str,
        params: Optional[dict] = None,
    ) -> int:
        """
        Execute statement (INSERT, UPDATE, DELETE, DDL).

        Args:
            sql: SQL statement
            params: Optional parameter dictionary

        Returns:
            Number of affected rows
        """
        with self._cursor() as cursor:
            cursor.execute(sql, params or {})
            return cursor.rowcount

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        sql = """
            SELECT name FROM sqlite_master
            WHERE type='table' AND name=:table_name
        """
        result = self.query(sql, {"table_name": table_name})
        return len(result) > 0

    def get_table_row_count(self, table_name: str) -> int:
        """Get total row count for a table."""
        if not self.table_exists(table_name):
            raise SchemaError(f"Table '{table_name}' does not exist")

        # Use f-string here - table_name is validated by table_exists
        sql = f"SELECT COUNT(*) as count FROM {table_name}"
        result = self.query(sql)
        return result[0]["count"] if result else 0

    def health_check(self) -> dict:
        """Extended health check with SQLite-specific info."""
        base_check = super().health_check()

        if base_check["healthy"]:
            db_size = self.db_path.stat().st_size if self.db_path.exists() else 0
            tables = self.query(
                "SELECT COUNT(*) as count FROM sqlite_master WHERE type='table'"
            )
            base_check["details"] = {
                "db_path": str(self.db_path),
                "db_size_bytes": db_size,
                "table_count": tables[0]["count"] if tables else 0,
            }

        return base_check
