"""
Integration tests for the SQLite log storage backend.

Tests:
- Database initialization and table creation
- Standard and legacy log inserts
- Group membership inserts
- Query streaming and error wrapping
- Backend factory
"""

import pytest

from lms_logreport.storage import QueryError, SchemaError, StorageError, get_backend


class TestSQLiteBackendInitialization:
    """Tests for backend initialization."""

    def test_backend_creates_database(self, sqlite_backend, temp_db_path):
        """Backend should create database file."""
        assert temp_db_path.exists()

    def test_backend_creates_tables(self, sqlite_backend):
        """Backend should create the log and group tables."""
        assert sqlite_backend.table_exists("logstore_standard_log")
        assert sqlite_backend.table_exists("log")
        assert sqlite_backend.table_exists("groups_members")

    def test_initialize_is_idempotent(self, sqlite_backend):
        sqlite_backend.initialize()
        assert sqlite_backend.get_table_row_count("logstore_standard_log") == 0

    def test_backend_type_is_sqlite(self, sqlite_backend):
        assert sqlite_backend.backend_type == "sqlite"


class TestLogInserts:
    """Tests for inserting log rows."""

    def test_insert_standard_events(self, sqlite_backend, standard_events):
        rows = sqlite_backend.insert_log_records(standard_events)

        assert rows == len(standard_events)
        assert sqlite_backend.get_table_row_count("logstore_standard_log") == rows

    def test_anonymous_stored_as_integer(self, sqlite_backend, standard_events):
        sqlite_backend.insert_log_records(standard_events)
        result = sqlite_backend.query(
            "SELECT id FROM logstore_standard_log WHERE anonymous = 1"
        )
        assert [row["id"] for row in result] == [4]

    def test_missing_columns_get_defaults(self, sqlite_backend):
        sqlite_backend.insert_log_records([{"timecreated": 1, "userid": 3}])
        row = sqlite_backend.query("SELECT * FROM logstore_standard_log")[0]

        assert row["crud"] == "r"
        assert row["edulevel"] == 0
        assert row["anonymous"] == 0
        assert row["courseid"] is None

    def test_event_without_time_rejected(self, sqlite_backend):
        with pytest.raises(SchemaError, match="timecreated"):
            sqlite_backend.insert_log_records([{"userid": 3}])

    def test_insert_empty_list(self, sqlite_backend):
        assert sqlite_backend.insert_log_records([]) == 0
        assert sqlite_backend.insert_legacy_records([]) == 0

    def test_insert_legacy_entries(self, sqlite_backend, legacy_entries):
        rows = sqlite_backend.insert_legacy_records(legacy_entries)

        assert rows == len(legacy_entries)
        assert sqlite_backend.get_table_row_count("log") == rows

    def test_group_members_ignore_duplicates(self, sqlite_backend):
        sqlite_backend.add_group_members(10, [7, 8])
        sqlite_backend.add_group_members(10, [7])

        assert sqlite_backend.get_table_row_count("groups_members") == 2


class TestQueryOperations:
    """Tests for query, iter_query and execute."""

    def test_query_with_named_params(self, seeded_backend):
        result = seeded_backend.query(
            "SELECT id FROM logstore_standard_log WHERE userid = :userid ORDER BY id",
            {"userid": 7},
        )
        assert [row["id"] for row in result] == [1, 2, 4, 6]

    def test_iter_query_streams_all_rows(self, temp_db_path, standard_events):
        with get_backend("sqlite", db_path=temp_db_path, fetch_size=2) as backend:
            backend.initialize()
            backend.insert_log_records(standard_events)

            ids = [
                row["id"]
                for row in backend.iter_query(
                    "SELECT id FROM logstore_standard_log ORDER BY id"
                )
            ]

        assert ids == list(range(1, 10))

    def test_invalid_sql_raises_query_error(self, sqlite_backend):
        with pytest.raises(QueryError):
            sqlite_backend.query("SELECT * FROM no_such_table")

    def test_iter_query_invalid_sql_raises_query_error(self, sqlite_backend):
        with pytest.raises(QueryError):
            list(sqlite_backend.iter_query("SELECT * FROM no_such_table"))

    def test_execute_returns_affected_rows(self, seeded_backend):
        affected = seeded_backend.execute(
            "DELETE FROM logstore_standard_log WHERE courseid = :courseid",
            {"courseid": 6},
        )
        assert affected == 1

    def test_row_count_of_missing_table(self, sqlite_backend):
        with pytest.raises(SchemaError):
            sqlite_backend.get_table_row_count("missing")

    def test_health_check(self, sqlite_backend):
        health = sqlite_backend.health_check()

        assert health["healthy"] is True
        assert health["details"]["table_count"] >= 3


class TestBackendFactory:
    def test_unknown_backend(self):
        with pytest.raises(StorageError, match="Unknown storage backend"):
            get_backend("postgres")

    def test_bad_constructor_arguments(self, temp_db_path):
        with pytest.raises(StorageError, match="Failed to create"):
            get_backend("sqlite", db_path=temp_db_path, pool_size=3)
