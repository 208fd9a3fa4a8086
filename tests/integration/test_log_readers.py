"""
Integration tests for log readers and group membership over SQLite.
"""

import pytest

from lms_logreport.exceptions import InvalidFilterError
from lms_logreport.logstore import (
    LegacyLogReader,
    StandardLogReader,
    StorageGroupMembership,
    StoreKind,
    get_log_reader,
)

T = 1_700_000_000


class TestStandardLogReader:
    def test_count(self, seeded_backend):
        reader = StandardLogReader(seeded_backend)
        assert reader.get_events_select_count("userid = :userid", {"userid": 7}) == 4

    def test_iterator_window(self, seeded_backend):
        reader = StandardLogReader(seeded_backend)
        records = list(
            reader.get_events_select_iterator("1 = 1", {}, "id ASC", offset=2, limit=3)
        )
        assert [r.id for r in records] == [3, 4, 5]

    def test_offset_without_limit(self, seeded_backend):
        reader = StandardLogReader(seeded_backend)
        records = list(reader.get_events_select_iterator("1 = 1", {}, "id", offset=7))
        assert [r.id for r in records] == [8, 9]

    def test_records_carry_standard_fields(self, seeded_backend):
        reader = StandardLogReader(seeded_backend)
        record = next(reader.get_events_select_iterator("id = :id", {"id": 4}, "id"))

        assert record.anonymous is True
        assert record.contextinstanceid == 3
        assert record.eventname == "\\mod_feedback\\event\\response_submitted"

    def test_capabilities(self, seeded_backend):
        reader = StandardLogReader(seeded_backend)
        assert reader.supports_anonymous
        assert reader.has_extended_index_benefit


class TestLegacyLogReader:
    def test_rewrites_standard_columns(self, seeded_backend):
        reader = LegacyLogReader(seeded_backend)
        count = reader.get_events_select_count(
            "courseid = :courseid AND timecreated > :date",
            {"courseid": 5, "date": T + 150},
        )
        assert count == 2

    def test_placeholder_names_are_not_rewritten(self, seeded_backend):
        """A placeholder named like a column keeps its name."""
        reader = LegacyLogReader(seeded_backend)
        records = list(
            reader.get_events_select_iterator(
                "contextinstanceid = :contextinstanceid",
                {"contextinstanceid": 3},
                "timecreated DESC",
            )
        )
        assert [r.id for r in records] == [2, 1]

    def test_records_map_legacy_columns(self, seeded_backend):
        reader = LegacyLogReader(seeded_backend)
        record = next(reader.get_events_select_iterator("id = :id", {"id": 1}, "id"))

        assert record.courseid == 5
        assert record.timecreated == T + 100
        assert record.component == "forum"
        assert record.contextinstanceid == 3
        assert record.edulevel is None

    def test_unsupported_column_matches_nothing(self, seeded_backend, caplog):
        reader = LegacyLogReader(seeded_backend)

        assert reader.get_events_select_count("anonymous = 0", {}) == 0
        assert list(reader.get_events_select_iterator("origin = :o", {"o": "web"}, "")) == []
        assert "no 'anonymous' column" in caplog.text

    def test_order_by_missing_column_rejected(self, seeded_backend):
        reader = LegacyLogReader(seeded_backend)

        with pytest.raises(InvalidFilterError, match="eventname"):
            reader.validate_order_by("eventname ASC")
        with pytest.raises(InvalidFilterError):
            list(reader.get_events_select_iterator("1 = 1", {}, "edulevel DESC"))

    def test_validate_order_by_keeps_standard_names(self, seeded_backend):
        reader = LegacyLogReader(seeded_backend)
        assert reader.validate_order_by("timecreated desc, id") == "timecreated DESC, id ASC"

    def test_capabilities(self, seeded_backend):
        reader = LegacyLogReader(seeded_backend)
        assert not reader.supports_anonymous
        assert not reader.has_extended_index_benefit


class TestGetLogReader:
    @pytest.mark.parametrize(
        "kind,expected",
        [("standard", StandardLogReader), (StoreKind.LEGACY, LegacyLogReader)],
    )
    def test_kinds(self, sqlite_backend, kind, expected):
        assert isinstance(get_log_reader(kind, sqlite_backend), expected)

    def test_unknown_kind(self, sqlite_backend):
        with pytest.raises(ValueError):
            get_log_reader("external", sqlite_backend)


class TestStorageGroupMembership:
    def test_members_of(self, seeded_backend):
        groups = StorageGroupMembership(seeded_backend)
        seeded_backend.add_group_members(12, [8, 9])

        assert groups.members_of(10) == {7}
        assert groups.members_of(12) == {8, 9}
        assert groups.members_of(11) == set()
