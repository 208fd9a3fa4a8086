"""
Pytest configuration and shared fixtures for unit tests.

Provides an in-memory log reader that records the calls made to it, so
translator and pagination logic can be tested without a database.
"""

from typing import Iterator

import pytest

from lms_logreport.logstore import LogReader, LogRecord, StaticGroupMembership, StoreKind
from lms_logreport.query import LogQueryTranslator


class RecordingReader(LogReader):
    """LogReader over a fixed record list that records every call."""

    def __init__(self, kind: StoreKind = StoreKind.STANDARD, records=None):
        self.kind = kind
        self.records = list(records or [])
        self.count_calls: list[tuple[str, dict]] = []
        self.iterator_calls: list[tuple[str, dict, str, int, int]] = []

    def get_events_select_count(self, selector: str, params: dict) -> int:
        self.count_calls.append((selector, params))
        return len(self.records)

    def get_events_select_iterator(
        self,
        selector: str,
        params: dict,
        order_by: str,
        offset: int = 0,
        limit: int = 0,
    ) -> Iterator[LogRecord]:
        self.iterator_calls.append((selector, params, order_by, offset, limit))
        if limit:
            return iter(self.records[offset : offset + limit])
        return iter(self.records[offset:])


def make_record(record_id: int, **overrides) -> LogRecord:
    """Build a LogRecord with sensible defaults."""
    values = {
        "id": record_id,
        "userid": 2,
        "courseid": 5,
        "action": "viewed",
        "timecreated": 1_700_000_000 + record_id,
        "eventname": "\\core\\event\\course_viewed",
        "crud": "r",
        "edulevel": 2,
        "origin": "web",
    }
    values.update(overrides)
    return LogRecord(**values)


@pytest.fixture
def standard_reader() -> RecordingReader:
    return RecordingReader(StoreKind.STANDARD)


@pytest.fixture
def legacy_reader() -> RecordingReader:
    return RecordingReader(StoreKind.LEGACY)


@pytest.fixture
def groups() -> StaticGroupMembership:
    """Group 10 has members 3, 4 and 5; group 11 is empty."""
    return StaticGroupMembership({10: {5, 3, 4}, 11: set()})


@pytest.fixture
def translator(groups) -> LogQueryTranslator:
    return LogQueryTranslator(groups)


@pytest.fixture
def record_factory():
    """Factory building LogRecords with defaults."""
    return make_record


@pytest.fixture
def reader_factory():
    """Factory building RecordingReaders over given records."""
    return RecordingReader
