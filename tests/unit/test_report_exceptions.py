"""
Unit tests for the log report exception hierarchy.
"""

from lms_logreport.exceptions import (
    InvalidFilterError,
    LogReportError,
    PredicateError,
    UnknownGranularityError,
)


class TestInvalidFilterError:
    def test_message_with_field_and_value(self):
        error = InvalidFilterError("Bad action", field="action", value="x")
        assert str(error) == "Bad action (field='action', value='x')"
        assert error.field == "action"

    def test_message_with_field_only(self):
        assert str(InvalidFilterError("Bad", field="date")) == "Bad (field='date')"

    def test_plain_message(self):
        assert str(InvalidFilterError("Bad")) == "Bad"


class TestHierarchy:
    def test_all_derive_from_base(self):
        for error_class in (InvalidFilterError, UnknownGranularityError, PredicateError):
            assert issubclass(error_class, LogReportError)

    def test_unknown_granularity_carries_duration(self):
        error = UnknownGranularityError("weekly", ["hourly", "daily", "monthly"])

        assert error.duration == "weekly"
        assert error.field == "duration"
        assert "hourly, daily, monthly" in str(error)
