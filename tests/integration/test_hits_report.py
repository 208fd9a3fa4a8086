"""
Integration tests for site hits aggregation against SQLite.

The clock is fixed at 2024-03-09 16:00:00 UTC.
"""

import pytest

from lms_logreport.exceptions import UnknownGranularityError
from lms_logreport.reporting import Granularity, HitsReporter

NOW = 1_710_000_000

HOUR = 3600
DAY = 86400


@pytest.fixture
def hits_backend(sqlite_backend):
    """Backend with events spread across the hits windows."""
    events = [
        # Today 14:30, user 1
        {"userid": 1, "timecreated": NOW - HOUR - HOUR // 2},
        # Today 15:30 and 15:50, users 2 and 3
        {"userid": 2, "timecreated": NOW - HOUR // 2},
        {"userid": 3, "timecreated": NOW - 600},
        # Same user twice in one hour counts once
        {"userid": 3, "timecreated": NOW - 300},
        # 7th Mar 15:00, user 3
        {"userid": 3, "timecreated": NOW - 2 * DAY - HOUR},
        # 15th Jan 12:00, user 4
        {"userid": 4, "timecreated": 1_705_320_000},
        # In the future
        {"userid": 5, "timecreated": NOW + 60},
        # More than a year ago
        {"userid": 6, "timecreated": NOW - 400 * DAY},
    ]
    sqlite_backend.insert_log_records(events)
    return sqlite_backend


@pytest.fixture
def reporter(hits_backend) -> HitsReporter:
    return HitsReporter(hits_backend, clock=lambda: NOW)


class TestHitsReporter:
    def test_hourly(self, reporter):
        assert reporter.get_hits("hourly") == {"02 PM": 1, "03 PM": 2}

    def test_daily(self, reporter):
        hits = reporter.get_hits(Granularity.DAILY)
        assert list(hits.items()) == [("7th Mar 2024", 1), ("9th Mar 2024", 3)]

    def test_monthly(self, reporter):
        hits = reporter.get_hits("monthly")
        assert list(hits.items()) == [("Jan 2024", 1), ("Mar 2024", 3)]

    def test_buckets_oldest_first(self, reporter):
        buckets = reporter.get_hit_buckets("daily")
        starts = [bucket.bucket_start for bucket in buckets]
        assert starts == sorted(starts)
        assert buckets[0].bucket_start == NOW - 2 * DAY - HOUR

    def test_unknown_duration(self, reporter):
        with pytest.raises(UnknownGranularityError):
            reporter.get_hits("weekly")

    def test_chart_data_has_every_granularity(self, reporter):
        chart_data = reporter.generate_chart_data()

        assert list(chart_data) == ["hourly", "daily", "monthly"]
        assert chart_data["hourly"] == {"02 PM": 1, "03 PM": 2}

    def test_empty_log(self, sqlite_backend):
        reporter = HitsReporter(sqlite_backend, clock=lambda: NOW)
        assert reporter.generate_chart_data() == {
            "hourly": {},
            "daily": {},
            "monthly": {},
        }

    def test_query_is_parameterized(self, reporter):
        sql, params = reporter.build_query(Granularity.HOURLY, NOW)

        assert ":since" in sql
        assert params == {"since": NOW - DAY, "now": NOW}
