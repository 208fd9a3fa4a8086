"""
Site hits aggregation for the log report charts.

Counts distinct users per time bucket over a fixed lookback window,
directly against the standard log table through the storage backend.

| granularity | bucket        | lookback  | label          |
|-------------|---------------|-----------|----------------|
| hourly      | hour of day   | < 1 day   | "03 PM"        |
| daily       | calendar day  | < 30 days | "1st Jan 2024" |
| monthly     | month         | < 365 days| "Jan 2024"     |

Buckets are computed in UTC.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from ..config.constants import DAYSECS, HITS_LOOKBACK_DAYS, TABLE_STANDARD_LOG
from ..exceptions import UnknownGranularityError
from ..storage import StorageBackend
from .sql_compat import BucketGrain, SQLBuilder

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    """Supported chart granularities."""

    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"


_BUCKET_GRAINS: dict[Granularity, BucketGrain] = {
    Granularity.HOURLY: "hour_of_day",
    Granularity.DAILY: "day",
    Granularity.MONTHLY: "month",
}


@dataclass(frozen=True)
class TimeBucketCount:
    """Distinct users active in one time bucket."""

    label: str
    bucket_start: int
    users: int


def ordinal(day: int) -> str:
    """Day of month with English suffix: 1st, 2nd, 3rd, 4th, 11th, 21st."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_bucket_label(granularity: Granularity, timestamp: int) -> str:
    """Format the display label of the bucket containing a timestamp."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    if granularity is Granularity.HOURLY:
        hour = moment.hour % 12 or 12
        meridiem = "AM" if moment.hour < 12 else "PM"
        return f"{hour:02d} {meridiem}"
    if granularity is Granularity.DAILY:
        return f"{ordinal(moment.day)} {moment.strftime('%b %Y')}"
    return moment.strftime("%b %Y")


def resolve_granularity(duration: object) -> Granularity:
    """
    Map a duration name to a Granularity.

    Raises:
        UnknownGranularityError: If the name is not supported
    """
    try:
        return Granularity(duration)
    except ValueError:
        raise UnknownGranularityError(
            duration, [g.value for g in Granularity]
        ) from None


class HitsReporter:
    """
    Distinct-user counts per time bucket for the hits charts.

    The clock is injectable so windows are reproducible in tests.
    """

    def __init__(
        self,
        backend: StorageBackend,
        table: str = TABLE_STANDARD_LOG,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the reporter.

        Args:
            backend: Storage backend holding the standard log table
            table: Log table to aggregate
            clock: Returns the current epoch time (defaults to time.time)
        """
        self._backend = backend
        self._table = table
        self._clock = clock or time.time
        self._sql = SQLBuilder(backend.backend_type)

    def build_query(
        self, granularity: Granularity, now: int
    ) -> tuple[str, dict[str, int]]:
        """Build the aggregate query and parameters for one granularity."""
        lookback = HITS_LOOKBACK_DAYS[granularity.value] * DAYSECS
        bucket = self._sql.epoch_bucket("timecreated", _BUCKET_GRAINS[granularity])
        users = self._sql.count_distinct("userid")

        sql = f"""
            SELECT
                {bucket} AS bucket,
                MIN(timecreated) AS bucket_start,
                {users} AS users
            FROM {self._table}
            WHERE timecreated > :since
              AND timecreated <= :now
            GROUP BY bucket
            ORDER BY bucket_start ASC
        """
        return sql, {"since": now - lookback, "now": now}

    def get_hit_buckets(self, duration: Granularity | str) -> list[TimeBucketCount]:
        """
        Distinct users per bucket, oldest bucket first.

        Raises:
            UnknownGranularityError: If the duration is not supported
            StorageError: If the aggregate query fails
        """
        granularity = resolve_granularity(duration)
        now = int(self._clock())
        sql, params = self.build_query(granularity, now)

        rows = self._backend.query(sql, params)
        logger.debug(f"{granularity.value} hits: {len(rows)} buckets up to {now}")

        return [
            TimeBucketCount(
                label=format_bucket_label(granularity, row["bucket_start"]),
                bucket_start=row["bucket_start"],
                users=row["users"],
            )
            for row in rows
        ]

    def get_hits(self, duration: Granularity | str) -> dict[str, int]:
        """Map bucket label to distinct user count, in time order."""
        return {
            bucket.label: bucket.users for bucket in self.get_hit_buckets(duration)
        }

    def generate_chart_data(self) -> dict[str, dict[str, int]]:
        """Hits for every granularity, keyed by granularity name."""
        return {
            granularity.value: self.get_hits(granularity) for granularity in Granularity
        }
