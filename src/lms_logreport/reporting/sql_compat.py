"""
SQL Compatibility Layer for time bucketing.

Event times are stored as epoch seconds. Grouping them into hour,
day and month buckets needs the backend's date functions; on SQLite
that is strftime(format, column, 'unixepoch'), which works in UTC.

Bucket keys are sortable strings; display labels are formatted in
Python from the bucket's earliest timestamp.
"""

from typing import Literal

BackendType = Literal["sqlite"]
BucketGrain = Literal["hour_of_day", "day", "month"]

SUPPORTED_BACKENDS = ("sqlite",)

_BUCKET_FORMATS: dict[str, str] = {
    "hour_of_day": "%H",
    "day": "%Y-%m-%d",
    "month": "%Y-%m",
}


def _check_backend(backend: str) -> None:
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported backend for time bucketing: '{backend}'. "
            f"Must be one of: {list(SUPPORTED_BACKENDS)}"
        )


def epoch_bucket(column: str, grain: BucketGrain, backend: BackendType) -> str:
    """Generate a UTC bucket key expression for an epoch-seconds column."""
    _check_backend(backend)
    try:
        fmt = _BUCKET_FORMATS[grain]
    except KeyError:
        raise ValueError(
            f"Unknown bucket grain: '{grain}'. "
            f"Must be one of: {sorted(_BUCKET_FORMATS)}"
        ) from None
    return f"strftime('{fmt}', {column}, 'unixepoch')"


def count_distinct(column: str, backend: BackendType) -> str:
    """Generate COUNT(DISTINCT ...)."""
    _check_backend(backend)
    return f"COUNT(DISTINCT {column})"


class SQLBuilder:
    """
    SQL expression builder with backend-aware syntax.
    """

    def __init__(self, backend: BackendType):
        """Initialize with target backend type."""
        _check_backend(backend)
        self.backend = backend

    def epoch_bucket(self, column: str, grain: BucketGrain) -> str:
        """Bucket key for an epoch-seconds column."""
        return epoch_bucket(column, grain, self.backend)

    def count_distinct(self, column: str) -> str:
        """Distinct count aggregate."""
        return count_distinct(column, self.backend)
