"""Log table queries, hits charts and export."""

from .export import chart_data_to_dataframe, export_log_page, records_to_dataframe
from .hits import (
    Granularity,
    HitsReporter,
    TimeBucketCount,
    format_bucket_label,
    resolve_granularity,
)
from .log_table import LogPage, LogTableQuery, PageState, ReferencedIds

__all__ = [
    # Log table
    "LogTableQuery",
    "LogPage",
    "PageState",
    "ReferencedIds",
    # Hits
    "HitsReporter",
    "Granularity",
    "TimeBucketCount",
    "format_bucket_label",
    "resolve_granularity",
    # Export
    "records_to_dataframe",
    "chart_data_to_dataframe",
    "export_log_page",
]
