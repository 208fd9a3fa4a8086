"""Log store readers, record types and group membership."""

from .groups import GroupMembership, StaticGroupMembership, StorageGroupMembership
from .reader import (
    ORDERABLE_COLUMNS,
    LegacyLogReader,
    LogReader,
    StandardLogReader,
    get_log_reader,
    normalize_order_by,
)
from .records import LOG_RECORD_FIELDS, LogRecord, StoreKind

__all__ = [
    # Records
    "LogRecord",
    "LOG_RECORD_FIELDS",
    "StoreKind",
    # Readers
    "LogReader",
    "StandardLogReader",
    "LegacyLogReader",
    "get_log_reader",
    "normalize_order_by",
    "ORDERABLE_COLUMNS",
    # Groups
    "GroupMembership",
    "StorageGroupMembership",
    "StaticGroupMembership",
]
