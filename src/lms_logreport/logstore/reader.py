"""
Log readers over the storage backend.

A reader answers two questions for a selector (SQL predicate with named
parameters): how many events match, and which events fall in a window
of the ordered result. Store capabilities are explicit properties so
callers never need to inspect the reader's type.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..config.constants import TABLE_LEGACY_LOG, TABLE_STANDARD_LOG
from ..exceptions import InvalidFilterError
from ..storage import StorageBackend
from .records import LogRecord, StoreKind

logger = logging.getLogger(__name__)

# Columns a report may be ordered by
ORDERABLE_COLUMNS = frozenset(
    [
        "id",
        "timecreated",
        "userid",
        "courseid",
        "relateduserid",
        "eventname",
        "component",
        "contextinstanceid",
        "edulevel",
        "origin",
        "ip",
    ]
)

_ORDER_TERM = re.compile(r"^\s*([a-z_]+)(?:\s+(asc|desc))?\s*$", re.IGNORECASE)


def normalize_order_by(order_by: Optional[str]) -> str:
    """
    Validate an ORDER BY specification against the orderable columns.

    Args:
        order_by: Comma separated "column [ASC|DESC]" terms

    Returns:
        Normalized specification, e.g. "timecreated DESC, id ASC"

    Raises:
        InvalidFilterError: If a term names an unknown column or direction
    """
    if not order_by or not order_by.strip():
        return ""

    terms = []
    for term in order_by.split(","):
        match = _ORDER_TERM.match(term)
        if not match or match.group(1).lower() not in ORDERABLE_COLUMNS:
            raise InvalidFilterError(
                "Invalid order by term", field="order_by", value=term.strip()
            )
        direction = (match.group(2) or "ASC").upper()
        terms.append(f"{match.group(1).lower()} {direction}")
    return ", ".join(terms)


def _window_sql(offset: int, limit: int) -> str:
    """LIMIT/OFFSET clause; a limit of 0 means no limit."""
    offset = max(int(offset), 0)
    limit = int(limit)
    if limit > 0:
        return f" LIMIT {limit} OFFSET {offset}"
    if offset:
        return f" LIMIT -1 OFFSET {offset}"
    return ""


class LogReader(ABC):
    """
    Read-only access to a log store.

    Subclasses declare their :class:`StoreKind`; capability flags derive
    from it.
    """

    kind: StoreKind = StoreKind.STANDARD

    @property
    def supports_anonymous(self) -> bool:
        """True when the store records anonymous events."""
        return self.kind is StoreKind.STANDARD

    @property
    def has_extended_index_benefit(self) -> bool:
        """True when the store has the composite user/module/crud/edulevel index."""
        return self.kind is StoreKind.STANDARD

    def validate_order_by(self, order_by: Optional[str]) -> str:
        """
        Normalize an ORDER BY specification for this store.

        Raises:
            InvalidFilterError: If the store cannot order by a named column
        """
        return normalize_order_by(order_by)

    @abstractmethod
    def get_events_select_count(self, selector: str, params: dict) -> int:
        """Count events matching the selector."""
        pass

    @abstractmethod
    def get_events_select_iterator(
        self,
        selector: str,
        params: dict,
        order_by: str,
        offset: int = 0,
        limit: int = 0,
    ) -> Iterator[LogRecord]:
        """
        Lazily yield matching events in order.

        The iterator is finite and cannot be restarted; call again to
        re-issue the query. A limit of 0 returns every row from offset.
        """
        pass


class StandardLogReader(LogReader):
    """Reader for the standard log table."""

    kind = StoreKind.STANDARD

    def __init__(self, backend: StorageBackend, table: str = TABLE_STANDARD_LOG):
        self._backend = backend
        self._table = table

    def get_events_select_count(self, selector: str, params: dict) -> int:
        sql = f"SELECT COUNT(*) AS count FROM {self._table} WHERE {selector}"
        result = self._backend.query(sql, params)
        return result[0]["count"] if result else 0

    def get_events_select_iterator(
        self,
        selector: str,
        params: dict,
        order_by: str,
        offset: int = 0,
        limit: int = 0,
    ) -> Iterator[LogRecord]:
        sql = f"SELECT * FROM {self._table} WHERE {selector}"
        order_by = self.validate_order_by(order_by)
        if order_by:
            sql += f" ORDER BY {order_by}"
        sql += _window_sql(offset, limit)

        for row in self._backend.iter_query(sql, params):
            yield LogRecord.from_standard_row(row)


class LegacyLogReader(LogReader):
    """
    Reader for the legacy log table.

    Selectors are written against standard column names; they are
    rewritten to the legacy names here. The legacy table never had
    education level, anonymity, origin, event name or CRUD columns, so a
    selector using any of them matches nothing and ordering by one is
    rejected.
    """

    kind = StoreKind.LEGACY

    COLUMN_MAP = {
        "courseid": "course",
        "timecreated": "time",
        "contextinstanceid": "cmid",
        "component": "module",
    }

    UNSUPPORTED_COLUMNS = (
        "edulevel",
        "anonymous",
        "origin",
        "eventname",
        "crud",
        "contextlevel",
        "relateduserid",
        "realuserid",
    )

    # Column names, but not :placeholders of the same name
    _COLUMN_PATTERN = re.compile(r"(?<![:\w])(" + "|".join(COLUMN_MAP) + r")\b")
    _UNSUPPORTED_PATTERN = re.compile(
        r"(?<![:\w])(" + "|".join(UNSUPPORTED_COLUMNS) + r")\b"
    )

    def __init__(self, backend: StorageBackend, table: str = TABLE_LEGACY_LOG):
        self._backend = backend
        self._table = table

    def _rewrite(self, sql: str) -> Optional[str]:
        """Map standard column names to legacy ones; None if unsupported."""
        unsupported = self._UNSUPPORTED_PATTERN.search(sql)
        if unsupported:
            logger.warning(
                f"Legacy log has no '{unsupported.group(1)}' column; "
                "selector matches no events"
            )
            return None
        return self._rename(sql)

    def _rename(self, sql: str) -> str:
        return self._COLUMN_PATTERN.sub(lambda m: self.COLUMN_MAP[m.group(1)], sql)

    def validate_order_by(self, order_by: Optional[str]) -> str:
        order_by = normalize_order_by(order_by)
        unsupported = self._UNSUPPORTED_PATTERN.search(order_by)
        if unsupported:
            raise InvalidFilterError(
                "Legacy log cannot be ordered by this column",
                field="order_by",
                value=unsupported.group(1),
            )
        return order_by

    def get_events_select_count(self, selector: str, params: dict) -> int:
        legacy_selector = self._rewrite(selector)
        if legacy_selector is None:
            return 0

        sql = f"SELECT COUNT(*) AS count FROM {self._table} WHERE {legacy_selector}"
        result = self._backend.query(sql, params)
        return result[0]["count"] if result else 0

    def get_events_select_iterator(
        self,
        selector: str,
        params: dict,
        order_by: str,
        offset: int = 0,
        limit: int = 0,
    ) -> Iterator[LogRecord]:
        order_by = self.validate_order_by(order_by)
        legacy_selector = self._rewrite(selector)
        if legacy_selector is None:
            return
        legacy_order = self._rename(order_by)

        sql = f"SELECT * FROM {self._table} WHERE {legacy_selector}"
        if legacy_order:
            sql += f" ORDER BY {legacy_order}"
        sql += _window_sql(offset, limit)

        for row in self._backend.iter_query(sql, params):
            yield LogRecord.from_legacy_row(row)


def get_log_reader(kind: StoreKind | str, backend: StorageBackend) -> LogReader:
    """
    Create a reader for the given store kind.

    Args:
        kind: StoreKind or its string value ('standard', 'legacy')
        backend: Storage backend holding the log tables

    Raises:
        ValueError: If the kind is unknown
    """
    store_kind = StoreKind(kind)
    if store_kind is StoreKind.LEGACY:
        return LegacyLogReader(backend)
    return StandardLogReader(backend)
