"""
Paginated log table queries.

Runs a predicate against a LogReader the way the log report table
needs it: a total count and one ordered page of events, or, when
downloading, every matching event streamed without counting.

Each call fetches rows once. A page is bounded by its page size, so it
is materialized and can be both scanned for referenced users and
rendered; an export stream records referenced ids while it is consumed.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from ..config.constants import DEFAULT_PAGE_SIZE
from ..exceptions import InvalidFilterError
from ..logstore import LogReader, LogRecord
from ..query import FilterOptions, LogQueryTranslator, Predicate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageState:
    """Pagination state supplied by the rendering host."""

    page_size: int = DEFAULT_PAGE_SIZE
    page_start: int = 0
    downloading: bool = False

    def __post_init__(self):
        if self.page_size < 1:
            raise InvalidFilterError(
                "Page size must be >= 1", field="page_size", value=self.page_size
            )
        if self.page_start < 0:
            raise InvalidFilterError(
                "Page start must be >= 0", field="page_start", value=self.page_start
            )

    @classmethod
    def for_page(
        cls, page: int, page_size: int = DEFAULT_PAGE_SIZE, downloading: bool = False
    ) -> "PageState":
        """State for a zero-based page number."""
        return cls(
            page_size=page_size,
            page_start=max(page, 0) * page_size,
            downloading=downloading,
        )


@dataclass
class ReferencedIds:
    """User and course ids referenced by the events on a page."""

    user_ids: set[int] = field(default_factory=set)
    course_ids: set[int] = field(default_factory=set)

    def add(self, record: LogRecord) -> None:
        for user_id in (record.userid, record.relateduserid, record.realuserid):
            if user_id:
                self.user_ids.add(user_id)
        if record.courseid:
            self.course_ids.add(record.courseid)


@dataclass
class LogPage:
    """
    Result of one log table query.

    ``rows`` is a list for a paged query and a one-shot iterator when
    downloading. ``total`` is None when downloading.
    """

    rows: Iterable[LogRecord]
    total: Optional[int]
    page_start: int
    page_size: int
    pageable: bool
    initials_bar: bool
    referenced: ReferencedIds
    predicate: Predicate

    @property
    def current_page(self) -> int:
        if not self.pageable:
            return 0
        return self.page_start // self.page_size

    @property
    def total_pages(self) -> Optional[int]:
        if not self.pageable or self.total is None:
            return None
        return max((self.total + self.page_size - 1) // self.page_size, 1)


def _clamp_page_start(page_start: int, page_size: int, total: int) -> int:
    """Move a start beyond the last row back to the last page."""
    if total <= 0 or page_start < total:
        return page_start
    return ((total - 1) // page_size) * page_size


def _track_referenced(
    rows: Iterator[LogRecord], referenced: ReferencedIds
) -> Iterator[LogRecord]:
    for record in rows:
        referenced.add(record)
        yield record


class LogTableQuery:
    """
    Builds and runs log table queries.

    Holds no per-request state; every call returns a new LogPage.
    """

    def __init__(self, translator: LogQueryTranslator):
        self._translator = translator

    def fetch_page(
        self,
        predicate: Predicate,
        reader: LogReader,
        page_state: PageState,
        order_by: str,
        use_initials_bar: bool = True,
    ) -> LogPage:
        """
        Count and fetch events matching a predicate.

        Args:
            predicate: Built predicate
            reader: Log store to query
            page_state: Page size, start and export flag
            order_by: Ordering, e.g. "timecreated DESC"
            use_initials_bar: Whether the host shows an initials bar;
                it is only enabled when results exceed one page

        Returns:
            LogPage with rows, total and referenced ids

        Raises:
            InvalidFilterError: If order_by is not a valid ordering for
                the reader's store
            StorageError: If the store fails
        """
        order_by = reader.validate_order_by(order_by)
        selector = predicate.where
        params = predicate.params
        referenced = ReferencedIds()

        if page_state.downloading:
            logger.debug(f"Streaming all events for export: {selector}")
            rows = reader.get_events_select_iterator(selector, params, order_by, 0, 0)
            return LogPage(
                rows=_track_referenced(rows, referenced),
                total=None,
                page_start=0,
                page_size=page_state.page_size,
                pageable=False,
                initials_bar=False,
                referenced=referenced,
                predicate=predicate,
            )

        total = reader.get_events_select_count(selector, params)
        page_size = page_state.page_size
        page_start = _clamp_page_start(page_state.page_start, page_size, total)

        rows = list(
            reader.get_events_select_iterator(
                selector, params, order_by, page_start, page_size
            )
        )
        for record in rows:
            referenced.add(record)

        logger.debug(
            f"Fetched {len(rows)} of {total} events from offset {page_start}"
        )

        return LogPage(
            rows=rows,
            total=total,
            page_start=page_start,
            page_size=page_size,
            pageable=True,
            initials_bar=use_initials_bar and total > page_size,
            referenced=referenced,
            predicate=predicate,
        )

    def build_and_fetch(
        self,
        options: FilterOptions,
        page_state: PageState,
        use_initials_bar: bool = True,
    ) -> LogPage:
        """Translate filter options and fetch the requested page."""
        predicate = self._translator.build_predicate(options)
        return self.fetch_page(
            predicate,
            options.log_reader,
            page_state,
            options.order_by,
            use_initials_bar=use_initials_bar,
        )
