"""
Log report facade.

Wires a storage backend, log reader, group membership, translator and
hits reporter together, either explicitly or from Settings.
"""

import logging
from pathlib import Path
from typing import Optional

from .config.settings import Settings, get_settings
from .logstore import (
    GroupMembership,
    LogReader,
    StorageGroupMembership,
    get_log_reader,
)
from .query import FilterOptions, LogQueryTranslator
from .reporting import HitsReporter, LogPage, LogTableQuery, PageState
from .storage import StorageBackend, get_backend

logger = logging.getLogger(__name__)


class LogReport:
    """
    Entry point for hosts rendering the log report.

    Example:
        with LogReport.from_settings() as report:
            options = report.filter_options(course_id=5, user_id=7)
            page = report.build_and_fetch(options, PageState.for_page(0))
            charts = report.generate_chart_data()
    """

    def __init__(
        self,
        backend: StorageBackend,
        reader: LogReader,
        group_membership: Optional[GroupMembership] = None,
        settings: Optional[Settings] = None,
        owns_backend: bool = False,
    ):
        self._backend = backend
        self._reader = reader
        self._settings = settings or Settings()
        self._owns_backend = owns_backend

        groups = group_membership or StorageGroupMembership(backend)
        self.translator = LogQueryTranslator(groups, site_id=self._settings.site_id)
        self.table = LogTableQuery(self.translator)
        self.hits = HitsReporter(backend)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        db_path: Optional[Path] = None,
    ) -> "LogReport":
        """
        Build a report over the configured backend and log store.

        Args:
            settings: Settings to use (defaults to get_settings())
            db_path: Overrides the configured SQLite database path
        """
        settings = settings or get_settings()
        errors = settings.validate()
        if errors:
            raise ValueError(f"Invalid settings: {'; '.join(errors)}")

        backend = get_backend(
            settings.storage_backend,
            db_path=Path(db_path or settings.sqlite_db_path),
        )
        backend.initialize()
        reader = get_log_reader(settings.log_store, backend)
        logger.info(
            f"LogReport initialized with {backend.backend_type} backend "
            f"and {reader.kind.value} log store"
        )
        return cls(backend, reader, settings=settings, owns_backend=True)

    @property
    def reader(self) -> LogReader:
        return self._reader

    def filter_options(self, **filters) -> FilterOptions:
        """FilterOptions bound to this report's reader and default ordering."""
        filters.setdefault("order_by", self._settings.default_order_by)
        return FilterOptions(log_reader=self._reader, **filters)

    def page_state(self, page: int = 0, downloading: bool = False) -> PageState:
        """PageState using the configured page size."""
        return PageState.for_page(page, self._settings.page_size, downloading)

    def build_and_fetch(
        self,
        options: FilterOptions,
        page_state: PageState,
        use_initials_bar: bool = True,
    ) -> LogPage:
        return self.table.build_and_fetch(options, page_state, use_initials_bar)

    def get_hits(self, duration: str) -> dict[str, int]:
        return self.hits.get_hits(duration)

    def generate_chart_data(self) -> dict[str, dict[str, int]]:
        return self.hits.generate_chart_data()

    def close(self) -> None:
        """Close the backend if this report created it."""
        if self._owns_backend:
            self._backend.close()

    def __enter__(self) -> "LogReport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
