"""
Filter options accepted by the log report.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..config.constants import (
    DEFAULT_ORDER_BY,
    LEVEL_OTHER,
    LEVEL_PARTICIPATING,
    LEVEL_TEACHING,
    OTHER_ORIGINS,
)
from ..exceptions import InvalidFilterError
from ..logstore import LogReader


class EducationLevel(IntEnum):
    """Pedagogical relevance recorded on each event."""

    OTHER = LEVEL_OTHER
    TEACHING = LEVEL_TEACHING
    PARTICIPATING = LEVEL_PARTICIPATING


@dataclass(frozen=True)
class FilterOptions:
    """
    Filters for one log report request.

    Unset (None/empty) fields do not constrain the query. ``edulevel``
    of None or a negative value means "any level"; ``origin`` of
    ``"---"`` means any origin outside the core ones.
    """

    log_reader: LogReader
    course_id: Optional[int] = None
    group_id: Optional[int] = None
    user_id: Optional[int] = None
    module_id: Optional[int] = None
    action: Optional[str] = None
    site_errors: bool = False
    date: Optional[int] = None
    edulevel: Optional[int] = None
    origin: Optional[str] = None
    search: str = ""
    order_by: str = DEFAULT_ORDER_BY

    def __post_init__(self):
        if self.edulevel is not None and self.edulevel >= 0:
            try:
                EducationLevel(self.edulevel)
            except ValueError:
                raise InvalidFilterError(
                    "Unknown education level", field="edulevel", value=self.edulevel
                ) from None
        if self.date is not None and self.date < 0:
            raise InvalidFilterError(
                "Date must be a non-negative epoch", field="date", value=self.date
            )
        if self.search is None:
            object.__setattr__(self, "search", "")

    @property
    def has_edulevel(self) -> bool:
        return self.edulevel is not None and self.edulevel >= 0

    @property
    def wants_other_origins(self) -> bool:
        return self.origin == OTHER_ORIGINS
