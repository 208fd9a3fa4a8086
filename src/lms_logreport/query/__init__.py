"""Filter options, predicate building and filter-to-query translation."""

from .filters import EducationLevel, FilterOptions
from .predicate import MATCH_ALL, MATCH_NONE, Predicate, escape_like, placeholders
from .translator import LogQueryTranslator

__all__ = [
    "EducationLevel",
    "FilterOptions",
    "Predicate",
    "MATCH_ALL",
    "MATCH_NONE",
    "escape_like",
    "placeholders",
    "LogQueryTranslator",
]
