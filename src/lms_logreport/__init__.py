"""Filtered log report queries and hits charts for an LMS event log."""

from .report import LogReport

__version__ = "0.1.0"

__all__ = ["LogReport", "__version__"]
