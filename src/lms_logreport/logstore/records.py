"""
Log record types shared by the log readers and the report.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Optional


class StoreKind(str, Enum):
    """Kind of log store behind a reader."""

    STANDARD = "standard"
    LEGACY = "legacy"


@dataclass(frozen=True)
class LogRecord:
    """
    One immutable event log entry.

    Legacy entries leave the standard-only fields (eventname, crud,
    edulevel, context columns, origin, related/real user) unset.
    """

    id: int
    userid: int
    courseid: Optional[int]
    action: str
    timecreated: int
    eventname: str = ""
    component: str = ""
    target: str = ""
    crud: Optional[str] = None
    edulevel: Optional[int] = None
    contextid: Optional[int] = None
    contextlevel: Optional[int] = None
    contextinstanceid: Optional[int] = None
    relateduserid: Optional[int] = None
    anonymous: bool = False
    origin: Optional[str] = None
    ip: Optional[str] = None
    realuserid: Optional[int] = None

    @classmethod
    def from_standard_row(cls, row: dict[str, Any]) -> "LogRecord":
        """Build a record from a ``logstore_standard_log`` row."""
        return cls(
            id=row["id"],
            userid=row["userid"],
            courseid=row.get("courseid"),
            action=row.get("action") or "",
            timecreated=row["timecreated"],
            eventname=row.get("eventname") or "",
            component=row.get("component") or "",
            target=row.get("target") or "",
            crud=row.get("crud"),
            edulevel=row.get("edulevel"),
            contextid=row.get("contextid"),
            contextlevel=row.get("contextlevel"),
            contextinstanceid=row.get("contextinstanceid"),
            relateduserid=row.get("relateduserid"),
            anonymous=bool(row.get("anonymous")),
            origin=row.get("origin"),
            ip=row.get("ip"),
            realuserid=row.get("realuserid"),
        )

    @classmethod
    def from_legacy_row(cls, row: dict[str, Any]) -> "LogRecord":
        """Build a record from a legacy ``log`` row."""
        return cls(
            id=row["id"],
            userid=row["userid"],
            courseid=row.get("course"),
            action=row.get("action") or "",
            timecreated=row["time"],
            component=row.get("module") or "",
            contextinstanceid=row.get("cmid") or None,
            ip=row.get("ip"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for export."""
        return asdict(self)


LOG_RECORD_FIELDS = [f.name for f in fields(LogRecord)]
