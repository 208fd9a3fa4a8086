"""
Shared fixtures for integration tests.

Provides:
- Temporary SQLite database for isolated testing
- Seeded standard and legacy log tables with group memberships
- Log report fixtures over both store kinds
"""

from pathlib import Path

import pytest

from lms_logreport import LogReport
from lms_logreport.config.constants import CONTEXT_MODULE, DAYSECS
from lms_logreport.logstore import LegacyLogReader, StandardLogReader
from lms_logreport.storage import get_backend

# Base time for seeded events: 2023-11-14 22:13:20 UTC
T = 1_700_000_000

# Course context level for events not tied to a module
CONTEXT_COURSE = 50


# =============================================================================
# SAMPLE DATA
# =============================================================================


def _event(userid: int, courseid: int, timecreated: int, **overrides) -> dict:
    event = {
        "eventname": "\\core\\event\\course_viewed",
        "component": "core",
        "action": "viewed",
        "target": "course",
        "crud": "r",
        "edulevel": 2,
        "contextlevel": CONTEXT_COURSE,
        "contextinstanceid": courseid,
        "userid": userid,
        "courseid": courseid,
        "anonymous": False,
        "timecreated": timecreated,
        "origin": "web",
        "ip": "10.0.0.1",
    }
    event.update(overrides)
    return event


def _module_event(userid: int, timecreated: int, **overrides) -> dict:
    values = {
        "eventname": "\\mod_forum\\event\\discussion_viewed",
        "component": "mod_forum",
        "target": "discussion",
        "contextlevel": CONTEXT_MODULE,
        "contextinstanceid": 3,
    }
    values.update(overrides)
    return _event(userid, 5, timecreated, **values)


# Inserted in order, so ids are 1..9
STANDARD_EVENTS = [
    # 1: forum view in module 3
    _module_event(7, T + 100),
    # 2: forum post in module 3 through web services
    _module_event(
        7,
        T + 200,
        eventname="\\mod_forum\\event\\post_created",
        action="created",
        target="post",
        crud="c",
        origin="ws",
    ),
    # 3: course view from the CLI, level "other"
    _event(8, 5, T + 300, edulevel=0, origin="cli", relateduserid=7),
    # 4: anonymous feedback response in module 3
    _module_event(
        7,
        T + 400,
        eventname="\\mod_feedback\\event\\response_submitted",
        anonymous=True,
    ),
    # 5: course update in another course during restore
    _event(
        9,
        6,
        T + 500,
        eventname="\\core\\event\\course_updated",
        action="updated",
        crud="u",
        edulevel=1,
        origin="restore",
    ),
    # 6: forum view the next day
    _module_event(7, T + DAYSECS + 10),
    # 7: failed login on the site course
    _event(
        2,
        1,
        T + 600,
        eventname="\\core\\event\\user_login_failed",
        action="failed",
        target="user_login",
        edulevel=0,
    ),
    # 8: course view from a non-core origin
    _event(8, 5, T + 700, origin="mobile"),
    # 9: event name with LIKE wildcards in it
    _event(10, 5, T + 800, eventname="\\local_progress\\event\\progress_100%_done"),
]

# Inserted in order, so ids are 1..4
LEGACY_ENTRIES = [
    {"time": T + 100, "userid": 7, "course": 5, "module": "forum", "cmid": 3,
     "action": "view discussion"},
    {"time": T + 200, "userid": 7, "course": 5, "module": "forum", "cmid": 3,
     "action": "add post"},
    {"time": T + 300, "userid": 8, "course": 5, "module": "course", "cmid": 0,
     "action": "view"},
    {"time": T + 400, "userid": 9, "course": 6, "module": "course", "cmid": 0,
     "action": "update"},
]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def temp_db_path(tmp_path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test_logreport.db"


@pytest.fixture
def sqlite_backend(temp_db_path):
    """
    Create and initialize a SQLite backend with temp database.

    Yields the backend and closes it after the test.
    """
    backend = get_backend("sqlite", db_path=temp_db_path)
    backend.initialize()
    yield backend
    backend.close()


@pytest.fixture
def seeded_backend(sqlite_backend):
    """
    SQLite backend with seeded logs and groups.

    Group 10 holds user 7. Group 11 has no members.
    """
    sqlite_backend.insert_log_records(STANDARD_EVENTS)
    sqlite_backend.insert_legacy_records(LEGACY_ENTRIES)
    sqlite_backend.add_group_members(10, [7])
    return sqlite_backend


# =============================================================================
# REPORT FIXTURES
# =============================================================================


@pytest.fixture
def standard_report(seeded_backend) -> LogReport:
    """Log report over the standard log table."""
    return LogReport(seeded_backend, StandardLogReader(seeded_backend))


@pytest.fixture
def legacy_report(seeded_backend) -> LogReport:
    """Log report over the legacy log table."""
    return LogReport(seeded_backend, LegacyLogReader(seeded_backend))


@pytest.fixture
def standard_events() -> list[dict]:
    """Seed events for the standard log table (ids 1..9)."""
    return [dict(event) for event in STANDARD_EVENTS]


@pytest.fixture
def legacy_entries() -> list[dict]:
    """Seed entries for the legacy log table (ids 1..4)."""
    return [dict(entry) for entry in LEGACY_ENTRIES]
