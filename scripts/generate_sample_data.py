#!/usr/bin/env python3
"""
Generate sample LMS event log data for trying out the log report.

Creates synthetic events across a few courses, modules and users,
plus group memberships, and inserts them into a SQLite database.

Usage:
    # Generate 30 days of sample data (default)
    python scripts/generate_sample_data.py

    # More activity over a longer period
    python scripts/generate_sample_data.py --days 365 --daily-events 2000

    # Also fill the legacy log table
    python scripts/generate_sample_data.py --legacy --db-path data/test.db
"""

import argparse
import logging
import random
import sys
import time
from dataclasses import dataclass
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lms_logreport.config.constants import (
    CONTEXT_MODULE,
    DAYSECS,
    LEVEL_OTHER,
    LEVEL_PARTICIPATING,
    LEVEL_TEACHING,
)
from lms_logreport.storage import get_backend

logger = logging.getLogger(__name__)


# =============================================================================
# EVENT PROFILES
# =============================================================================


@dataclass
class EventProfile:
    """Profile defining one kind of event."""

    eventname: str
    component: str
    action: str
    target: str
    crud: str
    edulevel: int
    in_module: bool
    weight: float


EVENT_PROFILES = [
    EventProfile(
        "\\core\\event\\course_viewed", "core", "viewed", "course",
        "r", LEVEL_PARTICIPATING, False, 5.0,
    ),
    EventProfile(
        "\\mod_forum\\event\\discussion_viewed", "mod_forum", "viewed",
        "discussion", "r", LEVEL_PARTICIPATING, True, 3.0,
    ),
    EventProfile(
        "\\mod_forum\\event\\post_created", "mod_forum", "created", "post",
        "c", LEVEL_PARTICIPATING, True, 1.0,
    ),
    EventProfile(
        "\\mod_assign\\event\\submission_graded", "mod_assign", "graded",
        "submission", "u", LEVEL_TEACHING, True, 0.5,
    ),
    EventProfile(
        "\\core\\event\\user_loggedin", "core", "loggedin", "user",
        "r", LEVEL_OTHER, False, 2.0,
    ),
    EventProfile(
        "\\core\\event\\course_module_deleted", "core", "deleted",
        "course_module", "d", LEVEL_TEACHING, True, 0.1,
    ),
]

ORIGINS = ["web", "web", "web", "ws", "cli", "restore", "mobile"]


def generate_events(
    days: int,
    daily_events: int,
    courses: list[int],
    modules_per_course: int,
    users: list[int],
    now: int,
    seed: int,
) -> list[dict]:
    """Generate standard log events spread over the last N days."""
    rng = random.Random(seed)
    weights = [profile.weight for profile in EVENT_PROFILES]
    events = []

    for _ in range(days * daily_events):
        profile = rng.choices(EVENT_PROFILES, weights=weights)[0]
        course_id = rng.choice(courses)
        module_id = course_id * 100 + rng.randint(1, modules_per_course)
        events.append(
            {
                "eventname": profile.eventname,
                "component": profile.component,
                "action": profile.action,
                "target": profile.target,
                "crud": profile.crud,
                "edulevel": profile.edulevel,
                "contextlevel": CONTEXT_MODULE if profile.in_module else 50,
                "contextinstanceid": module_id if profile.in_module else course_id,
                "userid": rng.choice(users),
                "courseid": course_id,
                "anonymous": rng.random() < 0.02,
                "timecreated": now - rng.randint(0, days * DAYSECS - 1),
                "origin": rng.choice(ORIGINS),
                "ip": f"10.0.{rng.randint(0, 255)}.{rng.randint(1, 254)}",
            }
        )
    return events


def to_legacy(event: dict) -> dict:
    """Project a standard event onto the legacy log columns."""
    return {
        "time": event["timecreated"],
        "userid": event["userid"],
        "ip": event["ip"],
        "course": event["courseid"],
        "module": event["component"].replace("mod_", ""),
        "cmid": event["contextinstanceid"] if event["contextlevel"] == CONTEXT_MODULE else 0,
        "action": f"{event['target']} {event['action']}",
        "url": "",
        "info": "",
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate sample LMS log data")
    parser.add_argument("--db-path", type=Path, default=Path("data/lms-logs.db"))
    parser.add_argument("--days", type=int, default=30)
    parser.add_argument("--daily-events", type=int, default=500)
    parser.add_argument("--courses", type=int, default=3)
    parser.add_argument("--users", type=int, default=50)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--legacy", action="store_true", help="Also fill legacy log")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    courses = list(range(2, 2 + args.courses))
    users = list(range(2, 2 + args.users))
    events = generate_events(
        args.days, args.daily_events, courses, 4, users, int(time.time()), args.seed
    )

    with get_backend("sqlite", db_path=args.db_path) as backend:
        backend.initialize()
        inserted = backend.insert_log_records(events)
        logger.info(f"Inserted {inserted:,} standard log events")

        if args.legacy:
            legacy = backend.insert_legacy_records([to_legacy(e) for e in events])
            logger.info(f"Inserted {legacy:,} legacy log entries")

        # Two groups per course, splitting the users
        for course_id in courses:
            for index in range(2):
                group_id = course_id * 10 + index
                members = users[index::2]
                backend.add_group_members(group_id, members)
                logger.info(f"Group {group_id}: {len(members)} members")

    return 0


if __name__ == "__main__":
    sys.exit(main())
