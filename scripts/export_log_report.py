#!/usr/bin/env python3
"""
Export a filtered log report to CSV or Excel format.

Usage:
    # Export every event in a course
    python scripts/export_log_report.py --course 5 --output data/reports/course5.csv

    # Export one user's activity in a module on a given day
    python scripts/export_log_report.py \
        --course 5 --user 7 --module 3 \
        --date 2025-03-14 \
        --output data/reports/user7.xlsx

    # Print one page instead of exporting
    python scripts/export_log_report.py --course 5 --page 0
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lms_logreport import LogReport
from lms_logreport.config.constants import OTHER_ORIGINS
from lms_logreport.config.settings import get_settings
from lms_logreport.exceptions import LogReportError
from lms_logreport.reporting import export_log_page
from lms_logreport.storage import StorageError

logger = logging.getLogger(__name__)


def parse_date(date_str: str) -> int:
    """Parse YYYY-MM-DD into the epoch of that day's midnight (UTC)."""
    try:
        day = datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str}. Use YYYY-MM-DD"
        )
    return int(day.timestamp())


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Export a filtered log report to CSV or Excel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file path; exports every matching event",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=["csv", "xlsx"],
        default=None,
        help="Export format (auto-detected from output extension if not specified)",
    )
    parser.add_argument(
        "--page",
        type=int,
        default=0,
        help="Page to print when no --output is given (zero-based)",
    )

    # Database options
    parser.add_argument("--db-path", type=Path, help="Path to SQLite database")
    parser.add_argument("--config", help="Path to YAML config file")

    # Filtering options
    parser.add_argument("--course", type=int, help="Course id")
    parser.add_argument("--group", type=int, help="Group id (needs --course)")
    parser.add_argument("--user", type=int, help="User id")
    parser.add_argument("--module", type=int, help="Course module id")
    parser.add_argument("--action", help="CRUD letters, e.g. 'r' or 'cud'")
    parser.add_argument(
        "--site-errors", action="store_true", help="Only site error events"
    )
    parser.add_argument("--date", type=parse_date, help="Day to show (YYYY-MM-DD)")
    parser.add_argument(
        "--edulevel", type=int, choices=[0, 1, 2], help="Education level"
    )
    parser.add_argument(
        "--origin",
        help=f"Event origin (cli, restore, ws, web, or '{OTHER_ORIGINS}' for others)",
    )
    parser.add_argument("--search", default="", help="Event name substring")
    parser.add_argument("--order-by", help="Ordering, e.g. 'timecreated DESC'")

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = get_settings(args.config)

    try:
        with LogReport.from_settings(settings, db_path=args.db_path) as report:
            filters = {
                "course_id": args.course,
                "group_id": args.group,
                "user_id": args.user,
                "module_id": args.module,
                "action": args.action,
                "site_errors": args.site_errors,
                "date": args.date,
                "edulevel": args.edulevel,
                "origin": args.origin,
                "search": args.search,
            }
            if args.order_by:
                filters["order_by"] = args.order_by
            options = report.filter_options(**filters)

            if args.output:
                page = report.build_and_fetch(
                    options, report.page_state(downloading=True)
                )
                exported = export_log_page(page, args.output, args.format)
                logger.info(
                    f"{exported} events, {len(page.referenced.user_ids)} users referenced"
                )
                return 0

            page = report.build_and_fetch(options, report.page_state(args.page))
            print(
                f"Page {page.current_page + 1} of {page.total_pages} "
                f"({page.total} events)"
            )
            for record in page.rows:
                when = datetime.fromtimestamp(record.timecreated, tz=timezone.utc)
                print(
                    f"{when:%Y-%m-%d %H:%M:%S}  user={record.userid:<6} "
                    f"course={record.courseid}  {record.eventname or record.action}"
                )
            return 0

    except (LogReportError, StorageError, ValueError) as e:
        logger.error(f"Log report failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
