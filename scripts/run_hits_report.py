#!/usr/bin/env python3
"""
Print site hits chart data as JSON.

Usage:
    # All granularities
    python scripts/run_hits_report.py

    # One granularity
    python scripts/run_hits_report.py --duration daily

    # Save to file for plotting
    python scripts/run_hits_report.py --output data/reports/hits.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lms_logreport import LogReport
from lms_logreport.config.constants import HITS_GRANULARITIES
from lms_logreport.config.settings import get_settings
from lms_logreport.exceptions import LogReportError
from lms_logreport.storage import StorageError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Print site hits chart data")
    parser.add_argument(
        "--duration",
        choices=HITS_GRANULARITIES,
        help="Only this granularity (default: all)",
    )
    parser.add_argument("--db-path", type=Path, help="Path to SQLite database")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--output", "-o", type=Path, help="Write JSON to this file")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    settings = get_settings(args.config)

    try:
        with LogReport.from_settings(settings, db_path=args.db_path) as report:
            if args.duration:
                data = {args.duration: report.get_hits(args.duration)}
            else:
                data = report.generate_chart_data()
    except (LogReportError, StorageError, ValueError) as e:
        logger.error(f"Hits report failed: {e}")
        return 1

    payload = json.dumps(data, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload)
        logger.info(f"Wrote chart data to {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
