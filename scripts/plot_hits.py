#!/usr/bin/env python3
"""
Plot site hits chart data as bar charts.

Reads the JSON written by run_hits_report.py, or queries the database
directly when no input file is given.

Usage:
    python scripts/plot_hits.py --output data/reports/hits.png
    python scripts/plot_hits.py --input data/reports/hits.json --output hits.png
"""

import argparse
import json
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lms_logreport import LogReport
from lms_logreport.config.settings import get_settings

TITLES = {
    "hourly": "Unique users per hour (last 24 hours)",
    "daily": "Unique users per day (last 30 days)",
    "monthly": "Unique users per month (last 12 months)",
}


def load_chart_data(input_path: Path) -> dict:
    """Load chart data from JSON file."""
    with open(input_path) as f:
        return json.load(f)


def create_hits_plot(chart_data: dict, output_path: Path) -> None:
    """Create one bar chart per granularity."""
    fig, axes = plt.subplots(len(chart_data), 1, figsize=(14, 4 * len(chart_data)))
    if len(chart_data) == 1:
        axes = [axes]
    fig.suptitle("Site Hits", fontsize=14, fontweight="bold")

    for ax, (granularity, hits) in zip(axes, chart_data.items()):
        labels = list(hits.keys())
        counts = list(hits.values())
        ax.bar(range(len(labels)), counts, color="steelblue", edgecolor="black")
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, rotation=45, ha="right", fontsize=8)
        ax.set_ylabel("Unique users", fontsize=11)
        ax.set_title(TITLES.get(granularity, granularity), fontsize=12)
        if not labels:
            ax.text(0.5, 0.5, "No activity", ha="center", transform=ax.transAxes)

    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved plot to {output_path}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Plot site hits chart data")
    parser.add_argument("--input", "-i", type=Path, help="Chart data JSON file")
    parser.add_argument("--db-path", type=Path, help="Path to SQLite database")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument(
        "--output", "-o", type=Path, default=Path("data/reports/hits.png")
    )
    args = parser.parse_args()

    if args.input:
        chart_data = load_chart_data(args.input)
    else:
        settings = get_settings(args.config)
        with LogReport.from_settings(settings, db_path=args.db_path) as report:
            chart_data = report.generate_chart_data()

    create_hits_plot(chart_data, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
