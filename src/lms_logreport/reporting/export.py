"""
Export log report results to CSV or Excel.

Log pages become one DataFrame row per event; chart data becomes a
long frame of (granularity, label, users).
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..logstore import LOG_RECORD_FIELDS, LogRecord
from .log_table import LogPage

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "xlsx")

CHART_COLUMNS = ["granularity", "label", "users"]


def records_to_dataframe(records: Iterable[LogRecord]) -> pd.DataFrame:
    """Build a DataFrame with one column per LogRecord field."""
    rows = [record.to_dict() for record in records]
    if not rows:
        return pd.DataFrame(columns=LOG_RECORD_FIELDS)
    return pd.DataFrame(rows, columns=LOG_RECORD_FIELDS)


def chart_data_to_dataframe(chart_data: dict[str, dict[str, int]]) -> pd.DataFrame:
    """Flatten chart data into (granularity, label, users) rows."""
    rows = [
        {"granularity": granularity, "label": label, "users": users}
        for granularity, hits in chart_data.items()
        for label, users in hits.items()
    ]
    return pd.DataFrame(rows, columns=CHART_COLUMNS)


def resolve_format(output_path: Path, fmt: Optional[str] = None) -> str:
    """
    Pick the export format from an explicit value or the file extension.

    Raises:
        ValueError: If the format is not supported
    """
    fmt = (fmt or output_path.suffix.lstrip(".") or "csv").lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format: '{fmt}'. "
            f"Must be one of: {', '.join(EXPORT_FORMATS)}"
        )
    return fmt


def export_log_page(
    page: LogPage,
    output_path: Path,
    fmt: Optional[str] = None,
) -> int:
    """
    Write the rows of a log page to a file.

    Consumes the page's rows; for an export stream this also fills
    ``page.referenced``.

    Returns:
        Number of events written
    """
    fmt = resolve_format(output_path, fmt)
    df = records_to_dataframe(page.rows)

    # Ensure output directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        df.to_csv(output_path, index=False)
    else:
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Logs", index=False)

            # Auto-fit based on header length with minimum
            worksheet = writer.sheets["Logs"]
            for column_cells in worksheet.columns:
                col_letter = column_cells[0].column_letter
                header = column_cells[0].value
                worksheet.column_dimensions[col_letter].width = max(
                    len(str(header)) + 2, 12
                )

    logger.info(f"Exported {len(df)} events to {output_path}")
    return len(df)
