"""
Integration tests for exporting log pages and chart data.
"""

import pandas as pd
import pytest

from lms_logreport.logstore import LOG_RECORD_FIELDS
from lms_logreport.reporting import (
    PageState,
    chart_data_to_dataframe,
    export_log_page,
    records_to_dataframe,
)
from lms_logreport.reporting.export import resolve_format


class TestExportLogPage:
    def test_csv_export(self, standard_report, tmp_path):
        options = standard_report.filter_options(course_id=5)
        page = standard_report.build_and_fetch(options, PageState(downloading=True))
        output_path = tmp_path / "reports" / "logs.csv"

        written = export_log_page(page, output_path)

        assert written == 6
        df = pd.read_csv(output_path)
        assert list(df.columns) == LOG_RECORD_FIELDS
        assert sorted(df["id"]) == [1, 2, 3, 6, 8, 9]
        assert page.referenced.user_ids == {7, 8, 10}

    def test_xlsx_export(self, standard_report, tmp_path):
        options = standard_report.filter_options(module_id=3)
        page = standard_report.build_and_fetch(options, PageState())
        output_path = tmp_path / "logs.xlsx"

        written = export_log_page(page, output_path)

        assert written == 3
        df = pd.read_excel(output_path, sheet_name="Logs")
        assert sorted(df["id"]) == [1, 2, 6]

    def test_empty_export_keeps_header(self, standard_report, tmp_path):
        options = standard_report.filter_options(course_id=5, group_id=11)
        page = standard_report.build_and_fetch(options, PageState(downloading=True))
        output_path = tmp_path / "empty.csv"

        assert export_log_page(page, output_path) == 0
        assert list(pd.read_csv(output_path).columns) == LOG_RECORD_FIELDS


class TestDataFrames:
    def test_records_to_dataframe_empty(self):
        df = records_to_dataframe([])
        assert df.empty
        assert list(df.columns) == LOG_RECORD_FIELDS

    def test_chart_data_to_dataframe(self):
        df = chart_data_to_dataframe(
            {"hourly": {"02 PM": 1, "03 PM": 2}, "daily": {}, "monthly": {"Jan 2024": 4}}
        )

        assert list(df.columns) == ["granularity", "label", "users"]
        assert df.to_dict("records") == [
            {"granularity": "hourly", "label": "02 PM", "users": 1},
            {"granularity": "hourly", "label": "03 PM", "users": 2},
            {"granularity": "monthly", "label": "Jan 2024", "users": 4},
        ]


class TestResolveFormat:
    def test_from_extension(self, tmp_path):
        assert resolve_format(tmp_path / "a.XLSX") == "xlsx"

    def test_explicit_format_wins(self, tmp_path):
        assert resolve_format(tmp_path / "a.txt", "csv") == "csv"

    def test_unsupported(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported export format"):
            resolve_format(tmp_path / "a.json")
