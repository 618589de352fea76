"""Tests for the CSV export summary script."""

import importlib.util
import json
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "summarize_export.py"

CSV_HEADER = "id,report_type,title,description,address,latitude,longitude,created_at,process_start,process_end,user_id"
CSV_ROWS = [
    "a1,theft,Phone stolen,,Av. Arequipa 100,-12.08,-77.03,2024-01-01T08:00:00,,,u1",
    "a2,theft,Bike stolen,,Jr. Cusco 20,-12.05,-77.04,2024-01-03T09:00:00,2024-01-03T10:00:00,2024-01-03T13:00:00,u2",
    "a3,robbery,Mugging,,,,,2024-01-02T12:00:00,2024-01-02T13:00:00,,u1",
    "a4,theft,Wallet,,,,,2024-02-10T10:00:00,,,u3",
]


@pytest.fixture
def summarize_export():
    """Load the script as a module."""
    spec = importlib.util.spec_from_file_location("summarize_export", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def export_csv(tmp_path) -> Path:
    """A small export of the reports table."""
    path = tmp_path / "reports_rows.csv"
    path.write_text("\n".join([CSV_HEADER, *CSV_ROWS]) + "\n", encoding="utf-8")
    return path


class TestSummarizeExport:
    """Tests for summarize_export.main."""

    def test_summary_without_filters(self, summarize_export, export_csv, capsys):
        """Test every exported report is summarized."""
        assert summarize_export.main([str(export_csv)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["filters"] == {"report_type": "all", "date_from": None, "date_to": None}
        assert data["summary"]["total_reports"] == 4
        assert data["summary"]["table_counts"]["reports"] == 4
        assert data["summary"]["status"] == {"pending": 2, "in_progress": 1, "resolved": 1}
        assert data["summary"]["average_resolution_hours"] == 3.0
        assert data["report_types"] == ["robbery", "theft"]
        assert data["charts"]["by_type"] == [
            {"type": "theft", "count": 3},
            {"type": "robbery", "count": 1},
        ]

    def test_summary_with_filters(self, summarize_export, export_csv, capsys):
        """Test type and date range options narrow the metrics only."""
        exit_code = summarize_export.main(
            [str(export_csv), "--type", "theft", "--from", "2024-01-02", "--to", "2024-01-31"]
        )

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["filters"] == {
            "report_type": "theft",
            "date_from": "2024-01-02",
            "date_to": "2024-01-31",
        }
        assert data["summary"]["total_reports"] == 1
        assert data["summary"]["table_counts"]["reports"] == 4
        assert data["summary"]["status"] == {"pending": 0, "in_progress": 0, "resolved": 1}
        assert data["charts"]["by_date"] == [{"date": "2024-01-03", "count": 1}]
        assert data["report_types"] == ["robbery", "theft"]

    def test_missing_file(self, summarize_export, tmp_path, capsys):
        """Test a missing export exits with an error."""
        assert summarize_export.main([str(tmp_path / "missing.csv")]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "File not found" in captured.err

    def test_invalid_date_option(self, summarize_export, export_csv):
        """Test malformed dates are rejected by the argument parser."""
        with pytest.raises(SystemExit):
            summarize_export.main([str(export_csv), "--from", "01/02/2024"])
