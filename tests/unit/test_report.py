"""
Unit tests for report generation and formatting
"""

import csv
import json
from datetime import UTC, datetime

import pytest

from provisioning_sync.engine import DuplicateKey, FilterStats, SyncRunResult
from provisioning_sync.model import SyncAction
from provisioning_sync.report import (
    ReportStatus,
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_report,
    load_report_json,
)


def make_result(add=1, update=1, delete=1, keep=1, reintroduced=0, duplicates=(), filter_stats=()):
    return SyncRunResult(
        result_table="sync_result",
        action_counts={
            SyncAction.ADD: add,
            SyncAction.UPDATE: update,
            SyncAction.DELETE: delete,
            SyncAction.KEEP: keep,
        },
        reintroduced_keep=reintroduced,
        filter_stats=list(filter_stats),
        duplicates=list(duplicates),
        duration_seconds=1.23456,
        started_at=datetime(2026, 1, 15, 9, 30, tzinfo=UTC),
    )


class TestGenerateReport:
    """Test generate_report function"""

    def test_success_report(self):
        report = generate_report(make_result())

        assert report["status"] == ReportStatus.SUCCESS
        assert report["actions"] == {"ADD": 1, "UPDATE": 1, "DELETE": 1, "KEEP": 1}
        assert report["total_rows"] == 4
        assert report["duration_seconds"] == 1.235
        assert report["started_at"] == "2026-01-15T09:30:00+00:00"
        assert "All result keys are unique" in report["summary"]
        assert report["recommendations"] == ["No issues detected. The result can be provisioned."]

    def test_keep_includes_reintroduced(self):
        report = generate_report(make_result(keep=2, reintroduced=3))

        assert report["actions"]["KEEP"] == 5
        assert report["reintroduced_keep"] == 3
        assert report["total_rows"] == 8

    def test_duplicates_report(self):
        duplicate = DuplicateKey(key={"employee_id": "E004"}, count=2)

        report = generate_report(make_result(duplicates=[duplicate]))

        assert report["status"] == ReportStatus.DUPLICATES
        assert report["duplicates"] == [{"key": {"employee_id": "E004"}, "count": 2}]
        assert "occur more than once" in report["summary"]
        assert any("duplicated" in rec for rec in report["recommendations"])

    def test_empty_report(self):
        report = generate_report(make_result(0, 0, 0, 0))

        assert report["status"] == ReportStatus.EMPTY
        assert "is empty" in report["summary"]

    def test_mostly_deletes_recommendation(self):
        report = generate_report(make_result(add=0, update=0, delete=9, keep=1))

        assert any("classified DELETE" in rec for rec in report["recommendations"])

    def test_filter_excluding_everything_recommendation(self):
        stats = FilterStats(table="staff_master", total=4, passed=0, excluded=4)

        report = generate_report(make_result(filter_stats=[stats]))

        assert report["filters"][0]["exclusion_rate"] == 100.0
        assert any("excluded every row" in rec for rec in report["recommendations"])


class TestFormatters:
    """Test report exporters"""

    @pytest.fixture
    def report(self):
        return generate_report(make_result(
            keep=2,
            reintroduced=1,
            duplicates=[DuplicateKey(key={"employee_id": "E004"}, count=2)],
            filter_stats=[FilterStats(table="staff_master", total=4, passed=3, excluded=1)],
        ))

    def test_json_round_trip(self, tmp_path, report):
        path = tmp_path / "report.json"

        export_report_json(report, str(path))

        assert load_report_json(path) == json.loads(json.dumps(report))

    def test_csv_rows(self, tmp_path, report):
        path = tmp_path / "report.csv"

        export_report_csv(report, str(path))

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[0] == ["Result Table", "Section", "Item", "Count", "Detail"]
        assert ["sync_result", "action", "KEEP", "3", ""] in rows
        assert ["sync_result", "filter", "staff_master", "1", "25.0% of 4"] in rows
        assert ["sync_result", "duplicate", "employee_id=E004", "2", ""] in rows

    def test_console_sections(self, report):
        output = format_report_console(report)

        assert "PROVISIONING SYNC REPORT" in output
        assert "Status: DUPLICATES" in output
        assert "KEEP includes 1 filtered Current rows" in output
        assert "staff_master: 3 passed, 1 excluded (25.0%)" in output
        assert "DUPLICATE KEYS" in output
        assert "RECOMMENDATIONS" in output

    def test_console_without_duplicates(self):
        output = format_report_console(generate_report(make_result()))

        assert "DUPLICATE KEYS" not in output
        assert "Duration: 1.24s" in output
