"""
Renderers for sync run reports: JSON (also read back by ``report``), a flat
CSV for spreadsheets, and console text.
"""

import csv
import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

CSV_HEADER = ["Result Table", "Section", "Item", "Count", "Detail"]


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, default=str)


def load_report_json(input_path: str | Path) -> dict[str, Any]:
    """Read a report previously written by ``export_report_json``."""
    with open(input_path, encoding='utf-8') as f:
        return json.load(f)


def _csv_rows(report: dict[str, Any]) -> Iterator[list[Any]]:
    table = report.get("result_table", "")

    for action, count in report.get("actions", {}).items():
        yield [table, "action", action, count, ""]

    for stats in report.get("filters", []):
        detail = f"{stats.get('exclusion_rate', 0.0)}% of {stats.get('total', 0)}"
        yield [table, "filter", stats.get("table", ""), stats.get("excluded", 0), detail]

    for duplicate in report.get("duplicates", []):
        key = ", ".join(f"{column}={value}" for column, value in duplicate.get("key", {}).items())
        yield [table, "duplicate", key, duplicate.get("count", 0), ""]


def export_report_csv(report: dict[str, Any], output_path: str) -> None:
    """
    Write a report as CSV: one row per action, per filter, then per
    duplicate key, all under the same five-column header.
    """
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(_csv_rows(report))


RULE_WIDTH = 80


def _section(title: str, body: list[str]) -> list[str]:
    return [title, "-" * RULE_WIDTH, *body, ""]


def _action_lines(report: dict[str, Any]) -> list[str]:
    body = [f"  {action:<8} {count:>10,}" for action, count in report["actions"].items()]
    if report.get("reintroduced_keep"):
        body.append(f"  (KEEP includes {report['reintroduced_keep']:,} filtered Current rows)")
    return body


def _filter_lines(report: dict[str, Any]) -> list[str]:
    return [
        f"  {stats['table']}: {stats['passed']:,} passed, {stats['excluded']:,} excluded "
        f"({stats['exclusion_rate']}%)"
        for stats in report["filters"]
    ]


def format_report_console(report: dict[str, Any]) -> str:
    """
    Render a report as plain text for the terminal

    Filter, duplicate and recommendation sections appear only when the
    report has entries for them.
    """
    lines = [
        "=" * RULE_WIDTH,
        "PROVISIONING SYNC REPORT",
        "=" * RULE_WIDTH,
        f"Status: {report['status']}",
        f"Result Table: {report['result_table']}",
        f"Started: {report.get('started_at', '')}",
        f"Duration: {report.get('duration_seconds', 0.0):.2f}s",
        f"Total Rows: {report['total_rows']:,}",
        "",
    ]
    lines += _section("ACTIONS", _action_lines(report))
    if report.get("filters"):
        lines += _section("FILTERS", _filter_lines(report))
    lines += _section("SUMMARY", [report["summary"]])
    if report["duplicates"]:
        lines += _section(
            "DUPLICATE KEYS",
            [f"  {duplicate['key']}: {duplicate['count']} rows" for duplicate in report["duplicates"]],
        )
    if report["recommendations"]:
        lines += _section(
            "RECOMMENDATIONS",
            [f"{number}. {text}" for number, text in enumerate(report["recommendations"], 1)],
        )
    lines.append("=" * RULE_WIDTH)
    return "\n".join(lines)
