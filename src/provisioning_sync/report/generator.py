"""
Report generation for sync runs.

Turns a ``SyncRunResult`` into a plain dictionary that the formatters render
and that can be written to and read back from JSON.
"""

from datetime import UTC, datetime
from typing import Any

from ..engine import PASS_ORDER, SyncRunResult
from ..model.schema import SyncAction


class ReportStatus:
    """Constants for report status values."""

    SUCCESS = "SUCCESS"
    DUPLICATES = "DUPLICATES"
    EMPTY = "EMPTY"


def format_timestamp(timestamp: datetime) -> str:
    """
    Format timestamp for reports

    Args:
        timestamp: DateTime object

    Returns:
        ISO 8601 formatted timestamp string
    """
    return timestamp.isoformat()


def generate_report(result: SyncRunResult) -> dict[str, Any]:
    """
    Generate a run report from a sync result

    Args:
        result: Outcome of ``Reconciler.reconcile``

    Returns:
        Dictionary containing:
        - status: SUCCESS, DUPLICATES, or EMPTY
        - result_table: Rebuilt table
        - actions: Rows per sync action (KEEP includes reintroduced rows)
        - reintroduced_keep: Excluded Current rows kept
        - total_rows: Rows in the result table
        - filters: Per-table filter statistics
        - duplicates: Duplicate result keys with their counts
        - summary: Human-readable summary
        - recommendations: List of recommended actions
        - started_at / duration_seconds / timestamp
    """
    actions = {action.value: result.count(action) for action in PASS_ORDER}
    filters = [stats.to_dict() for stats in result.filter_stats]
    duplicates = [duplicate.to_dict() for duplicate in result.duplicates]

    if duplicates:
        status = ReportStatus.DUPLICATES
    elif result.total_rows == 0:
        status = ReportStatus.EMPTY
    else:
        status = ReportStatus.SUCCESS

    return {
        "status": status,
        "result_table": result.result_table,
        "actions": actions,
        "reintroduced_keep": result.reintroduced_keep,
        "total_rows": result.total_rows,
        "filters": filters,
        "duplicates": duplicates,
        "summary": _generate_summary(result.result_table, actions, len(duplicates)),
        "recommendations": _generate_recommendations(actions, filters, duplicates),
        "started_at": format_timestamp(result.started_at),
        "duration_seconds": round(result.duration_seconds, 3),
        "timestamp": format_timestamp(datetime.now(UTC)),
    }


def _generate_summary(result_table: str, actions: dict[str, int], duplicate_count: int) -> str:
    """
    Generate human-readable summary

    Args:
        result_table: Rebuilt table
        actions: Rows per sync action
        duplicate_count: Number of duplicate key groups

    Returns:
        Summary string
    """
    total = sum(actions.values())
    if total == 0:
        return f"{result_table} is empty: neither input table contributed any rows."

    counts = ", ".join(f"{count} {action}" for action, count in actions.items())
    if duplicate_count == 0:
        return f"{result_table} rebuilt with {total} rows ({counts}). All result keys are unique."
    return (
        f"{result_table} rebuilt with {total} rows ({counts}), but {duplicate_count} "
        f"result key(s) occur more than once."
    )


def _generate_recommendations(
    actions: dict[str, int],
    filters: list[dict[str, Any]],
    duplicates: list[dict[str, Any]],
) -> list[str]:
    """
    Generate actionable recommendations for the run

    Args:
        actions: Rows per sync action
        filters: Per-table filter statistics
        duplicates: Duplicate key records

    Returns:
        List of recommendation strings
    """
    recommendations = []

    if duplicates:
        recommendations.append(
            f"{len(duplicates)} result key(s) are duplicated. Check the Provided and "
            "Current key columns for repeated values before provisioning."
        )

    total = sum(actions.values())
    deletes = actions.get(SyncAction.DELETE.value, 0)
    if total and deletes / total > 0.5:
        recommendations.append(
            f"{deletes} of {total} records are classified DELETE. Verify the Provided "
            "file is complete before applying deletions."
        )

    for stats in filters:
        if stats["total"] and stats["passed"] == 0:
            recommendations.append(
                f"The data filter on {stats['table']} excluded every row. "
                "Review its include/exclude patterns."
            )

    if not recommendations:
        recommendations.append("No issues detected. The result can be provisioned.")

    return recommendations
