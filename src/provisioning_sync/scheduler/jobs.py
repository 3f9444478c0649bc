"""
Job function for scheduled sync runs.

Each run reloads the configuration, so edits take effect on the next run,
and writes a timestamped result CSV and JSON report to the output directory.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from sync_utils.metrics import SyncMetrics

from ..model import load_config
from ..report import export_report_json, generate_report
from ..transfer import run_file_sync

logger = logging.getLogger(__name__)


def sync_job(
    config_path: str,
    provided_path: str,
    current_path: str,
    output_dir: str,
    database: str = ":memory:",
    metrics: SyncMetrics | None = None,
    metrics_file: str | None = None,
) -> None:
    """
    Run one scheduled sync

    Failures are logged and do not stop the scheduler; the next trigger
    retries with fresh input files.

    Args:
        config_path: Sync configuration file
        provided_path: Provided CSV file
        current_path: Current CSV file
        output_dir: Directory receiving the result CSV and JSON report
        database: SQLite file for the store (default: in memory)
        metrics: Metrics sink shared across runs
        metrics_file: Textfile-collector file refreshed after every run
    """
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)

    logger.info(f"Starting scheduled sync at {timestamp}")

    try:
        config = load_config(config_path)
        result_path = output / f"{config.result.name}_{timestamp}.csv"

        file_sync = run_file_sync(
            config,
            provided_path,
            current_path,
            database=database,
            output_path=result_path,
            metrics=metrics,
        )

        report = generate_report(file_sync.result)
        report["imports"] = [stats.to_dict() for stats in file_sync.imports]
        report_path = output / f"sync_report_{timestamp}.json"
        export_report_json(report, str(report_path))

        logger.info(f"Sync complete. Result saved to {result_path}, report saved to {report_path}")
        logger.info(f"Status: {report['status']}")

    except Exception as e:
        logger.error(f"Scheduled sync failed: {e}", exc_info=True)

    finally:
        if metrics is not None and metrics_file:
            metrics.write_textfile(metrics_file)
