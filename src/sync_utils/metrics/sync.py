"""
Metrics for provisioning sync runs.

Tracks runs, classified records, filter exclusions and duplicate keys so a
batch job can be alerted on like any long-running service.
"""

import logging
import time
from typing import Mapping, Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

logger = logging.getLogger(__name__)


class SyncMetrics:
    """
    Prometheus metrics for reconciliation runs

    Each instance registers its collectors in ``registry``; pass a fresh
    ``CollectorRegistry`` when more than one instance lives in a process.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize sync metrics

        Args:
            registry: Custom Prometheus registry (default: global REGISTRY)
        """
        self.registry = registry if registry is not None else REGISTRY

        self.sync_runs_total = Counter(
            "provisioning_sync_runs_total",
            "Total number of sync runs",
            ["result_table", "status"],
            registry=self.registry,
        )

        self.sync_duration_seconds = Histogram(
            "provisioning_sync_duration_seconds",
            "Duration of sync runs in seconds",
            ["result_table"],
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 900),
            registry=self.registry,
        )

        self.sync_last_run_timestamp = Gauge(
            "provisioning_sync_last_run_timestamp",
            "Timestamp of last sync run",
            ["result_table"],
            registry=self.registry,
        )

        self.records_classified = Gauge(
            "provisioning_sync_records",
            "Records written by the last run, per sync action",
            ["result_table", "action"],
            registry=self.registry,
        )

        self.rows_filtered_total = Counter(
            "provisioning_sync_rows_filtered_total",
            "Rows removed by data filters",
            ["table_name"],
            registry=self.registry,
        )

        self.duplicate_keys = Gauge(
            "provisioning_sync_duplicate_keys",
            "Duplicate result keys detected by the last run",
            ["result_table"],
            registry=self.registry,
        )

    def record_run(
        self,
        result_table: str,
        success: bool,
        duration: float,
        action_counts: Optional[Mapping[str, int]] = None,
    ) -> None:
        """
        Record a completed (or failed) sync run

        Args:
            result_table: Name of the result table rebuilt by the run
            success: Whether the run finished without violations
            duration: Duration in seconds
            action_counts: Rows written per action name
        """
        status = "success" if success else "failed"

        self.sync_runs_total.labels(result_table=result_table, status=status).inc()
        self.sync_duration_seconds.labels(result_table=result_table).observe(duration)
        self.sync_last_run_timestamp.labels(result_table=result_table).set(time.time())

        for action, count in (action_counts or {}).items():
            self.records_classified.labels(result_table=result_table, action=action).set(count)

        logger.debug(
            f"Recorded sync run: table={result_table}, status={status}, "
            f"duration={duration:.2f}s"
        )

    def record_filtered(self, table_name: str, excluded: int) -> None:
        """Count rows excluded by a table's data filter."""
        if excluded:
            self.rows_filtered_total.labels(table_name=table_name).inc(excluded)

    def record_duplicates(self, result_table: str, duplicate_count: int) -> None:
        """Set the number of duplicate key groups found by the consistency check."""
        self.duplicate_keys.labels(result_table=result_table).set(duplicate_count)

        if duplicate_count:
            logger.warning(
                f"Duplicate result keys detected: table={result_table}, "
                f"groups={duplicate_count}"
            )

    def write_textfile(self, path: str) -> None:
        """
        Write the registry in the node-exporter textfile-collector format

        Args:
            path: Destination ``.prom`` file
        """
        write_to_textfile(path, self.registry)
        logger.info(f"Metrics written to {path}")
