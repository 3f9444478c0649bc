"""
File-to-file sync run: CSV inputs in, result CSV and report out.

Shared by the ``run`` command and the scheduled job.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from sync_utils.metrics import SyncMetrics
from sync_utils.tracing import trace_operation

from ..engine import Reconciler, SyncRunResult
from ..model.schema import SyncConfig
from ..store import SyncStore
from .csv_export import export_result_csv
from .csv_import import ImportStats, import_csv

logger = logging.getLogger(__name__)


@dataclass
class FileSyncResult:
    """Sync result plus the file-level statistics of a run."""

    result: SyncRunResult
    imports: list[ImportStats] = field(default_factory=list)
    exported_rows: int | None = None


def run_file_sync(
    config: SyncConfig,
    provided_path: str | Path,
    current_path: str | Path,
    database: str | Path = ":memory:",
    output_path: str | Path | None = None,
    metrics: SyncMetrics | None = None,
) -> FileSyncResult:
    """
    Load both CSV files, reconcile, and optionally export the result

    Args:
        config: Validated sync configuration
        provided_path: CSV file for the Provided table
        current_path: CSV file for the Current table
        database: SQLite file to keep the tables in (default: in memory)
        output_path: Result CSV destination, or None to skip the export
        metrics: Optional Prometheus metrics sink

    Returns:
        FileSyncResult

    Raises:
        ConfigurationError: If an input file or the configuration is unusable
        StorageError: If the store fails
    """
    with SyncStore(database) as store, trace_operation("file_sync", result_table=config.result.name):
        imports = [
            import_csv(store, config.provided, provided_path),
            import_csv(store, config.current, current_path),
        ]

        result = Reconciler(config, metrics=metrics).reconcile(store)

        exported = None
        if output_path is not None:
            exported = export_result_csv(store, config, output_path)

    return FileSyncResult(result=result, imports=imports, exported_rows=exported)
