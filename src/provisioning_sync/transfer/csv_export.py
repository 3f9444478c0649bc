"""
CSV export of the sync result table.
"""

import csv
import logging
from pathlib import Path

from ..model.schema import SYNC_ACTION_COLUMN, SyncConfig
from ..store import SyncStore

logger = logging.getLogger(__name__)


def export_result_csv(store: SyncStore, config: SyncConfig, path: str | Path) -> int:
    """
    Write the result table to a CSV file

    Columns follow the result mapping order, then ``sync_action``. Rows keep
    the order the classification passes wrote them in.

    Args:
        store: Store holding the rebuilt result table
        config: Sync configuration naming the result table
        path: Destination file; parent directories are created

    Returns:
        Number of data rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    columns = config.result_fields + [SYNC_ACTION_COLUMN]
    rows = store.read_rows(config.result.name, columns)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        for row in rows:
            writer.writerow({column: "" if row[column] is None else row[column] for column in columns})

    logger.info(f"Exported {len(rows)} row(s) of {config.result.name} to {path}")
    return len(rows)
