"""
CSV import into the sync store's input tables.

Only the columns declared for the table are read; other header columns are
ignored. Empty cells load as NULL.
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import ConfigurationError
from ..model.schema import TableSchema
from ..store import SyncStore

logger = logging.getLogger(__name__)


@dataclass
class ImportStats:
    """Counts for one CSV file read."""

    table: str
    path: str
    rows_read: int = 0
    rows_loaded: int = 0
    rows_skipped: int = 0
    conversion_warnings: int = 0
    skipped_lines: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "path": self.path,
            "rows_read": self.rows_read,
            "rows_loaded": self.rows_loaded,
            "rows_skipped": self.rows_skipped,
            "conversion_warnings": self.conversion_warnings,
        }


def _convert(value: str, column_name: str, is_integer: bool, line: int, stats: ImportStats) -> Any:
    if value == "":
        return None
    if not is_integer:
        return value
    try:
        return int(value.strip())
    except ValueError:
        stats.conversion_warnings += 1
        logger.warning(
            f"{stats.path}:{line}: value {value!r} of integer column '{column_name}' kept as text"
        )
        return value


def read_csv_rows(path: str | Path, table: TableSchema) -> tuple[list[dict[str, Any]], ImportStats]:
    """
    Read a CSV file into rows for ``table``

    Args:
        path: CSV file with a header row (UTF-8, BOM tolerated)
        table: Schema of the input table the rows are meant for

    Returns:
        (rows, stats); each row maps every declared column to its value

    Raises:
        ConfigurationError: If the file is missing or its header lacks a
            required column
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Input file not found: {path}", identifier=str(path))

    stats = ImportStats(table=table.name, path=str(path))
    rows = []

    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []

        missing = [name for name in table.required_columns if name not in header]
        if missing:
            raise ConfigurationError(
                f"{path} is missing required column(s) {missing} for table {table.name}",
                identifier=missing[0],
            )

        absent = [name for name in table.column_names if name not in header]
        if absent:
            logger.warning(f"{path} has no column(s) {absent}; they load as NULL")

        columns = [(column.name, column.is_integer, column.required) for column in table.columns]

        # Header is line 1
        for line, raw in enumerate(reader, start=2):
            stats.rows_read += 1

            empty_required = [
                name for name, _, required in columns
                if required and (raw.get(name) or "") == ""
            ]
            if empty_required:
                stats.rows_skipped += 1
                stats.skipped_lines.append(line)
                logger.warning(f"{path}:{line}: skipped, empty required column(s) {empty_required}")
                continue

            rows.append({
                name: _convert(raw.get(name) or "", name, is_integer, line, stats)
                for name, is_integer, _ in columns
            })

    stats.rows_loaded = len(rows)
    logger.info(
        f"Read {stats.rows_loaded} row(s) for {table.name} from {path}"
        + (f", skipped {stats.rows_skipped}" if stats.rows_skipped else "")
    )
    return rows, stats


def import_csv(store: SyncStore, table: TableSchema, path: str | Path) -> ImportStats:
    """Replace the contents of ``table`` in ``store`` with the rows of a CSV file."""
    rows, stats = read_csv_rows(path, table)
    store.load_table(table, rows)
    return stats
