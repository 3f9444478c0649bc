"""
SQLite-backed scratch store for sync runs.

The store holds the two input tables, the result table and the run's
temporary staging tables. It is disposable: every run truncates and rebuilds
the result. Statements go through ``_execute``, which retries transient lock
errors and converts driver errors into ``StorageError``.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from opentelemetry import trace

from sync_utils.retry import retry_database_operation
from sync_utils.tracing import trace_operation

from ..errors import StorageError
from ..model.schema import ColumnDef, TableSchema
from . import query
from .query import Fragment

logger = logging.getLogger(__name__)


@retry_database_operation(max_retries=3, base_delay=0.2)
def _execute(connection: sqlite3.Connection, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
    return connection.execute(sql, params)


@retry_database_operation(max_retries=3, base_delay=0.2)
def _executemany(connection: sqlite3.Connection, sql: str, rows: Sequence[Sequence[Any]]) -> sqlite3.Cursor:
    return connection.executemany(sql, rows)


class SyncStore:
    """Connection wrapper for the embedded sync database."""

    def __init__(
        self,
        path: str | Path = ":memory:",
        timeout: float = 5.0,
        connection: sqlite3.Connection | None = None,
    ):
        """
        Open (or adopt) a SQLite connection.

        Args:
            path: Database file, or ":memory:" for a private in-memory store
            timeout: Seconds SQLite waits on a locked database before failing
            connection: Existing connection to use instead of opening one;
                it must be in autocommit mode (``isolation_level=None``)
        """
        self.path = str(path)
        if connection is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.path, timeout=timeout, isolation_level=None)
        self.connection = connection
        logger.debug(f"Opened sync store: {self.path}")

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "SyncStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Statement execution

    def execute(self, sql: str | Fragment, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """
        Execute one statement.

        Raises:
            StorageError: If SQLite fails (after retries for transient errors)
        """
        if isinstance(sql, Fragment):
            sql, params = sql.sql, sql.params
        try:
            return _execute(self.connection, sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"Store statement failed: {e}", statement=sql) from e

    def executemany(self, sql: str, rows: Sequence[Sequence[Any]]) -> int:
        try:
            cursor = _executemany(self.connection, sql, rows)
        except sqlite3.Error as e:
            raise StorageError(f"Store statement failed: {e}", statement=sql) from e
        return cursor.rowcount

    def fetch_all(self, sql: str | Fragment, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        cursor = self.execute(sql, params)
        columns = [description[0] for description in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    @contextmanager
    def transaction(self) -> Iterator["SyncStore"]:
        """
        Run the block in one transaction; roll back if it raises.

        Nested use joins the outer transaction.
        """
        if self.connection.in_transaction:
            yield self
            return

        self.execute("BEGIN IMMEDIATE")
        try:
            yield self
        except BaseException:
            self.connection.rollback()
            logger.warning(f"Transaction rolled back: {self.path}")
            raise
        else:
            self.execute("COMMIT")

    # Table helpers

    def table_exists(self, table_name: str) -> bool:
        rows = self.fetch_all(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ? "
            "UNION ALL SELECT name FROM sqlite_temp_master WHERE type = 'table' AND name = ?",
            (table_name, table_name),
        )
        return bool(rows)

    def table_columns(self, table_name: str) -> list[str]:
        return [row["name"] for row in self.fetch_all(query.table_info(table_name))]

    def create_table(
        self,
        table: TableSchema | str,
        columns: Sequence[ColumnDef] | None = None,
        extra_columns: Sequence[tuple[str, str]] = (),
        temporary: bool = False,
        replace: bool = False,
    ) -> None:
        """
        Create a table from a schema (or a name plus column definitions).

        Args:
            table: Table schema, or a table name when ``columns`` is given
            columns: Column definitions overriding the schema's
            extra_columns: Additional (name, SQL type) pairs
            temporary: Create a connection-local TEMP table
            replace: Drop any existing table of that name first
        """
        name = table if isinstance(table, str) else table.name
        if columns is None:
            columns = table.columns
        if replace:
            self.execute(query.drop_table(name))
        self.execute(query.create_table(name, columns, extra_columns, temporary=temporary))

    def insert_rows(self, table_name: str, columns: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert mapping rows; missing keys are stored as NULL."""
        values = [tuple(row.get(column) for column in columns) for row in rows]
        if not values:
            return 0
        with trace_operation("store.insert_rows", kind=trace.SpanKind.CLIENT, table=table_name):
            self.executemany(query.insert_values(table_name, columns), values)
        return len(values)

    def read_rows(self, table_name: str, columns: Sequence[str]) -> list[dict[str, Any]]:
        with trace_operation("store.read_rows", kind=trace.SpanKind.CLIENT, table=table_name):
            return self.fetch_all(query.select_columns(table_name, columns))

    def truncate(self, table_name: str) -> None:
        self.execute(query.delete_all(table_name))

    def count_rows(self, table_name: str) -> int:
        return int(self.execute(query.count_rows(table_name)).fetchone()[0])

    def load_table(self, table: TableSchema, rows: Iterable[Mapping[str, Any]]) -> int:
        """
        Replace the contents of an input table with ``rows``.

        The table is recreated from the schema so column changes in the
        configuration take effect on the next load.
        """
        with self.transaction():
            self.create_table(table, replace=True)
            inserted = self.insert_rows(table.name, table.column_names, rows)
        logger.info(f"Loaded {inserted} row(s) into {table.name}")
        return inserted
