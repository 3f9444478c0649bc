"""
SQL builder for the sync store.

This is the only module that produces SQL text. Identifiers come from the
configuration and are validated and quoted through ``sync_utils.sql_safety``;
values are always bound as ``?`` parameters and travel alongside the text in
a ``Fragment``.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sync_utils.sql_safety import quote_identifier, quote_qualified

from ..model.schema import ColumnDef


@dataclass(frozen=True)
class Fragment:
    """A piece of SQL text with its bound parameters, in order."""

    sql: str
    params: tuple[Any, ...] = ()

    def __add__(self, other: "Fragment") -> "Fragment":
        return Fragment(self.sql + other.sql, self.params + other.params)

    @classmethod
    def join(cls, fragments: Iterable["Fragment"], separator: str) -> "Fragment":
        fragments = list(fragments)
        return cls(
            separator.join(fragment.sql for fragment in fragments),
            tuple(param for fragment in fragments for param in fragment.params),
        )


def column_list(columns: Sequence[str]) -> str:
    return ", ".join(quote_identifier(column) for column in columns)


def create_table(
    table_name: str,
    columns: Sequence[ColumnDef],
    extra_columns: Sequence[tuple[str, str]] = (),
    temporary: bool = False,
) -> str:
    definitions = [f"{quote_identifier(column.name)} {column.sql_type}" for column in columns]
    # An empty type declares the column without affinity
    definitions += [f"{quote_identifier(name)} {sql_type}".rstrip() for name, sql_type in extra_columns]
    kind = "TEMP TABLE" if temporary else "TABLE"
    return f"CREATE {kind} IF NOT EXISTS {quote_identifier(table_name)} ({', '.join(definitions)})"


def drop_table(table_name: str) -> str:
    return f"DROP TABLE IF EXISTS {quote_identifier(table_name)}"


def delete_all(table_name: str) -> str:
    return f"DELETE FROM {quote_identifier(table_name)}"


def insert_values(table_name: str, columns: Sequence[str]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    return (
        f"INSERT INTO {quote_identifier(table_name)} ({column_list(columns)}) "
        f"VALUES ({placeholders})"
    )


def select_columns(table_name: str, columns: Sequence[str]) -> str:
    # rowid keeps reads in insertion order
    return f"SELECT {column_list(columns)} FROM {quote_identifier(table_name)} ORDER BY rowid"


def count_rows(table_name: str) -> str:
    return f"SELECT COUNT(*) FROM {quote_identifier(table_name)}"


def table_info(table_name: str) -> str:
    return f"PRAGMA table_info({quote_identifier(table_name)})"


def equi_join(pairs: Sequence[tuple[str, str]], left_alias: str, right_alias: str) -> Fragment:
    """``l.a = r.b AND ...`` over key pairs; NULL keys never match."""
    return Fragment(" AND ".join(
        f"{quote_qualified(left_alias, left)} = {quote_qualified(right_alias, right)}"
        for left, right in pairs
    ))


def null_safe_same(pairs: Sequence[tuple[str, str]], left_alias: str, right_alias: str) -> Fragment:
    """True when every pair is equal, NULL being equal to NULL."""
    if not pairs:
        return Fragment("1")
    return Fragment("(" + " AND ".join(
        f"{quote_qualified(left_alias, left)} IS {quote_qualified(right_alias, right)}"
        for left, right in pairs
    ) + ")")


def null_safe_different(pairs: Sequence[tuple[str, str]], left_alias: str, right_alias: str) -> Fragment:
    """True when any pair differs, NULL being distinct from every non-NULL value."""
    if not pairs:
        return Fragment("0")
    return Fragment("(" + " OR ".join(
        f"{quote_qualified(left_alias, left)} IS NOT {quote_qualified(right_alias, right)}"
        for left, right in pairs
    ) + ")")


def non_empty(alias: str, column: str) -> Fragment:
    """Column value with the empty string folded into NULL."""
    return Fragment(f"NULLIF({quote_qualified(alias, column)}, '')")


def literal(value: Any) -> Fragment:
    return Fragment("?", (value,))


def coalesce(candidates: Sequence[Fragment]) -> Fragment:
    if not candidates:
        return Fragment("NULL")
    if len(candidates) == 1:
        return candidates[0]
    return Fragment("COALESCE(") + Fragment.join(candidates, ", ") + Fragment(")")


def insert_select(
    table_name: str,
    columns: Sequence[str],
    expressions: Sequence[Fragment],
    from_clause: Fragment,
    where: Fragment | None = None,
    order_by: str | None = None,
) -> Fragment:
    """``INSERT INTO t (cols) SELECT exprs FROM ... [WHERE ...] [ORDER BY ...]``."""
    statement = (
        Fragment(f"INSERT INTO {quote_identifier(table_name)} ({column_list(columns)}) SELECT ")
        + Fragment.join(expressions, ", ")
        + Fragment(" FROM ")
        + from_clause
    )
    if where is not None:
        statement = statement + Fragment(" WHERE ") + where
    if order_by:
        statement = statement + Fragment(f" ORDER BY {order_by}")
    return statement


def table_ref(table_name: str, alias: str) -> str:
    return f"{quote_identifier(table_name)} AS {quote_identifier(alias)}"


def left_join(left_table: str, left_alias: str, right_table: str, right_alias: str, on: Fragment) -> Fragment:
    return (
        Fragment(f"{table_ref(left_table, left_alias)} LEFT JOIN {table_ref(right_table, right_alias)} ON ")
        + on
    )


def inner_join(left_table: str, left_alias: str, right_table: str, right_alias: str, on: Fragment) -> Fragment:
    return (
        Fragment(f"{table_ref(left_table, left_alias)} INNER JOIN {table_ref(right_table, right_alias)} ON ")
        + on
    )


def is_null(alias: str, column: str) -> Fragment:
    return Fragment(f"{quote_qualified(alias, column)} IS NULL")


def key_absent(table_name: str, key_expressions: Sequence[tuple[str, Fragment]]) -> Fragment:
    """``NOT EXISTS`` guard: no row of ``table_name`` carries this key combination."""
    conditions = [
        Fragment(f"{quote_identifier(column)} IS ") + expression
        for column, expression in key_expressions
    ]
    return (
        Fragment(f"NOT EXISTS (SELECT 1 FROM {quote_identifier(table_name)} WHERE ")
        + Fragment.join(conditions, " AND ")
        + Fragment(")")
    )


def insert_values_if_absent(table_name: str, columns: Sequence[str], key_columns: Sequence[str]) -> str:
    """
    Single-row insert of bound values, skipped when a row with the same key
    already exists. Parameters: one per column, then one per key column.
    """
    placeholders = ", ".join("?" for _ in columns)
    sql = f"INSERT INTO {quote_identifier(table_name)} ({column_list(columns)}) SELECT {placeholders}"
    if key_columns:
        conditions = " AND ".join(f"{quote_identifier(key)} IS ?" for key in key_columns)
        sql += f" WHERE NOT EXISTS (SELECT 1 FROM {quote_identifier(table_name)} WHERE {conditions})"
    return sql


def duplicate_keys(table_name: str, key_columns: Sequence[str]) -> str:
    keys = column_list(key_columns)
    return (
        f"SELECT {keys}, COUNT(*) AS _sync_occurrences FROM {quote_identifier(table_name)} "
        f"GROUP BY {keys} HAVING COUNT(*) > 1 ORDER BY {keys}"
    )


def rowid_of(alias: str) -> str:
    return f"{quote_identifier(alias)}.rowid"
