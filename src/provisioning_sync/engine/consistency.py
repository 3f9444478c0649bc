"""
Duplicate-key consistency check over the result table.

The classification passes are independent set operations, so uniqueness of
the result key is verified after the fact rather than enforced while writing.
Violations are data errors: reported, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from ..errors import ConfigurationError
from ..store import SyncStore, query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateKey:
    """One result key combination that occurs more than once."""

    key: dict[str, Any]
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "count": self.count}


def check_duplicates(store: SyncStore, table_name: str, key_columns: Sequence[str]) -> list[DuplicateKey]:
    """
    Find every key combination occurring more than once

    Args:
        store: Store holding the result table
        table_name: Result table
        key_columns: Result key columns

    Returns:
        All violations, ordered by key; empty when the result is consistent

    Raises:
        ConfigurationError: If no key columns are declared
    """
    if not key_columns:
        raise ConfigurationError(
            f"Table {table_name} declares no key columns; cannot check uniqueness",
            identifier=table_name,
        )

    duplicates = [
        DuplicateKey(
            key={column: row[column] for column in key_columns},
            count=row["_sync_occurrences"],
        )
        for row in store.fetch_all(query.duplicate_keys(table_name, key_columns))
    ]

    for duplicate in duplicates:
        logger.warning(
            f"Duplicate key in {table_name}: {duplicate.key} occurs {duplicate.count} times"
        )

    return duplicates
