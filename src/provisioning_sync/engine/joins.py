"""
Key matching between Provided and Current tables.

Builds the (left column, right column) pairs the classifier joins on. The
column mapping is declared Provided -> Current only, so joins that start from
Current look columns up through the inverted mapping.
"""

import logging
from typing import Sequence

from ..errors import ConfigurationError
from ..model.schema import ColumnMapping, TableSchema

logger = logging.getLogger(__name__)


def join_condition(left_keys: Sequence[str], mapping: ColumnMapping, table: str = "") -> list[tuple[str, str]]:
    """
    Pair every left key column with its right-hand column

    Lookup order per key: forward mapping, inverse mapping, then the same
    column name on both sides.

    Args:
        left_keys: Key columns of the left table
        mapping: Provided -> Current column mapping
        table: Left table name, used in error messages

    Returns:
        List of (left_field, right_field) pairs

    Raises:
        ConfigurationError: If the left table declares no key columns
    """
    if not left_keys:
        raise ConfigurationError(
            f"Table {table or '<unnamed>'} declares no key columns; cannot match rows",
            identifier=table or None,
        )

    inverse = mapping.inverse()
    pairs = []
    for key in left_keys:
        right = mapping.forward(key)
        if right is None:
            right = inverse.get(key)
        if right is None:
            logger.debug(f"No mapping for key column {key}; joining on the same name")
            right = key
        pairs.append((key, right))
    return pairs


def provided_key_pairs(provided: TableSchema, mapping: ColumnMapping) -> list[tuple[str, str]]:
    """(provided, current) pairs for joins that start from Provided."""
    return join_condition(provided.key_columns, mapping, provided.name)


def current_key_pairs(current: TableSchema, mapping: ColumnMapping) -> list[tuple[str, str]]:
    """(current, provided) pairs for joins that start from Current."""
    return join_condition(current.key_columns, mapping, current.name)


def validate_key_pairs(pairs: Sequence[tuple[str, str]], left: TableSchema, right: TableSchema) -> None:
    """
    Check both sides of every pair exist.

    Raises:
        ConfigurationError: If a key column has no counterpart in ``right``
    """
    for left_column, right_column in pairs:
        if not left.has_column(left_column):
            raise ConfigurationError(
                f"Key column '{left_column}' is not a column of {left.name}", identifier=left_column
            )
        if not right.has_column(right_column):
            raise ConfigurationError(
                f"Key column '{left.name}.{left_column}' maps to '{right_column}', "
                f"which is not a column of {right.name}",
                identifier=right_column,
            )
