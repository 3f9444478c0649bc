"""
Identifier checks for SQL text built from configuration.

Table and column names come from configuration documents, so each one is
validated and double-quoted here before it is spliced into a statement.
Values never are: callers bind them as parameters.
"""

import re

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# SQLite resolves these to the implicit row id whatever the schema says
ROWID_ALIASES = frozenset({"rowid", "oid", "_rowid_"})


def validate_identifier(identifier: str) -> None:
    """
    Raise ValueError unless ``identifier`` is a plain ASCII name

    Letters, digits and underscores only, not starting with a digit, and
    none of SQLite's row id aliases (case-insensitive).
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")

    if not isinstance(identifier, str) or IDENTIFIER.fullmatch(identifier) is None:
        raise ValueError(
            f"Invalid SQL identifier: {identifier!r}; use ASCII letters, digits and "
            "underscores, starting with a letter or underscore"
        )

    if identifier.lower() in ROWID_ALIASES:
        raise ValueError(f"Reserved SQL identifier: {identifier!r}")


def quote_identifier(identifier: str) -> str:
    validate_identifier(identifier)
    return f'"{identifier}"'


def quote_qualified(alias: str, column: str) -> str:
    """``"alias"."column"`` with both parts validated."""
    return f"{quote_identifier(alias)}.{quote_identifier(column)}"
