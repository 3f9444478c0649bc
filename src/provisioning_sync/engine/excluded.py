"""
Reintroduction of filtered-out Current rows as KEEP.

Rows the Current filter excluded never reach the joins, so without this step
they would vanish from the result. With ``excluded_as_keep`` enabled they are
appended as KEEP, resolved from the Current row alone, unless their result
key is already present.
"""

import logging
from typing import Any, Mapping, Sequence

from ..model.schema import SYNC_ACTION_COLUMN, SyncAction, SyncConfig
from ..store import SyncStore, query
from .resolver import FieldResolver

logger = logging.getLogger(__name__)


def reintroduce_excluded(
    config: SyncConfig,
    store: SyncStore,
    excluded_rows: Sequence[Mapping[str, Any]],
    resolver: FieldResolver | None = None,
) -> int:
    """
    Append excluded Current rows to the result table as KEEP

    Args:
        config: Sync configuration
        store: Store holding the result table
        excluded_rows: Current rows removed by the Current filter
        resolver: Field resolver (built from ``config`` if omitted)

    Returns:
        Number of rows inserted; rows whose key already exists are skipped
    """
    if not config.current_filter.excluded_as_keep or not excluded_rows:
        return 0

    resolver = resolver or FieldResolver(config)
    fields = config.result_fields
    key_columns = config.result.key_columns
    label = config.action_labels.label_for(SyncAction.KEEP)

    sql = query.insert_values_if_absent(config.result.name, fields + [SYNC_ACTION_COLUMN], key_columns)

    inserted = 0
    for row in excluded_rows:
        values = resolver.resolve_row(None, row)
        params = [values[name] for name in fields] + [label] + [values[key] for key in key_columns]
        inserted += store.execute(sql, params).rowcount

    skipped = len(excluded_rows) - inserted
    logger.info(
        f"Reintroduced {inserted} excluded {config.current.name} row(s) as KEEP"
        + (f", {skipped} already present" if skipped else "")
    )
    return inserted
