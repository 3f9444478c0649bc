"""
Four-pass classification of Provided/Current rows.

Each pass is one ``INSERT ... SELECT`` over the staged (filtered) input
tables and appends rows tagged with its action label:

1. ADD     Provided rows without a Current match
2. UPDATE  matched pairs whose comparison columns differ
3. DELETE  Current rows without a Provided match
4. KEEP    matched pairs whose comparison columns are equal and whose result
           key is not already present

The passes run strictly in this order; KEEP reads what the earlier passes
wrote.
"""

import logging
from typing import Callable

from sync_utils.tracing import trace_operation

from ..model.schema import SYNC_ACTION_COLUMN, SyncAction, SyncConfig
from ..store import SyncStore, query
from ..store.query import Fragment
from .joins import current_key_pairs, provided_key_pairs, validate_key_pairs
from .resolver import CURRENT_ALIAS, PROVIDED_ALIAS, FieldResolver

logger = logging.getLogger(__name__)

PASS_ORDER = (SyncAction.ADD, SyncAction.UPDATE, SyncAction.DELETE, SyncAction.KEEP)


class Classifier:
    """Runs the classification passes against a sync store."""

    def __init__(self, config: SyncConfig, store: SyncStore, resolver: FieldResolver | None = None):
        self.config = config
        self.store = store
        self.resolver = resolver or FieldResolver(config)

        self.provided_pairs = provided_key_pairs(config.provided, config.column_mapping)
        self.current_pairs = current_key_pairs(config.current, config.column_mapping)
        validate_key_pairs(self.provided_pairs, config.provided, config.current)
        validate_key_pairs(self.current_pairs, config.current, config.provided)

        self.result_table = config.result.name
        self.result_columns = config.result_fields + [SYNC_ACTION_COLUMN]

    def run(self, provided_table: str, current_table: str) -> dict[SyncAction, int]:
        """
        Run all four passes

        Args:
            provided_table: Staged Provided rows (after filtering)
            current_table: Staged Current rows (after filtering)

        Returns:
            Rows inserted per action
        """
        passes: dict[SyncAction, Callable[[str, str], int]] = {
            SyncAction.ADD: self.add_pass,
            SyncAction.UPDATE: self.update_pass,
            SyncAction.DELETE: self.delete_pass,
            SyncAction.KEEP: self.keep_pass,
        }

        counts = {}
        for action in PASS_ORDER:
            with trace_operation(f"classify.{action.value.lower()}", result_table=self.result_table) as span:
                counts[action] = passes[action](provided_table, current_table)
                span.set_attribute("rows", counts[action])
            logger.info(f"{action.value} pass: {counts[action]} row(s)")
        return counts

    def _insert(self, action: SyncAction, from_clause: Fragment, where: Fragment, order_by: str) -> int:
        expressions = self.resolver.expressions()
        expressions.append(query.literal(self.config.action_labels.label_for(action)))
        statement = query.insert_select(
            self.result_table,
            self.result_columns,
            expressions,
            from_clause,
            where=where,
            order_by=order_by,
        )
        return self.store.execute(statement).rowcount

    def add_pass(self, provided_table: str, current_table: str) -> int:
        """Provided LEFT JOIN Current, keeping rows with no Current side."""
        from_clause = query.left_join(
            provided_table, PROVIDED_ALIAS, current_table, CURRENT_ALIAS,
            query.equi_join(self.provided_pairs, PROVIDED_ALIAS, CURRENT_ALIAS),
        )
        unmatched = query.is_null(CURRENT_ALIAS, self.provided_pairs[0][1])
        return self._insert(SyncAction.ADD, from_clause, unmatched, query.rowid_of(PROVIDED_ALIAS))

    def update_pass(self, provided_table: str, current_table: str) -> int:
        """Matched pairs where at least one comparison column differs."""
        from_clause = query.inner_join(
            provided_table, PROVIDED_ALIAS, current_table, CURRENT_ALIAS,
            query.equi_join(self.provided_pairs, PROVIDED_ALIAS, CURRENT_ALIAS),
        )
        return self._insert(
            SyncAction.UPDATE, from_clause, self.resolver.different(), query.rowid_of(PROVIDED_ALIAS)
        )

    def delete_pass(self, provided_table: str, current_table: str) -> int:
        """Current LEFT JOIN Provided, keeping rows with no Provided side."""
        from_clause = query.left_join(
            current_table, CURRENT_ALIAS, provided_table, PROVIDED_ALIAS,
            query.equi_join(self.current_pairs, CURRENT_ALIAS, PROVIDED_ALIAS),
        )
        unmatched = query.is_null(PROVIDED_ALIAS, self.current_pairs[0][1])
        return self._insert(SyncAction.DELETE, from_clause, unmatched, query.rowid_of(CURRENT_ALIAS))

    def keep_pass(self, provided_table: str, current_table: str) -> int:
        """Matched, unchanged pairs whose result key is not present yet."""
        from_clause = query.inner_join(
            provided_table, PROVIDED_ALIAS, current_table, CURRENT_ALIAS,
            query.equi_join(self.provided_pairs, PROVIDED_ALIAS, CURRENT_ALIAS),
        )
        where = self.resolver.same()
        key_columns = self.config.result.key_columns
        if key_columns:
            absent = query.key_absent(self.result_table, self.resolver.key_expressions(key_columns))
            where = where + Fragment(" AND ") + absent
        return self._insert(SyncAction.KEEP, from_clause, where, query.rowid_of(PROVIDED_ALIAS))
