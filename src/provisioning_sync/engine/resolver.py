"""
Priority-based field resolution.

Each output field names an ordered list of candidate sources. The first
source (lowest priority number) holding a non-null, non-empty value wins.
The same rules are available in two renditions: ``resolve`` evaluates them
over in-memory rows, ``FieldResolver.expression`` compiles them into a SQL
``COALESCE`` for the classification passes.
"""

import logging
from typing import Any, Mapping, Sequence

from ..model.schema import FieldResolutionRule, FieldSource, SourceKind, SyncConfig
from ..store import query
from ..store.query import Fragment

logger = logging.getLogger(__name__)

PROVIDED_ALIAS = "p"
CURRENT_ALIAS = "c"


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def resolve(
    field_name: str,
    sources: Sequence[FieldSource],
    provided_row: Mapping[str, Any] | None,
    current_row: Mapping[str, Any] | None,
) -> Any:
    """
    Resolve one output field from in-memory rows

    Sources are consulted in ascending priority; once a value is found no
    further source is read. A missing row yields nothing for its sources.

    Args:
        field_name: Output field being resolved (for logging)
        sources: Candidate sources, in any order
        provided_row: Provided row, or None when there is no Provided match
        current_row: Current row, or None when there is no Current match

    Returns:
        First non-null, non-empty value, or None
    """
    for source in sorted(sources, key=lambda s: s.priority):
        if source.source is SourceKind.FIXED:
            value = source.value
        elif source.source is SourceKind.PROVIDED:
            value = None if provided_row is None else provided_row.get(source.field)
        else:
            value = None if current_row is None else current_row.get(source.field)

        if not is_empty(value):
            return value

    logger.debug(f"No source produced a value for {field_name}")
    return None


def changed_columns(
    pairs: Sequence[tuple[str, str]],
    provided_row: Mapping[str, Any],
    current_row: Mapping[str, Any],
) -> list[str]:
    """
    Provided columns whose value differs from the mapped Current column

    NULL equals NULL and differs from every non-NULL value, matching the
    store's ``IS`` / ``IS NOT`` semantics.
    """
    return [
        provided_column
        for provided_column, current_column in pairs
        if provided_row.get(provided_column) != current_row.get(current_column)
    ]


def rows_differ(
    pairs: Sequence[tuple[str, str]],
    provided_row: Mapping[str, Any],
    current_row: Mapping[str, Any],
) -> bool:
    return bool(changed_columns(pairs, provided_row, current_row))


class FieldResolver:
    """Resolution and comparison rules for one sync configuration."""

    def __init__(self, config: SyncConfig):
        self.config = config
        self.rules = config.result_mapping
        self.comparison_pairs = config.comparison_pairs()

    @property
    def fields(self) -> list[str]:
        return [rule.field_name for rule in self.rules]

    def resolve_row(
        self,
        provided_row: Mapping[str, Any] | None,
        current_row: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        """Resolve every output field for one Provided/Current pair."""
        return {
            rule.field_name: resolve(rule.field_name, rule.sources, provided_row, current_row)
            for rule in self.rules
        }

    def expression(
        self,
        rule: FieldResolutionRule,
        provided_alias: str = PROVIDED_ALIAS,
        current_alias: str = CURRENT_ALIAS,
    ) -> Fragment:
        """
        SQL expression resolving ``rule`` over a joined Provided/Current row

        ``COALESCE(NULLIF(p.a, ''), NULLIF(c.b, ''), ?)`` in priority order;
        sources after the first fixed literal can never be reached and are
        dropped.
        """
        candidates = []
        for source in rule.ordered_sources:
            if source.source is SourceKind.FIXED:
                if is_empty(source.value):
                    continue
                candidates.append(query.literal(source.value))
                break
            alias = provided_alias if source.source is SourceKind.PROVIDED else current_alias
            candidates.append(query.non_empty(alias, source.field))
        return query.coalesce(candidates)

    def expressions(self) -> list[Fragment]:
        return [self.expression(rule) for rule in self.rules]

    def key_expressions(self, key_columns: Sequence[str]) -> list[tuple[str, Fragment]]:
        return [(key, self.expression(self.config.resolution_rule(key))) for key in key_columns]

    def different(self) -> Fragment:
        """Store predicate: some comparison column differs."""
        return query.null_safe_different(self.comparison_pairs, PROVIDED_ALIAS, CURRENT_ALIAS)

    def same(self) -> Fragment:
        """Store predicate: every comparison column is equal."""
        return query.null_safe_same(self.comparison_pairs, PROVIDED_ALIAS, CURRENT_ALIAS)

    def differs(self, provided_row: Mapping[str, Any], current_row: Mapping[str, Any]) -> bool:
        return rows_differ(self.comparison_pairs, provided_row, current_row)
