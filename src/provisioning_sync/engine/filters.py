"""
Row filter engine.

Applies a table's glob include/exclude rules to its rows and splits them into
the rows that take part in the sync and the rows filtered out of it.
"""

import logging
import re
from dataclasses import dataclass, field
from fnmatch import translate
from typing import Any, Mapping, Sequence

from ..model.schema import FilterConfig, FilterRule, FilterType

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


@dataclass(frozen=True)
class FilterStats:
    """Counts describing one filter application."""

    table: str
    total: int
    passed: int
    excluded: int

    @property
    def exclusion_rate(self) -> float:
        """Excluded rows as a percentage of the input, rounded to 2 decimals."""
        if self.total == 0:
            return 0.0
        return round(self.excluded / self.total * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "total": self.total,
            "passed": self.passed,
            "excluded": self.excluded,
            "exclusion_rate": self.exclusion_rate,
        }


@dataclass
class FilterResult:
    """Partition of a table's rows."""

    passed: list[Row] = field(default_factory=list)
    excluded: list[Row] = field(default_factory=list)
    stats: FilterStats | None = None


@dataclass(frozen=True)
class CompiledRule:
    rule: FilterRule
    matcher: re.Pattern

    def matches(self, row: Row) -> bool:
        return self.matcher.match(_text_value(row.get(self.rule.field))) is not None


def _text_value(value: Any) -> str:
    # NULL is matched as the empty string
    if value is None:
        return ""
    return str(value)


def compile_rules(rules: Sequence[FilterRule], table: str = "") -> list[CompiledRule]:
    """
    Compile glob patterns, skipping blank ones.

    ``fnmatch.translate`` gives case-sensitive regexes when matched with
    ``re.match`` directly (no ``normcase``).
    """
    compiled = []
    for rule in rules:
        if not rule.pattern or not rule.pattern.strip():
            logger.warning(
                f"Skipping {rule.type.value} rule on {table}.{rule.field}: empty pattern"
            )
            continue
        compiled.append(CompiledRule(rule=rule, matcher=re.compile(translate(rule.pattern))))
    return compiled


def row_passes(row: Row, rules: Sequence[CompiledRule]) -> bool:
    """A row passes when it matches every include rule and no exclude rule."""
    for compiled in rules:
        matched = compiled.matches(row)
        if compiled.rule.type is FilterType.INCLUDE and not matched:
            return False
        if compiled.rule.type is FilterType.EXCLUDE and matched:
            return False
    return True


def filter_rows(rows: Sequence[Row], config: FilterConfig | None, table: str = "") -> FilterResult:
    """
    Split ``rows`` into passed and excluded rows

    Args:
        rows: Input rows, in order
        config: The table's filter configuration (None = no filtering)
        table: Table name for logging and statistics

    Returns:
        FilterResult whose ``passed`` and ``excluded`` lists partition
        ``rows`` and keep their relative order
    """
    result = FilterResult()

    if config is None or not config.enabled:
        result.passed = list(rows)
    else:
        rules = compile_rules(config.rules, table)
        for row in rows:
            if row_passes(row, rules):
                result.passed.append(row)
            else:
                result.excluded.append(row)

    result.stats = FilterStats(
        table=table,
        total=len(rows),
        passed=len(result.passed),
        excluded=len(result.excluded),
    )

    if config is not None and config.enabled:
        logger.info(
            f"Filter applied to {table}: {result.stats.passed}/{result.stats.total} passed, "
            f"{result.stats.excluded} excluded ({result.stats.exclusion_rate:.2f}%)"
        )

    return result
