"""
Typed schema model for a sync run.

Everything the engine needs to know about the tables, the column mapping
between them, the filter rules and the field-resolution rules lives in these
frozen dataclasses. They are built and validated once by the config loader;
the engine never inspects raw configuration documents.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SyncAction(str, Enum):
    """Classification assigned to every reconciled entity."""

    ADD = "ADD"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    KEEP = "KEEP"


class FilterType(str, Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


class SourceKind(str, Enum):
    PROVIDED = "provided"
    CURRENT = "current"
    FIXED = "fixed"


INTEGER_TYPES = frozenset({"integer", "int"})


@dataclass(frozen=True)
class ColumnDef:
    """A declared table column."""

    name: str
    type: str = "string"
    required: bool = False
    include: bool = True

    @property
    def sql_type(self) -> str:
        return "INTEGER" if self.type.lower() in INTEGER_TYPES else "TEXT"

    @property
    def is_integer(self) -> bool:
        return self.type.lower() in INTEGER_TYPES


@dataclass(frozen=True)
class TableSchema:
    """Columns and key columns of one table in the sync store."""

    name: str
    columns: tuple[ColumnDef, ...]
    key_columns: tuple[str, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def has_column(self, name: str) -> bool:
        return any(column.name == name for column in self.columns)

    def column(self, name: str) -> ColumnDef:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    @property
    def required_columns(self) -> list[str]:
        return [column.name for column in self.columns if column.required]


@dataclass(frozen=True)
class ColumnMapping:
    """
    One-directional mapping from Provided column names to Current column names.

    The mapping is not necessarily symmetric; ``reverse`` looks a Current
    column up through the inverted dictionary.
    """

    provided_to_current: dict[str, str] = field(default_factory=dict)

    def forward(self, provided_column: str) -> str | None:
        return self.provided_to_current.get(provided_column)

    def inverse(self) -> dict[str, str]:
        return {current: provided for provided, current in self.provided_to_current.items()}

    def reverse(self, current_column: str) -> str | None:
        return self.inverse().get(current_column)

    def pairs(self) -> list[tuple[str, str]]:
        return list(self.provided_to_current.items())

    def __len__(self) -> int:
        return len(self.provided_to_current)


@dataclass(frozen=True)
class FilterRule:
    """Glob include/exclude predicate on one field."""

    field: str
    type: FilterType
    pattern: str


@dataclass(frozen=True)
class FilterConfig:
    """Data filter settings for one input table."""

    enabled: bool = False
    rules: tuple[FilterRule, ...] = ()
    excluded_as_keep: bool = False


@dataclass(frozen=True)
class FieldSource:
    """One candidate source for an output field."""

    source: SourceKind
    priority: int
    field: str | None = None
    value: Any = None

    def describe(self) -> str:
        if self.source is SourceKind.FIXED:
            return f"fixed({self.value!r})"
        return f"{self.source.value}.{self.field}"


@dataclass(frozen=True)
class FieldResolutionRule:
    """Ordered candidate sources for one output field."""

    field_name: str
    sources: tuple[FieldSource, ...]

    @property
    def ordered_sources(self) -> list[FieldSource]:
        return sorted(self.sources, key=lambda source: source.priority)


@dataclass(frozen=True)
class SyncActionLabels:
    """Literal values written to ``sync_action`` for each action."""

    add: Any = SyncAction.ADD.value
    update: Any = SyncAction.UPDATE.value
    delete: Any = SyncAction.DELETE.value
    keep: Any = SyncAction.KEEP.value

    def label_for(self, action: SyncAction) -> Any:
        return getattr(self, action.value.lower())


SYNC_ACTION_COLUMN = "sync_action"


@dataclass(frozen=True)
class SyncConfig:
    """Validated configuration for one Provided/Current/result table triple."""

    provided: TableSchema
    current: TableSchema
    result: TableSchema
    column_mapping: ColumnMapping
    result_mapping: tuple[FieldResolutionRule, ...]
    provided_filter: FilterConfig = field(default_factory=FilterConfig)
    current_filter: FilterConfig = field(default_factory=FilterConfig)
    action_labels: SyncActionLabels = field(default_factory=SyncActionLabels)

    @property
    def result_fields(self) -> list[str]:
        return [rule.field_name for rule in self.result_mapping]

    def resolution_rule(self, field_name: str) -> FieldResolutionRule:
        for rule in self.result_mapping:
            if rule.field_name == field_name:
                return rule
        raise KeyError(field_name)

    def comparison_pairs(self) -> list[tuple[str, str]]:
        """
        (provided, current) column pairs compared for UPDATE/KEEP.

        Mapped columns whose Provided definition sets ``include: false`` take
        no part in the comparison.
        """
        pairs = []
        for provided_column, current_column in self.column_mapping.pairs():
            if self.provided.has_column(provided_column) and not self.provided.column(provided_column).include:
                continue
            pairs.append((provided_column, current_column))
        return pairs
