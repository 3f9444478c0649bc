"""
Configuration loading and validation.

Reads a YAML or JSON document, checks its shape against ``CONFIG_SCHEMA``
and its cross references against itself, and returns a ``SyncConfig``.
Every failure is a ``ConfigurationError`` naming the offending identifier.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from sync_utils.sql_safety import validate_identifier

from ..errors import ConfigurationError
from .config_schema import CONFIG_SCHEMA
from .schema import (
    SYNC_ACTION_COLUMN,
    ColumnDef,
    ColumnMapping,
    FieldResolutionRule,
    FieldSource,
    FilterConfig,
    FilterRule,
    FilterType,
    SourceKind,
    SyncAction,
    SyncActionLabels,
    SyncConfig,
    TableSchema,
)

logger = logging.getLogger(__name__)


def load_config(path: str | Path) -> SyncConfig:
    """
    Load and validate a configuration file

    Args:
        path: YAML (.yaml/.yml) or JSON (.json) document

    Returns:
        Validated SyncConfig

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}", identifier=str(path))

    try:
        with open(path, encoding="utf-8-sig") as f:
            if path.suffix.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse configuration {path}: {e}", identifier=str(path)) from e

    config = parse_config(document)
    logger.info(
        f"Loaded configuration {path}: {config.provided.name} -> "
        f"{config.current.name} -> {config.result.name}"
    )
    return config


def parse_config(document: Any) -> SyncConfig:
    """
    Build a SyncConfig from an already parsed document

    Raises:
        ConfigurationError: If the document violates the schema or references
            unknown tables/columns
    """
    _validate_document(document)

    tables = document["tables"]
    provided = _parse_table(tables["provided"], "provided")
    current = _parse_table(tables["current"], "current")

    mapping = _parse_column_mapping(document["column_mappings"]["provided_to_current"], provided, current)
    result_mapping = _parse_result_mapping(document["sync_result_mapping"], provided, current)
    result = _parse_result_table(tables["sync_result"], result_mapping)

    filters = document.get("data_filters") or {}
    provided_filter = _parse_filter(filters.get("provided"), provided)
    current_filter = _parse_filter(filters.get("current"), current)

    if provided_filter.excluded_as_keep:
        logger.warning(
            "data_filters.provided.excluded_as_keep has no effect; "
            "only filtered Current rows can be kept"
        )

    names = [provided.name, current.name, result.name]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Table names must be distinct: {names}", identifier=",".join(names))

    return SyncConfig(
        provided=provided,
        current=current,
        result=result,
        column_mapping=mapping,
        result_mapping=result_mapping,
        provided_filter=provided_filter,
        current_filter=current_filter,
        action_labels=_parse_labels(document.get("sync_action_labels") or {}),
    )


def _validate_document(document: Any) -> None:
    validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda error: list(error.absolute_path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.absolute_path) or "<root>"
        raise ConfigurationError(
            f"Invalid configuration at {location}: {first.message}"
            + (f" ({len(errors) - 1} more error(s))" if len(errors) > 1 else ""),
            identifier=location,
        )


def _check_identifier(identifier: str, where: str) -> None:
    try:
        validate_identifier(identifier)
    except ValueError as e:
        raise ConfigurationError(f"{where}: {e}", identifier=identifier) from e


def _parse_columns(raw_columns: list[dict], table_label: str) -> tuple[ColumnDef, ...]:
    columns = []
    seen = set()
    for raw in raw_columns:
        name = raw["name"]
        _check_identifier(name, f"tables.{table_label}.columns")
        if name in seen:
            raise ConfigurationError(
                f"Duplicate column '{name}' in tables.{table_label}", identifier=name
            )
        seen.add(name)
        columns.append(ColumnDef(
            name=name,
            type=raw.get("type", "string"),
            required=raw.get("required", False),
            include=raw.get("include", True),
        ))
    return tuple(columns)


def _parse_table(raw: dict, table_label: str) -> TableSchema:
    _check_identifier(raw["name"], f"tables.{table_label}.name")

    columns = _parse_columns(raw.get("columns") or [], table_label)
    if not columns:
        raise ConfigurationError(
            f"tables.{table_label} declares no columns", identifier=raw["name"]
        )

    table = TableSchema(name=raw["name"], columns=columns, key_columns=tuple(raw.get("key_columns") or ()))
    for key in table.key_columns:
        if not table.has_column(key):
            raise ConfigurationError(
                f"Key column '{key}' is not a column of {table.name}", identifier=key
            )
    return table


def _parse_column_mapping(raw: dict[str, str], provided: TableSchema, current: TableSchema) -> ColumnMapping:
    for provided_column, current_column in raw.items():
        if not provided.has_column(provided_column):
            raise ConfigurationError(
                f"Mapped column '{provided_column}' is not a column of {provided.name}",
                identifier=provided_column,
            )
        if not current.has_column(current_column):
            raise ConfigurationError(
                f"Mapped column '{current_column}' is not a column of {current.name}",
                identifier=current_column,
            )
    if len(set(raw.values())) != len(raw):
        logger.warning(
            "column_mappings.provided_to_current maps several Provided columns "
            "to the same Current column; reverse lookups use the last one"
        )
    return ColumnMapping(provided_to_current=dict(raw))


def _parse_source(raw: dict, field_name: str, provided: TableSchema, current: TableSchema) -> FieldSource:
    kind = SourceKind(raw["source"])
    priority = raw["priority"]

    if priority < 1:
        raise ConfigurationError(
            f"sync_result_mapping.{field_name}: priority must be a positive integer, got {priority}",
            identifier=field_name,
        )

    if kind is SourceKind.FIXED:
        if "value" not in raw:
            raise ConfigurationError(
                f"sync_result_mapping.{field_name}: fixed source needs a 'value'",
                identifier=field_name,
            )
        return FieldSource(source=kind, priority=priority, value=raw["value"])

    source_field = raw.get("field")
    if not source_field:
        raise ConfigurationError(
            f"sync_result_mapping.{field_name}: {kind.value} source needs a 'field'",
            identifier=field_name,
        )

    table = provided if kind is SourceKind.PROVIDED else current
    if not table.has_column(source_field):
        raise ConfigurationError(
            f"sync_result_mapping.{field_name}: '{source_field}' is not a column of {table.name}",
            identifier=source_field,
        )
    return FieldSource(source=kind, priority=priority, field=source_field)


def _parse_result_mapping(raw: dict[str, dict], provided: TableSchema, current: TableSchema) -> tuple[FieldResolutionRule, ...]:
    rules = []
    for field_name, field_doc in raw.items():
        _check_identifier(field_name, "sync_result_mapping")
        if field_name == SYNC_ACTION_COLUMN:
            raise ConfigurationError(
                f"'{SYNC_ACTION_COLUMN}' is reserved for the action label", identifier=field_name
            )

        sources = tuple(_parse_source(source, field_name, provided, current) for source in field_doc["sources"])

        priorities = [source.priority for source in sources]
        if len(set(priorities)) != len(priorities):
            raise ConfigurationError(
                f"sync_result_mapping.{field_name}: duplicate priorities {sorted(priorities)}",
                identifier=field_name,
            )
        if sorted(priorities) != list(range(1, len(priorities) + 1)):
            logger.warning(
                f"sync_result_mapping.{field_name}: priorities {sorted(priorities)} "
                f"are not contiguous from 1"
            )

        rules.append(FieldResolutionRule(field_name=field_name, sources=sources))
    return tuple(rules)


def _parse_result_table(raw: dict, result_mapping: tuple[FieldResolutionRule, ...]) -> TableSchema:
    _check_identifier(raw["name"], "tables.sync_result.name")

    declared = {column.name: column for column in _parse_columns(raw.get("columns") or [], "sync_result")}
    fields = [rule.field_name for rule in result_mapping]

    for name in declared:
        if name not in fields:
            raise ConfigurationError(
                f"Result column '{name}' has no entry in sync_result_mapping", identifier=name
            )

    columns = tuple(declared.get(name, ColumnDef(name=name)) for name in fields)
    table = TableSchema(name=raw["name"], columns=columns, key_columns=tuple(raw.get("key_columns") or ()))

    for key in table.key_columns:
        if key not in fields:
            raise ConfigurationError(
                f"Result key column '{key}' has no entry in sync_result_mapping", identifier=key
            )
    return table


def _parse_filter(raw: dict | None, table: TableSchema) -> FilterConfig:
    if not raw:
        return FilterConfig()

    rules = []
    for rule in raw.get("rules") or []:
        if not table.has_column(rule["field"]):
            raise ConfigurationError(
                f"Filter field '{rule['field']}' is not a column of {table.name}",
                identifier=rule["field"],
            )
        rules.append(FilterRule(field=rule["field"], type=FilterType(rule["type"]), pattern=rule["pattern"]))

    return FilterConfig(
        enabled=raw.get("enabled", False),
        rules=tuple(rules),
        excluded_as_keep=raw.get("excluded_as_keep", False),
    )


def _parse_labels(raw: dict[str, Any]) -> SyncActionLabels:
    labels = SyncActionLabels(
        **{action.value.lower(): raw[action.value] for action in SyncAction if action.value in raw}
    )
    values = [labels.label_for(action) for action in SyncAction]
    if len(set(values)) != len(values):
        raise ConfigurationError(
            f"sync_action_labels must be distinct, got {values}", identifier="sync_action_labels"
        )
    return labels
