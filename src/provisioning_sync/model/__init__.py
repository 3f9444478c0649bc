"""
Schema model and configuration loading.

The loader turns a YAML/JSON document into a validated ``SyncConfig``; the
rest of the package only ever sees the typed model.
"""

from .loader import load_config, parse_config
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

__all__ = [
    'load_config',
    'parse_config',
    'SYNC_ACTION_COLUMN',
    'ColumnDef',
    'ColumnMapping',
    'FieldResolutionRule',
    'FieldSource',
    'FilterConfig',
    'FilterRule',
    'FilterType',
    'SourceKind',
    'SyncAction',
    'SyncActionLabels',
    'SyncConfig',
    'TableSchema',
]
