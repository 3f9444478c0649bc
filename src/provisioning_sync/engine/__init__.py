"""
Reconciliation engine.

Filters the Provided and Current tables, matches them on their key columns,
resolves every output field by priority and classifies each record as ADD,
UPDATE, DELETE or KEEP in a rebuilt result table.
"""

from .classifier import PASS_ORDER, Classifier
from .consistency import DuplicateKey, check_duplicates
from .excluded import reintroduce_excluded
from .filters import FilterResult, FilterStats, filter_rows
from .joins import join_condition
from .reconciler import Reconciler, SyncRunResult, reconcile
from .resolver import FieldResolver, resolve

__all__ = [
    'PASS_ORDER',
    'Classifier',
    'DuplicateKey',
    'check_duplicates',
    'reintroduce_excluded',
    'FilterResult',
    'FilterStats',
    'filter_rows',
    'join_condition',
    'Reconciler',
    'SyncRunResult',
    'reconcile',
    'FieldResolver',
    'resolve',
]
