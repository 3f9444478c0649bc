"""
Provisioning sync.

Reconciles a newly provided snapshot of account records with the currently
recorded one and classifies every record as ADD, UPDATE, DELETE or KEEP for
downstream provisioning.
"""

from .engine import Reconciler, SyncRunResult, reconcile
from .errors import ConfigurationError, StorageError, SyncError
from .model import SyncAction, SyncConfig, load_config, parse_config
from .store import SyncStore

__version__ = "1.0.0"

__all__ = [
    'Reconciler',
    'SyncRunResult',
    'reconcile',
    'ConfigurationError',
    'StorageError',
    'SyncError',
    'SyncAction',
    'SyncConfig',
    'load_config',
    'parse_config',
    'SyncStore',
]
