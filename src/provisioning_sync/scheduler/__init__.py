"""
Sync scheduler module

Provides cron-like scheduling for periodic sync runs using APScheduler.
"""

from .jobs import sync_job
from .scheduler import SyncScheduler, parse_cron_expression

__all__ = [
    'SyncScheduler',
    'parse_cron_expression',
    'sync_job',
]
