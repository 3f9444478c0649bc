"""
Embedded SQLite store and SQL builder.
"""

from . import query
from .database import SyncStore
from .query import Fragment

__all__ = ['SyncStore', 'Fragment', 'query']
