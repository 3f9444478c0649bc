"""
CSV import/export for the sync store.
"""

from .csv_export import export_result_csv
from .csv_import import ImportStats, import_csv, read_csv_rows
from .pipeline import FileSyncResult, run_file_sync

__all__ = [
    'export_result_csv',
    'ImportStats',
    'import_csv',
    'read_csv_rows',
    'FileSyncResult',
    'run_file_sync',
]
