"""
Sync run report generation and formatting.

Builds a summary of a run (per-action counts, filter statistics, duplicate
keys) and renders it for the console, JSON, or CSV.
"""

from .formatters import export_report_csv, export_report_json, format_report_console, load_report_json
from .generator import ReportStatus, format_timestamp, generate_report

__all__ = [
    'generate_report',
    'format_timestamp',
    'ReportStatus',
    'export_report_json',
    'export_report_csv',
    'load_report_json',
    'format_report_console',
]
