"""
Run report generation and formatting.
"""

from .formatters import export_report_json, format_report_console, load_report_json
from .generator import generate_report

__all__ = [
    "generate_report",
    "export_report_json",
    "load_report_json",
    "format_report_console",
]
