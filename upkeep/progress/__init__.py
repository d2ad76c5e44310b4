"""
Progress and reporting package.

Provides the audit log sinks, console formatting and run report delivery.
"""

from .formatter import HumanReadableFormatter
from .log_sink import audit_format, configure_logging
from .report_sender import ReportSender, report_to_dict, write_report_json

__all__ = [
    "HumanReadableFormatter",
    "audit_format",
    "configure_logging",
    "ReportSender",
    "report_to_dict",
    "write_report_json",
]
