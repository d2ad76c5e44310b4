"""
Validation package: pre-flight diagnostics and privilege checks.
"""

from .diagnostics import DiagnosticsCollector, advisories, log_advisories
from .privilege import is_admin, require_admin

__all__ = [
    "DiagnosticsCollector",
    "advisories",
    "log_advisories",
    "is_admin",
    "require_admin",
]
