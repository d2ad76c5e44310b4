"""
Maintenance package: stage model, scope table, fallback chain and pipeline.
"""

from .fallback_chain import FallbackChain, UpdateMethod
from .pipeline import PipelineRunner
from .scopes import SCOPE_TABLE, resolve_scope
from .session import run_maintenance
from .stage import Stage
from .stages import build_catalogue

__all__ = [
    "FallbackChain",
    "UpdateMethod",
    "PipelineRunner",
    "SCOPE_TABLE",
    "resolve_scope",
    "run_maintenance",
    "Stage",
    "build_catalogue",
]
