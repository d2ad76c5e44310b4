"""
Host maintenance orchestrator.

Sequences update and maintenance stages with a fixed failure policy,
dry-run simulation and an auditable run report.
"""

__version__ = "1.0.0"
