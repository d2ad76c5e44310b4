"""
Connectivity package for the advisory network probe.
"""

from .reachability import is_reachable, probe_connectivity

__all__ = ["is_reachable", "probe_connectivity"]
