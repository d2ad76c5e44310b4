"""
Utility functions and helper modules.

Provides JSON serialization helpers shared by the reporting code.
"""

from .json_utils import safe_json_serialize

__all__ = ["safe_json_serialize"]
