"""
Safe JSON serialization utilities.

Turns run reports (frozen dataclasses holding enums, datetimes and paths)
into JSON-compatible structures.
"""

import dataclasses
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


def safe_json_serialize(obj: Any) -> Any:
    """
    Recursively serialize Python objects to JSON-compatible types.

    Handles Enums, dataclasses, datetimes, paths and nested collections,
    falling back to ``str()`` for anything else.

    Args:
        obj: Any Python object to serialize

    Returns:
        JSON-compatible representation of the object
    """
    if obj is None:
        return None
    elif isinstance(obj, (str, int, float, bool)) and not isinstance(obj, Enum):
        return obj
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Path):
        return str(obj)
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: safe_json_serialize(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    elif isinstance(obj, dict):
        return {str(k): safe_json_serialize(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple, set)):
        return [safe_json_serialize(item) for item in obj]
    else:
        return str(obj)
