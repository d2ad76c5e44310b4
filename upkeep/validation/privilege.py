"""
Administrator privilege detection.
"""

import ctypes
import os
import sys

from loguru import logger

from ..core.exceptions import PrivilegeError


def is_admin() -> bool:
    """
    Return True when the process runs elevated.

    Windows asks the shell API; other platforms check for effective uid 0.
    Any failure to decide counts as not elevated.
    """
    try:
        if sys.platform == "win32":
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        return os.geteuid() == 0
    except (AttributeError, OSError) as e:
        logger.debug(f"Privilege check failed: {e}")
        return False


def require_admin() -> None:
    """
    Raises:
        PrivilegeError: when elevation cannot be confirmed
    """
    if not is_admin():
        raise PrivilegeError(
            "Administrator privileges are required",
            remediation="Re-run from an elevated terminal (Run as administrator)",
        )
