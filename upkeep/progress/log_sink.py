"""
Audit log configuration.

Every record, on the console and in the append-only log file, is one line:

    [2026-10-19T03:00:01.123+02:00] [Info] message

Downstream tooling tails the file and relies on this exact shape. Sinks are
synchronous so lines land in emission order.
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..core.constants import LEVEL_LABELS
from ..core.exceptions import ConfigurationError


def level_label(level_name: str) -> str:
    return LEVEL_LABELS.get(level_name, level_name.title())


def audit_format(record) -> str:
    """loguru format callable producing the audit line for a record."""
    timestamp = record["time"].isoformat(timespec="milliseconds")
    label = level_label(record["level"].name)
    return f"[{timestamp}] [{label}] {{message}}\n{{exception}}"


def configure_logging(log_path: Optional[Path] = None, verbose: bool = False) -> List[int]:
    """
    Replace loguru's default sink with the audit console + file sinks.

    Args:
        log_path: Append-only log file; parent directories are created
        verbose: Also show DEBUG records on the console

    Returns:
        Handler ids of the installed sinks

    Raises:
        ConfigurationError: the log file cannot be opened
    """
    logger.remove()
    handler_ids = [
        logger.add(
            sys.stderr,
            level="DEBUG" if verbose else "INFO",
            format=audit_format,
            colorize=False,
            backtrace=False,
            diagnose=False,
        )
    ]

    if log_path is not None:
        log_path = Path(log_path)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler_ids.append(
                logger.add(
                    str(log_path),
                    level="INFO",
                    format=audit_format,
                    mode="a",
                    encoding="utf-8",
                    backtrace=False,
                    diagnose=False,
                )
            )
        except OSError as e:
            raise ConfigurationError(
                f"Cannot open log file {log_path}: {e}",
                remediation="Pass a writable location with --log-path",
            )

    return handler_ids
