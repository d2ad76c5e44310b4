"""
Temporary-file cleanup.

Deletion failures (files in use, permission denied) are expected on a live
system; they are counted and reported, never raised.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from loguru import logger


@dataclass
class CleanupSummary:
    """Totals for one cleanup pass."""

    removed: int = 0
    freed_bytes: int = 0
    errors: List[str] = field(default_factory=list)
    scanned_paths: List[str] = field(default_factory=list)


def _entry_size(path: Path) -> int:
    try:
        if path.is_symlink() or path.is_file():
            return path.lstat().st_size
        total = 0
        for root, _dirs, files in os.walk(path):
            for name in files:
                try:
                    total += os.lstat(os.path.join(root, name)).st_size
                except OSError:
                    pass
        return total
    except OSError:
        return 0


def clean_directories(paths: Iterable[Path]) -> CleanupSummary:
    """
    Delete the contents of each directory, leaving the directories in place.

    Args:
        paths: Directories to empty; missing ones are skipped

    Returns:
        CleanupSummary with counts and per-entry error messages
    """
    summary = CleanupSummary()
    for directory in paths:
        directory = Path(directory)
        if not directory.is_dir():
            logger.debug(f"Cleanup path not present, skipping: {directory}")
            continue
        summary.scanned_paths.append(str(directory))

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            summary.errors.append(f"{directory}: {e.strerror or e}")
            continue

        for entry in entries:
            size = _entry_size(entry)
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                summary.errors.append(f"{entry}: {e.strerror or e}")
                continue
            summary.removed += 1
            summary.freed_bytes += size

    if summary.errors:
        logger.warning(
            f"Cleanup could not remove {len(summary.errors)} item(s) (usually files in use)"
        )
        for message in summary.errors[:5]:
            logger.debug(f"Cleanup error: {message}")
    return summary
