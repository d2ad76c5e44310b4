"""
Pre-flight diagnostics collection.

Captures host state (name, OS version, free disk space, memory, power and
the last restore point) into an immutable snapshot before any mutating stage
runs. Collection never fails: each sub-query that cannot be answered leaves
its field empty.

Advisories derived from the snapshot (low disk space, running on battery)
are logged at Warning level and never influence control flow.
"""

import os
import platform
import shutil
import socket
import sys
from datetime import datetime
from typing import Any, Callable, List, Optional

import psutil
from loguru import logger

from ..core.constants import GIB, LOW_BATTERY_PERCENT, LOW_DISK_THRESHOLD_BYTES
from ..core.contracts import RestorePointService
from ..core.dataclasses import DiagnosticsSnapshot


# =============================================================================
# SECTION 1: SUB-QUERIES
# =============================================================================


def system_drive() -> str:
    """Root of the drive holding the OS (``C:\\`` on Windows, ``/`` elsewhere)."""
    if sys.platform == "win32":
        return os.getenv("SystemDrive", "C:") + "\\"
    return os.path.abspath(os.sep)


def _query(name: str, func: Callable[[], Any]) -> Any:
    """Run one sub-query; an error yields None instead of aborting collection."""
    try:
        return func()
    except Exception as e:  # any probe failure just leaves the field empty
        logger.debug(f"Diagnostics query '{name}' unavailable: {e}")
        return None


def _host_name() -> Optional[str]:
    return platform.node() or socket.gethostname() or None


def _os_version() -> Optional[str]:
    if sys.platform == "win32":
        release, version, _csd, _ptype = platform.win32_ver()
        edition = platform.win32_edition() or ""
        return f"Windows {release} {edition} (build {version})".replace("  ", " ")
    return platform.platform() or None


def _battery():
    # None on machines without a battery
    return psutil.sensors_battery()


# =============================================================================
# SECTION 2: COLLECTOR
# =============================================================================


class DiagnosticsCollector:
    """
    Builds the DiagnosticsSnapshot for one run.

    Args:
        restore_points: Collaborator used to look up the last checkpoint time;
            when omitted the field stays empty
        disk_path: Path whose volume is measured (defaults to the system drive)
    """

    def __init__(
        self,
        restore_points: Optional[RestorePointService] = None,
        disk_path: Optional[str] = None,
    ):
        self.restore_points = restore_points
        self.disk_path = disk_path or system_drive()

    def collect(self) -> DiagnosticsSnapshot:
        """Capture the snapshot, log it and its advisories."""
        memory = _query("memory", psutil.virtual_memory)
        battery = _query("battery", _battery)

        snapshot = DiagnosticsSnapshot(
            captured_at=datetime.now().astimezone(),
            host_name=_query("host_name", _host_name),
            os_version=_query("os_version", _os_version),
            free_disk_bytes=_query(
                "free_disk", lambda: shutil.disk_usage(self.disk_path).free
            ),
            total_memory_bytes=memory.total if memory is not None else None,
            available_memory_bytes=memory.available if memory is not None else None,
            battery_percent=float(battery.percent) if battery is not None else None,
            on_ac_power=battery.power_plugged if battery is not None else None,
            last_checkpoint_time=self._last_checkpoint(),
        )

        log_snapshot(snapshot)
        log_advisories(snapshot)
        return snapshot

    def _last_checkpoint(self) -> Optional[datetime]:
        if self.restore_points is None:
            return None
        return _query("last_checkpoint", self.restore_points.last_created)


# =============================================================================
# SECTION 3: ADVISORIES AND LOGGING
# =============================================================================


def _gib(value: Optional[int]) -> str:
    return "unknown" if value is None else f"{value / GIB:.1f} GiB"


def advisories(snapshot: DiagnosticsSnapshot) -> List[str]:
    """Return the Warning-level advisory messages for a snapshot."""
    messages = []
    if snapshot.low_disk:
        messages.append(
            f"Low disk space: {_gib(snapshot.free_disk_bytes)} free "
            f"(recommended at least {_gib(LOW_DISK_THRESHOLD_BYTES)})"
        )
    if snapshot.on_ac_power is False:
        battery = (
            f"{snapshot.battery_percent:.0f}%"
            if snapshot.battery_percent is not None
            else "unknown charge"
        )
        suffix = (
            " and the charge is low"
            if snapshot.battery_percent is not None
            and snapshot.battery_percent < LOW_BATTERY_PERCENT
            else ""
        )
        messages.append(
            f"Running on battery ({battery}){suffix}; connect AC power before updating"
        )
    return messages


def log_advisories(snapshot: DiagnosticsSnapshot) -> List[str]:
    messages = advisories(snapshot)
    for message in messages:
        logger.warning(message)
    return messages


def log_snapshot(snapshot: DiagnosticsSnapshot) -> None:
    logger.info(
        f"Host: {snapshot.host_name or 'unknown'} | OS: {snapshot.os_version or 'unknown'}"
    )
    logger.info(
        f"Free disk: {_gib(snapshot.free_disk_bytes)} | "
        f"Memory: {_gib(snapshot.available_memory_bytes)} available of "
        f"{_gib(snapshot.total_memory_bytes)}"
    )
    if snapshot.battery_percent is not None:
        power = "AC power" if snapshot.on_ac_power else "battery"
        logger.info(f"Battery: {snapshot.battery_percent:.0f}% on {power}")
    if snapshot.last_checkpoint_time is not None:
        logger.info(f"Last restore point: {snapshot.last_checkpoint_time:%Y-%m-%d %H:%M}")
    else:
        logger.info("Last restore point: none found")
