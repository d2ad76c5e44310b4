"""
Concrete host collaborators.

Wraps the Windows tooling the orchestrator drives (PSWindowsUpdate, winget,
CIM queries, System Restore, schtasks, shutdown) behind the contracts in
``upkeep.core.contracts``.
"""

from dataclasses import dataclass

from ..core.contracts import (
    DisplayAdapterQuery,
    FirmwareQuery,
    OsUpdateService,
    PackageManager,
    PowerControl,
    RestorePointService,
    TaskScheduler,
)
from .inventory import CimDisplayAdapterQuery, CimFirmwareQuery
from .package_manager import WingetPackageManager
from .power import ShutdownPowerControl
from .restore_points import SystemRestoreService
from .scheduler import SchtasksScheduler
from .shell import CommandResult, run_command, run_powershell
from .windows_update import WindowsUpdateService


@dataclass(frozen=True)
class HostServices:
    """The set of collaborators one run talks to."""

    os_update: OsUpdateService
    package_manager: PackageManager
    display_adapters: DisplayAdapterQuery
    firmware: FirmwareQuery
    restore_points: RestorePointService
    scheduler: TaskScheduler
    power: PowerControl


def windows_services(settings) -> HostServices:
    """Build the Windows collaborators from settings."""
    return HostServices(
        os_update=WindowsUpdateService(timeout=settings.os_update_timeout),
        package_manager=WingetPackageManager(timeout=settings.command_timeout),
        display_adapters=CimDisplayAdapterQuery(),
        firmware=CimFirmwareQuery(),
        restore_points=SystemRestoreService(),
        scheduler=SchtasksScheduler(),
        power=ShutdownPowerControl(),
    )


__all__ = [
    "CommandResult",
    "HostServices",
    "run_command",
    "run_powershell",
    "windows_services",
]
