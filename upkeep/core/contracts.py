"""
Contracts the orchestrator needs from its external collaborators.

Concrete Windows implementations live in ``upkeep.host``; tests provide
in-memory fakes that satisfy the same protocols.
"""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from .dataclasses import (
    DisplayAdapter,
    FirmwareInfo,
    InstallResult,
    RunReport,
    UpdateItem,
)
from .enums import TaskFrequency


class OsUpdateService(Protocol):
    def available(self) -> bool: ...

    def scan(self) -> List[UpdateItem]: ...

    def install(self, items: Sequence[UpdateItem]) -> InstallResult: ...

    def install_drivers(self, title_filter: str) -> InstallResult: ...


class PackageManager(Protocol):
    def available(self) -> bool: ...

    def upgrade_all(self) -> InstallResult: ...

    def upgrade_package(self, package_id: str) -> InstallResult: ...


class DisplayAdapterQuery(Protocol):
    def list_adapters(self) -> List[DisplayAdapter]: ...


class FirmwareQuery(Protocol):
    def read(self) -> FirmwareInfo: ...


class RestorePointService(Protocol):
    def create(self, description: str) -> None: ...

    def last_created(self) -> Optional[datetime]: ...


class TaskScheduler(Protocol):
    def register(
        self, name: str, command: Sequence[str], at: str, frequency: TaskFrequency
    ) -> None: ...


class PowerControl(Protocol):
    def restart(self, delay_seconds: int = 60) -> None: ...


class ReportTransport(Protocol):
    def send(self, report: RunReport, recipient: Optional[str]) -> bool: ...
