"""
Data classes for the maintenance orchestrator.

Defines the immutable containers passed between the diagnostics collector,
the pipeline runner and the reporting collaborators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple

from .constants import LOW_DISK_THRESHOLD_BYTES
from .enums import MethodStatus, RunStatus, StageStatus, UpdateScope


@dataclass(frozen=True)
class StageOutcome:
    """Result of running (or simulating) a single stage."""

    status: StageStatus
    detail: str = ""
    reboot_required: bool = False

    def __post_init__(self):
        if self.status is StageStatus.FAILED and not self.detail.strip():
            raise ValueError("Failed outcomes must describe their cause")

    @property
    def failed(self) -> bool:
        return self.status is StageStatus.FAILED

    @classmethod
    def success(cls, detail: str = "", reboot_required: bool = False) -> "StageOutcome":
        return cls(StageStatus.SUCCESS, detail, reboot_required)

    @classmethod
    def failure(cls, detail: str) -> "StageOutcome":
        return cls(StageStatus.FAILED, detail)

    @classmethod
    def no_hardware(cls, detail: str) -> "StageOutcome":
        return cls(StageStatus.SKIPPED_NO_HARDWARE, detail)

    @classmethod
    def dry_run(cls, detail: str) -> "StageOutcome":
        return cls(StageStatus.SKIPPED_DRY_RUN, detail)


@dataclass(frozen=True)
class MethodResult:
    """Result of one update method tried by a fallback chain."""

    method: str
    status: MethodStatus
    detail: str = ""
    reboot_required: bool = False

    def status_line(self) -> str:
        """Short audit line, e.g. ``package-manager: skipped (winget not found)``."""
        line = f"{self.method}: {self.status.value}"
        if self.detail:
            line += f" ({self.detail})"
        return line


@dataclass(frozen=True)
class DiagnosticsSnapshot:
    """
    Pre-flight capture of host state.

    Every field except ``captured_at`` is optional: a sub-query that cannot
    be answered leaves its field as None instead of failing collection.
    """

    captured_at: datetime
    host_name: Optional[str] = None
    os_version: Optional[str] = None
    free_disk_bytes: Optional[int] = None
    total_memory_bytes: Optional[int] = None
    available_memory_bytes: Optional[int] = None
    battery_percent: Optional[float] = None
    on_ac_power: Optional[bool] = None
    last_checkpoint_time: Optional[datetime] = None

    @property
    def low_disk(self) -> bool:
        return (
            self.free_disk_bytes is not None
            and self.free_disk_bytes < LOW_DISK_THRESHOLD_BYTES
        )


@dataclass(frozen=True)
class DisplayAdapter:
    """An installed display adapter and its driver."""

    name: str
    driver_version: Optional[str] = None
    vendor: Optional[str] = None

    def describe(self) -> str:
        return f"{self.name} {self.driver_version or 'unknown'}"


@dataclass(frozen=True)
class FirmwareInfo:
    """System manufacturer and BIOS/UEFI details."""

    manufacturer: Optional[str] = None
    model: Optional[str] = None
    bios_version: Optional[str] = None
    release_date: Optional[str] = None


@dataclass(frozen=True)
class UpdateItem:
    """One pending OS update."""

    title: str
    kb: Optional[str] = None
    size_bytes: Optional[int] = None


@dataclass(frozen=True)
class InstallResult:
    """Outcome reported by an install collaborator."""

    installed: Tuple[str, ...] = ()
    failed: Tuple[str, ...] = ()
    reboot_required: bool = False
    message: str = ""
    applicable: bool = True

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class RunContext:
    """
    Read-only state shared by every stage of one run.

    Built once by the session, handed to each stage action by reference and
    dropped when the run ends. Stages must not try to change it.
    """

    scope: UpdateScope
    dry_run: bool
    skip_reboot: bool
    logger: Any
    diagnostics: DiagnosticsSnapshot


@dataclass(frozen=True)
class StageRecord:
    """One entry of the run report: stage name, outcome and timing."""

    stage_name: str
    outcome: StageOutcome
    started_at: datetime
    finished_at: datetime

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass(frozen=True)
class RunReport:
    """Immutable summary of one pipeline execution."""

    scope: UpdateScope
    start_time: datetime
    end_time: datetime
    stages: Tuple[StageRecord, ...]
    diagnostics: DiagnosticsSnapshot
    status: RunStatus
    dry_run: bool = False
    network_reachable: Optional[bool] = None
    checkpoint_created: Optional[bool] = None

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def reboot_required(self) -> bool:
        return any(record.outcome.reboot_required for record in self.stages)

    @property
    def stage_names(self) -> List[str]:
        return [record.stage_name for record in self.stages]

    @property
    def failed_stages(self) -> List[StageRecord]:
        return [record for record in self.stages if record.outcome.failed]

    def outcome_for(self, stage_name: str) -> Optional[StageOutcome]:
        for record in self.stages:
            if record.stage_name == stage_name:
                return record.outcome
        return None


@dataclass
class ReportDelivery:
    """Tracks which transports accepted a report."""

    email_sent: bool = False
    webhook_sent: bool = False
    errors: List[str] = field(default_factory=list)
