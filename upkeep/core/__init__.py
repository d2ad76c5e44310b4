"""
Core package for the maintenance orchestrator.

Contains fundamental data structures, constants, enumerations, exceptions
and collaborator contracts used throughout the project.
"""

from .dataclasses import (
    DiagnosticsSnapshot,
    DisplayAdapter,
    FirmwareInfo,
    InstallResult,
    MethodResult,
    ReportDelivery,
    RunContext,
    RunReport,
    StageOutcome,
    StageRecord,
    UpdateItem,
)
from .enums import (
    Criticality,
    MethodStatus,
    RunStatus,
    StageStatus,
    TaskFrequency,
    UpdateScope,
)
from .exceptions import (
    CheckpointError,
    CommandError,
    CommandNotFoundError,
    ConfigurationError,
    PreconditionError,
    PrivilegeError,
    ReportDeliveryError,
    SchedulingError,
    ScopeResolutionError,
    StageError,
    UpkeepError,
)
from .constants import (
    GIB,
    LOW_DISK_THRESHOLD_BYTES,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECTIVITY_TIMEOUT,
)

__all__ = [
    # Data classes
    "DiagnosticsSnapshot",
    "DisplayAdapter",
    "FirmwareInfo",
    "InstallResult",
    "MethodResult",
    "ReportDelivery",
    "RunContext",
    "RunReport",
    "StageOutcome",
    "StageRecord",
    "UpdateItem",
    # Enums
    "Criticality",
    "MethodStatus",
    "RunStatus",
    "StageStatus",
    "TaskFrequency",
    "UpdateScope",
    # Exceptions
    "CheckpointError",
    "CommandError",
    "CommandNotFoundError",
    "ConfigurationError",
    "PreconditionError",
    "PrivilegeError",
    "ReportDeliveryError",
    "SchedulingError",
    "ScopeResolutionError",
    "StageError",
    "UpkeepError",
    # Constants
    "GIB",
    "LOW_DISK_THRESHOLD_BYTES",
    "DEFAULT_COMMAND_TIMEOUT",
    "DEFAULT_CONNECTIVITY_TIMEOUT",
]
