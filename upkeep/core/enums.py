"""
Application enumerations for type safety and clear intent definitions.

Centralized enum definitions for update scopes, stage criticality and
outcome status values used throughout the maintenance orchestrator.
"""

from enum import Enum


class UpdateScope(str, Enum):
    """Update scopes selectable from the command line."""

    FULL = "Full"
    WINDOWS_ONLY = "WindowsOnly"
    APPS_ONLY = "AppsOnly"
    GPU = "GPU"
    BIOS = "BIOS"

    @classmethod
    def parse(cls, value: str) -> "UpdateScope":
        """Case-insensitive lookup used by the CLI."""
        for scope in cls:
            if scope.value.lower() == value.strip().lower():
                return scope
        raise ValueError(
            f"Unknown scope '{value}' (expected one of: "
            f"{', '.join(s.value for s in cls)})"
        )


class Criticality(Enum):
    """What a stage failure does to the rest of the run."""

    ABORT = "abort"
    CONTINUE = "continue"


class StageStatus(Enum):
    """Outcome status of a single stage."""

    SUCCESS = "success"
    SKIPPED_NO_HARDWARE = "skipped_no_hardware"
    SKIPPED_DRY_RUN = "skipped_dry_run"
    FAILED = "failed"


class MethodStatus(Enum):
    """Result of one method inside a fallback chain."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class RunStatus(Enum):
    """Overall status of a pipeline run."""

    SUCCESS = "success"
    ABORTED = "aborted"


class TaskFrequency(str, Enum):
    """Recurrence of the scheduled maintenance task."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
