"""
Task-scheduling collaborator backed by schtasks.exe.
"""

import subprocess
from typing import Sequence

from ..core.constants import QUERY_TIMEOUT
from ..core.enums import TaskFrequency
from ..core.exceptions import CommandError, SchedulingError
from .shell import run_command

SCHTASKS = "schtasks"


class SchtasksScheduler:
    """Registers the recurring maintenance task (overwriting any previous one)."""

    def register(
        self, name: str, command: Sequence[str], at: str, frequency: TaskFrequency
    ) -> None:
        task_run = subprocess.list2cmdline(list(command))
        try:
            result = run_command(
                [
                    SCHTASKS,
                    "/Create",
                    "/TN", name,
                    "/TR", task_run,
                    "/SC", frequency.value,
                    "/ST", at,
                    "/RL", "HIGHEST",
                    "/RU", "SYSTEM",
                    "/F",
                ],
                timeout=QUERY_TIMEOUT,
            )
        except CommandError as e:
            raise SchedulingError(f"Could not run {SCHTASKS}: {e.message}")

        if not result.ok:
            raise SchedulingError(
                f"Task registration failed: {result.tail() or result.returncode}"
            )
