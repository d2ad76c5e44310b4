"""
System Restore checkpoint collaborator.
"""

from datetime import datetime
from typing import Optional

from loguru import logger

from ..core.constants import QUERY_TIMEOUT
from ..core.exceptions import CheckpointError, CommandError
from .shell import powershell_json, run_powershell

RESTORE_POINT_TYPE = "MODIFY_SETTINGS"
CREATION_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class SystemRestoreService:
    """Creates and queries System Restore points."""

    def __init__(self, timeout: int = 600):
        self.timeout = timeout

    def create(self, description: str) -> None:
        safe = description.replace("'", "''")
        result = run_powershell(
            f"Checkpoint-Computer -Description '{safe}' "
            f"-RestorePointType {RESTORE_POINT_TYPE} -ErrorAction Stop",
            timeout=self.timeout,
        )
        if not result.ok:
            raise CheckpointError(
                f"Restore point creation failed: {result.tail() or result.returncode}",
                remediation="Enable System Protection for the system drive",
            )
        # Windows silently skips a restore point when one was made in the last 24h
        if "already been created" in result.stdout + result.stderr:
            logger.warning("A restore point was created recently; Windows skipped a new one")

    def last_created(self) -> Optional[datetime]:
        try:
            rows = powershell_json(
                "Get-ComputerRestorePoint | Sort-Object SequenceNumber "
                "| Select-Object -Last 1 @{n='CreationTime';"
                "e={$_.ConvertToDateTime($_.CreationTime).ToString('yyyy-MM-dd HH:mm:ss')}} "
                "| ConvertTo-Json",
                timeout=QUERY_TIMEOUT,
            )
        except CommandError as e:
            raise CheckpointError(f"Could not list restore points: {e.message}")

        if not rows or not rows[0].get("CreationTime"):
            return None
        try:
            return datetime.strptime(rows[0]["CreationTime"], CREATION_TIME_FORMAT)
        except ValueError:
            raise CheckpointError(f"Unexpected restore point time: {rows[0]['CreationTime']}")
