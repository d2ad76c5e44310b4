"""
Rollback checkpoint management.

Creates a System Restore point before the pipeline starts when rollback is
enabled. A checkpoint that cannot be created is an advisory condition: it
is logged at Warning level and the run goes ahead.
"""

from datetime import datetime

from loguru import logger

from ..core.contracts import RestorePointService
from ..core.enums import UpdateScope
from ..core.exceptions import UpkeepError


class CheckpointManager:
    """
    Creates the pre-run restore point.

    Args:
        restore_points: Restore-point collaborator
    """

    def __init__(self, restore_points: RestorePointService):
        self.restore_points = restore_points

    @staticmethod
    def description(scope: UpdateScope, when: datetime = None) -> str:
        when = when or datetime.now()
        return f"Upkeep {scope.value} maintenance {when:%Y-%m-%d %H:%M}"

    def create(self, scope: UpdateScope, dry_run: bool = False) -> bool:
        """
        Create a restore point for the run.

        Returns:
            True when a restore point was created, False otherwise (dry-run or failure)
        """
        description = self.description(scope)
        if dry_run:
            logger.info(f"[DRY RUN] Would create restore point '{description}'")
            return False

        logger.info(f"Creating restore point '{description}'...")
        try:
            self.restore_points.create(description)
        except UpkeepError as e:
            hint = f" ({e.remediation})" if e.remediation else ""
            logger.warning(f"No checkpoint available: {e.message}{hint}")
            return False

        logger.success("Restore point created")
        return True
