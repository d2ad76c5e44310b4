"""
The Stage model: one named unit of maintenance work.
"""

from dataclasses import dataclass
from typing import Callable

from ..core.dataclasses import RunContext, StageOutcome
from ..core.enums import Criticality

StageAction = Callable[[RunContext], StageOutcome]


@dataclass(frozen=True)
class Stage:
    """
    A statically defined pipeline stage.

    Attributes:
        name: Identifier, unique within a pipeline
        criticality: ABORT stops the run when the stage fails, CONTINUE logs and proceeds
        action: Performs the work and returns an outcome (or raises)
        dry_run_description: What the action would do; reported verbatim under dry-run
    """

    name: str
    criticality: Criticality
    action: StageAction
    dry_run_description: str

    def simulate(self) -> StageOutcome:
        """Dry-run path: no side effects, deterministic detail."""
        return StageOutcome.dry_run(self.dry_run_description)
