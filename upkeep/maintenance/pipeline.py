"""
Pipeline runner: sequences stages for a scope and applies the failure policy.

Stages run strictly one after another in the order of the static scope
table. Under dry-run every stage takes its simulation path; otherwise the
real action runs and any exception escaping it becomes a FAILED outcome.
A FAILED outcome from an ABORT stage ends the run (remaining stages are
not attempted); from a CONTINUE stage it is logged and the run proceeds.
No stage is retried by the runner.
"""

from datetime import datetime
from typing import Callable, List, Mapping, Sequence, Tuple

from ..core.dataclasses import RunContext, RunReport, StageOutcome, StageRecord
from ..core.enums import Criticality, RunStatus, StageStatus, UpdateScope
from ..core.exceptions import ScopeResolutionError, UpkeepError
from .scopes import SCOPE_TABLE, resolve_scope
from .stage import Stage


def _now() -> datetime:
    return datetime.now().astimezone()


class PipelineRunner:
    """
    Runs the stage list selected by a scope.

    Args:
        stages: Stage catalogue; names must be unique
        scope_table: Scope → ordered stage names
        clock: Timestamp source (tests pass a fake)
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        scope_table: Mapping[UpdateScope, Tuple[str, ...]] = SCOPE_TABLE,
        clock: Callable[[], datetime] = _now,
    ):
        catalogue = {}
        for stage in stages:
            if stage.name in catalogue:
                raise ValueError(f"Duplicate stage name: {stage.name}")
            catalogue[stage.name] = stage
        self.catalogue = catalogue
        self.scope_table = scope_table
        self.clock = clock

    def stages_for(self, scope: UpdateScope) -> List[Stage]:
        """
        Raises:
            ScopeResolutionError: scope unknown or refers to an undefined stage
        """
        names = resolve_scope(scope, self.scope_table)
        missing = [name for name in names if name not in self.catalogue]
        if missing:
            raise ScopeResolutionError(
                f"Scope {scope.value} refers to undefined stage(s): {', '.join(missing)}"
            )
        return [self.catalogue[name] for name in names]

    def run(self, scope: UpdateScope, context: RunContext) -> RunReport:
        """
        Execute the scope's stages and return exactly one report.

        Args:
            scope: Update scope selecting the stage list
            context: Read-only run context shared by every stage

        Returns:
            RunReport with one record per attempted stage
        """
        stages = self.stages_for(scope)
        log = context.logger
        start_time = self.clock()
        records: List[StageRecord] = []
        status = RunStatus.SUCCESS

        log.info(
            f"Running {len(stages)} stage(s) for scope {scope.value}: "
            f"{', '.join(stage.name for stage in stages)}"
            + (" [DRY RUN]" if context.dry_run else "")
        )

        for index, stage in enumerate(stages, start=1):
            log.info(f"▶ [{index}/{len(stages)}] {stage.name}")
            started_at = self.clock()
            outcome = self._execute(stage, context)
            records.append(StageRecord(stage.name, outcome, started_at, self.clock()))
            self._log_outcome(stage, outcome, log)

            if outcome.failed and stage.criticality is Criticality.ABORT:
                remaining = [s.name for s in stages[index:]]
                log.error(
                    f"Aborting run: critical stage {stage.name} failed"
                    + (f"; not attempted: {', '.join(remaining)}" if remaining else "")
                )
                status = RunStatus.ABORTED
                break

        return RunReport(
            scope=scope,
            start_time=start_time,
            end_time=self.clock(),
            stages=tuple(records),
            diagnostics=context.diagnostics,
            status=status,
            dry_run=context.dry_run,
        )

    def _execute(self, stage: Stage, context: RunContext) -> StageOutcome:
        if context.dry_run:
            return stage.simulate()
        try:
            outcome = stage.action(context)
        except UpkeepError as e:
            detail = (e.message or "").strip() or type(e).__name__
            if e.remediation:
                detail += f" ({e.remediation})"
            return StageOutcome.failure(detail)
        except Exception as e:  # recorded as a stage failure, policy applied by caller
            context.logger.opt(exception=e).debug(f"Stage {stage.name} raised")
            return StageOutcome.failure(f"{type(e).__name__}: {e}".rstrip(": "))

        if not isinstance(outcome, StageOutcome):
            return StageOutcome.failure(
                f"Stage returned {type(outcome).__name__} instead of an outcome"
            )
        if outcome.status is StageStatus.SKIPPED_DRY_RUN:
            return StageOutcome.failure("Stage reported a dry-run skip outside dry-run")
        return outcome

    @staticmethod
    def _log_outcome(stage: Stage, outcome: StageOutcome, log) -> None:
        detail = outcome.detail or outcome.status.value
        if outcome.status is StageStatus.SUCCESS:
            log.success(f"{stage.name}: {detail}")
        elif outcome.status is StageStatus.FAILED:
            log.error(f"{stage.name} failed: {detail}")
            if stage.criticality is Criticality.CONTINUE:
                log.warning(f"{stage.name} is non-critical; continuing with the next stage")
        else:
            log.info(f"{stage.name} skipped: {detail}")
