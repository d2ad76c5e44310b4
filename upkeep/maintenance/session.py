"""
One complete maintenance run.

Order of work:

1. collect the diagnostics snapshot (before anything mutates the host)
2. probe connectivity (advisory only)
3. create the rollback checkpoint when requested
4. run the pipeline for the selected scope
5. register the recurring task when requested
6. write the JSON report and hand it to the report transport

Failures in steps 3, 5 and 6 are logged and never change the run status.
"""

import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config import RunOptions, Settings
from ..connectivity.reachability import probe_connectivity
from ..core.contracts import ReportTransport
from ..core.dataclasses import RunContext, RunReport
from ..core.enums import UpdateScope
from ..core.exceptions import SchedulingError
from ..progress.report_sender import write_report_json
from ..validation.diagnostics import DiagnosticsCollector
from .checkpoint import CheckpointManager
from .pipeline import PipelineRunner
from .stages import build_catalogue


def scheduled_command(options: RunOptions) -> List[str]:
    """Command line for the recurring task: always Full scope, never prompts to reboot."""
    command = [sys.executable, "-m", "upkeep", "--scope", UpdateScope.FULL.value, "--skip-reboot"]
    if options.log_path is not None:
        command += ["--log-path", str(options.log_path)]
    return command


def default_report_path(settings: Settings, when: datetime) -> Path:
    return Path(settings.report_dir) / f"upkeep-report-{when:%Y%m%d-%H%M%S}.json"


def register_schedule(services, settings: Settings, options: RunOptions) -> bool:
    if options.dry_run:
        logger.info(
            f"[DRY RUN] Would register task '{settings.task_name}' "
            f"({settings.task_frequency.value} at {options.schedule_time})"
        )
        return False
    try:
        services.scheduler.register(
            settings.task_name,
            scheduled_command(options),
            options.schedule_time,
            settings.task_frequency,
        )
    except SchedulingError as e:
        logger.error(f"Scheduled task not registered: {e.message}")
        return False
    logger.success(
        f"Scheduled task '{settings.task_name}' registered "
        f"({settings.task_frequency.value} at {options.schedule_time})"
    )
    return True


def run_maintenance(
    options: RunOptions,
    settings: Settings,
    services,
    transport: Optional[ReportTransport] = None,
    collector: Optional[DiagnosticsCollector] = None,
    runner: Optional[PipelineRunner] = None,
) -> RunReport:
    """
    Execute one maintenance run end to end.

    Args:
        options: Validated run options
        settings: Application settings
        services: Host collaborators (``upkeep.host.HostServices``)
        transport: Report transport; None skips delivery
        collector: Diagnostics collector (defaults to one using the restore-point service)
        runner: Pipeline runner (defaults to the full stage catalogue)

    Returns:
        The final, immutable RunReport
    """
    logger.info(
        f"Maintenance run starting: scope={options.scope.value} dry_run={options.dry_run} "
        f"skip_reboot={options.skip_reboot} rollback={options.enable_rollback}"
    )

    collector = collector or DiagnosticsCollector(restore_points=services.restore_points)
    snapshot = collector.collect()

    reachable = probe_connectivity(
        settings.connectivity_host,
        timeout=settings.connectivity_timeout,
        port=settings.connectivity_port,
    )

    context = RunContext(
        scope=options.scope,
        dry_run=options.dry_run,
        skip_reboot=options.skip_reboot,
        logger=logger.bind(scope=options.scope.value),
        diagnostics=snapshot,
    )

    checkpoint_created = None
    if options.enable_rollback:
        checkpoint_created = CheckpointManager(services.restore_points).create(
            options.scope, dry_run=options.dry_run
        )

    runner = runner or PipelineRunner(build_catalogue(services, settings))
    report = replace(
        runner.run(options.scope, context),
        network_reachable=reachable,
        checkpoint_created=checkpoint_created,
    )

    if options.schedule_task:
        register_schedule(services, settings, options)

    report_path = options.report_path or default_report_path(settings, report.start_time)
    try:
        write_report_json(report, report_path)
    except OSError as e:
        logger.error(f"Could not write run report to {report_path}: {e}")

    if transport is not None:
        transport.send(report, options.email_report)

    return report
