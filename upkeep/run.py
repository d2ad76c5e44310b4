"""
Host Maintenance Orchestrator - command line entry point.

Sequences OS patching, application upgrades, GPU driver refresh, cleanup
and firmware guidance behind pre-flight diagnostics and an optional
restore point, then prints and delivers an auditable run report.

Exit statuses:
    0   run finished with status Success
    1   precondition failure (invalid options, log file, no admin rights)
    2   run aborted by a critical stage failure
    130 interrupted
"""

import argparse
import sys
from typing import Callable, List, Optional

from loguru import logger
from pydantic import ValidationError

from .config import RunOptions, load_settings
from .core.dataclasses import RunReport
from .core.enums import RunStatus, UpdateScope
from .core.exceptions import CommandError, PreconditionError
from .host import windows_services
from .maintenance.session import run_maintenance
from .progress.formatter import HumanReadableFormatter
from .progress.log_sink import configure_logging
from .progress.report_sender import ReportSender
from .validation.privilege import require_admin

EXIT_SUCCESS = 0
EXIT_PRECONDITION = 1
EXIT_ABORTED = 2
EXIT_INTERRUPTED = 130

RESTART_DELAY_SECONDS = 60


# =============================================================================
# SECTION 1: ARGUMENT PARSING
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upkeep",
        description="Host maintenance orchestrator: updates, drivers, cleanup and reporting",
    )
    parser.add_argument(
        "--scope",
        default=UpdateScope.FULL.value,
        help=f"Update scope: {' | '.join(s.value for s in UpdateScope)} (default: Full)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Simulate every stage without changing the host"
    )
    parser.add_argument(
        "--skip-reboot", action="store_true", help="Never prompt for a restart after the run"
    )
    parser.add_argument(
        "--enable-rollback",
        action="store_true",
        help="Create a System Restore point before any stage runs",
    )
    parser.add_argument(
        "--schedule-task",
        action="store_true",
        help="Register a recurring Full-scope run after this one",
    )
    parser.add_argument(
        "--schedule-time", default="03:00", help="Time of day for the recurring run (HH:MM)"
    )
    parser.add_argument("--log-path", default=None, help="Append-only audit log file")
    parser.add_argument("--email-report", default=None, help="Email the run report to ADDRESS")
    parser.add_argument("--report-path", default=None, help="Where to write the JSON report")
    parser.add_argument("--config", default=None, help="YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Show debug output on the console")
    return parser


def options_from_args(args: argparse.Namespace) -> RunOptions:
    """
    Raises:
        pydantic.ValidationError: invalid scope, schedule time or address
    """
    return RunOptions(
        scope=args.scope,
        dry_run=args.dry_run,
        skip_reboot=args.skip_reboot,
        enable_rollback=args.enable_rollback,
        schedule_task=args.schedule_task,
        schedule_time=args.schedule_time,
        log_path=args.log_path,
        email_report=args.email_report,
        report_path=args.report_path,
    )


def _validation_summary(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'options'}: {e['msg']}" for e in error.errors()
    )


# =============================================================================
# SECTION 2: POST-RUN RESTART
# =============================================================================


def offer_restart(
    report: RunReport,
    options: RunOptions,
    power,
    ask: Callable[[str], str] = input,
    interactive: Optional[bool] = None,
) -> bool:
    """
    Prompt for a restart when an update asked for one.

    Returns:
        True when a restart was requested from the power collaborator
    """
    if not report.reboot_required or options.skip_reboot or options.dry_run:
        return False

    if interactive is None:
        interactive = sys.stdin is not None and sys.stdin.isatty()
    if not interactive:
        logger.warning("A restart is required to finish installing updates")
        return False

    try:
        answer = ask("A restart is required. Restart now? [y/N] ")
    except EOFError:
        answer = ""
    if answer.strip().lower() not in ("y", "yes"):
        logger.warning("Restart postponed; updates finish installing on the next restart")
        return False

    try:
        power.restart(RESTART_DELAY_SECONDS)
    except CommandError as e:
        logger.error(f"Restart could not be scheduled: {e.message}")
        return False
    logger.info(f"Restarting in {RESTART_DELAY_SECONDS}s")
    return True


# =============================================================================
# SECTION 3: MAIN
# =============================================================================


def main(argv: Optional[List[str]] = None, services=None) -> int:
    """
    Parse arguments, check preconditions and run the maintenance session.

    Args:
        argv: Argument list (defaults to ``sys.argv[1:]``)
        services: Host collaborators; defaults to the Windows implementations
    """
    args = build_parser().parse_args(argv)
    configure_logging(None, args.verbose)

    try:
        settings = load_settings(args.config)
        options = options_from_args(args)
    except ValidationError as e:
        logger.error(f"Invalid options: {_validation_summary(e)}")
        return EXIT_PRECONDITION
    except PreconditionError as e:
        logger.error(e.message)
        return EXIT_PRECONDITION

    try:
        configure_logging(options.log_path or settings.log_path, args.verbose)
        require_admin()
    except PreconditionError as e:
        logger.error(e.message + (f" - {e.remediation}" if e.remediation else ""))
        return EXIT_PRECONDITION

    services = services or windows_services(settings)
    try:
        report = run_maintenance(options, settings, services, transport=ReportSender(settings))
    except PreconditionError as e:
        logger.error(e.message)
        return EXIT_PRECONDITION
    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        return EXIT_INTERRUPTED

    HumanReadableFormatter.print_report(report)
    if report.status is RunStatus.SUCCESS:
        logger.success(f"Run finished: SUCCESS in {report.duration:.1f}s")
    else:
        logger.error(f"Run finished: ABORTED after {report.duration:.1f}s")

    offer_restart(report, options, services.power)
    return EXIT_SUCCESS if report.status is RunStatus.SUCCESS else EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
