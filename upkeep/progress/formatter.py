"""
Human-readable output formatting for console display.

Provides the run banner, the per-stage results table and the plain-text
report body used by the email transport.
"""

from typing import List

from ..core.constants import GIB
from ..core.dataclasses import RunReport
from ..core.enums import RunStatus, StageStatus

_STATUS_ICONS = {
    StageStatus.SUCCESS: "✅",
    StageStatus.SKIPPED_NO_HARDWARE: "⊘",
    StageStatus.SKIPPED_DRY_RUN: "🔍",
    StageStatus.FAILED: "❌",
}


def _size(value) -> str:
    return "unknown" if value is None else f"{value / GIB:.1f} GiB"


class HumanReadableFormatter:
    """
    Formats run results for human-readable console output.
    """

    @staticmethod
    def banner(title: str, width: int = 80) -> str:
        return f"{'=' * width}\n🎯 {title.upper()}\n{'=' * width}"

    @staticmethod
    def render_report(report: RunReport, width: int = 100, icons: bool = True) -> str:
        """
        Render the run report as a text table.

        Args:
            report: Finished run report
            width: Rule width in characters
            icons: Prefix statuses with emoji (off for email bodies)
        """
        lines: List[str] = []
        title = "MAINTENANCE RUN REPORT" + (" (DRY RUN)" if report.dry_run else "")
        lines.append(HumanReadableFormatter.banner(title, width))

        diag = report.diagnostics
        lines.append(f"Host:        {diag.host_name or 'unknown'}")
        lines.append(f"OS:          {diag.os_version or 'unknown'}")
        lines.append(f"Scope:       {report.scope.value}")
        lines.append(f"Started:     {report.start_time:%Y-%m-%d %H:%M:%S}")
        lines.append(f"Duration:    {report.duration:.1f}s")
        lines.append(f"Free disk:   {_size(diag.free_disk_bytes)}")
        if report.network_reachable is not None:
            lines.append(f"Network:     {'reachable' if report.network_reachable else 'unreachable'}")
        if report.checkpoint_created is not None:
            lines.append(f"Checkpoint:  {'created' if report.checkpoint_created else 'not created'}")

        lines.append("─" * width)
        lines.append(f"{'STAGE':<18} {'STATUS':<22} {'TIME':>8}  DETAIL")
        lines.append(f"{'─' * 18} {'─' * 22} {'─' * 8}  {'─' * (width - 52)}")
        for record in report.stages:
            status = record.outcome.status.value.upper()
            if icons:
                status = f"{_STATUS_ICONS.get(record.outcome.status, '')} {status}"
            lines.append(
                f"{record.stage_name:<18} {status:<22} {record.duration:>7.1f}s  "
                f"{record.outcome.detail}"
            )
        lines.append("─" * width)

        if report.status is RunStatus.SUCCESS:
            overall = "SUCCESS"
        else:
            overall = "ABORTED - a critical stage failed"
        lines.append(f"OVERALL STATUS: {overall}")

        failed = report.failed_stages
        if failed:
            lines.append(f"Failed stages ({len(failed)}):")
            for record in failed:
                lines.append(f"   • {record.stage_name}: {record.outcome.detail}")
        if report.reboot_required:
            lines.append("A restart is required to finish installing updates.")
        return "\n".join(lines)

    @staticmethod
    def print_report(report: RunReport) -> None:
        print("\n" + HumanReadableFormatter.render_report(report))
