"""
Package-manager collaborator backed by winget.
"""

import re
from typing import Tuple

from loguru import logger

from ..core.dataclasses import InstallResult
from .shell import CommandResult, run_command, which

WINGET = "winget"

# winget HRESULTs, compared as unsigned 32-bit values
NO_APPLICABLE_UPGRADE = 0x8A15002B
NO_APPLICATIONS_FOUND = 0x8A150014

COMMON_FLAGS = (
    "--silent",
    "--accept-package-agreements",
    "--accept-source-agreements",
    "--disable-interactivity",
)

_INSTALLED_LINE = re.compile(r"^\s*Successfully installed", re.IGNORECASE)
_FAILED_LINE = re.compile(r"^\s*(Installer failed|Installation failed)", re.IGNORECASE)
_PACKAGE_LINE = re.compile(r"^\s*\(\d+/\d+\)\s+Found\s+(.+?)\s+\[", re.IGNORECASE)


def _unsigned(code: int) -> int:
    return code & 0xFFFFFFFF


def _parse_upgrade_output(output: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Pair ``(n/m) Found <name> [id]`` lines with their install result."""
    installed, failed = [], []
    current = None
    for line in output.splitlines():
        match = _PACKAGE_LINE.match(line)
        if match:
            current = match.group(1)
            continue
        if _INSTALLED_LINE.match(line):
            installed.append(current or "package")
            current = None
        elif _FAILED_LINE.match(line):
            failed.append(current or "package")
            current = None
    return tuple(installed), tuple(failed)


class WingetPackageManager:
    """Upgrades installed applications with winget."""

    def __init__(self, timeout: int):
        self.timeout = timeout

    def available(self) -> bool:
        return which(WINGET) is not None

    def upgrade_all(self) -> InstallResult:
        result = run_command(
            [WINGET, "upgrade", "--all", "--include-unknown", *COMMON_FLAGS],
            timeout=self.timeout,
        )
        return self._interpret(result, "all packages")

    def upgrade_package(self, package_id: str) -> InstallResult:
        result = run_command(
            [WINGET, "upgrade", "--id", package_id, "--exact", *COMMON_FLAGS],
            timeout=self.timeout,
        )
        return self._interpret(result, package_id)

    def _interpret(self, result: CommandResult, target: str) -> InstallResult:
        code = _unsigned(result.returncode)
        installed, failed = _parse_upgrade_output(result.stdout)

        if result.timed_out:
            return InstallResult(
                installed=installed,
                failed=failed or (target,),
                message=f"winget timed out after {self.timeout}s",
            )
        if code == NO_APPLICATIONS_FOUND:
            return InstallResult(applicable=False, message=f"{target} is not managed by winget")
        if code == NO_APPLICABLE_UPGRADE:
            return InstallResult(message=f"{target}: already up to date")
        if result.returncode != 0:
            logger.debug(f"winget exited with 0x{code:08X} for {target}")
            return InstallResult(
                installed=installed,
                failed=failed or (target,),
                message=f"winget exited with 0x{code:08X}: {result.tail(2)}",
            )
        return InstallResult(
            installed=installed,
            failed=failed,
            message=f"{len(installed)} package(s) upgraded" if installed else "nothing to upgrade",
        )
