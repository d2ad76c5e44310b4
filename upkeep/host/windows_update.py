"""
OS update collaborator backed by the PSWindowsUpdate PowerShell module.

Scans and installs Windows updates, and installs driver-category updates
for the GPU fallback chain.
"""

from typing import List, Sequence

from loguru import logger

from ..core.dataclasses import InstallResult, UpdateItem
from ..core.exceptions import CommandError
from .shell import powershell_json, run_powershell

MODULE_NAME = "PSWindowsUpdate"

_FAILED_RESULTS = {"failed", "aborted", "error"}


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class WindowsUpdateService:
    """
    Runs Windows Update scans and installs through PSWindowsUpdate.

    Reboots are never triggered here (``-IgnoreReboot``); the reboot decision
    is made once, after the whole run.
    """

    def __init__(self, timeout: int, query_timeout: int = 300):
        self.timeout = timeout
        self.query_timeout = query_timeout

    def available(self) -> bool:
        script = (
            f"Get-Module -ListAvailable -Name {MODULE_NAME} "
            f"| Select-Object -First 1 Name | ConvertTo-Json"
        )
        try:
            return bool(powershell_json(script, timeout=self.query_timeout))
        except CommandError as e:
            logger.debug(f"{MODULE_NAME} availability check failed: {e}")
            return False

    def scan(self) -> List[UpdateItem]:
        script = (
            f"Import-Module {MODULE_NAME}; "
            "Get-WindowsUpdate -MicrosoftUpdate "
            "| Select-Object Title,KB,Size | ConvertTo-Json -Depth 3"
        )
        items = []
        for row in powershell_json(script, timeout=self.timeout):
            title = str(row.get("Title") or "").strip()
            if not title:
                continue
            size = row.get("Size")
            items.append(
                UpdateItem(
                    title=title,
                    kb=(row.get("KB") or None),
                    size_bytes=size if isinstance(size, int) else None,
                )
            )
        logger.debug(f"Windows Update scan found {len(items)} update(s)")
        return items

    def install(self, items: Sequence[UpdateItem]) -> InstallResult:
        kbs = [item.kb for item in items if item.kb]
        selector = ""
        if kbs and len(kbs) == len(items):
            selector = " -KBArticleID " + ",".join(_quote(kb) for kb in kbs)
        script = (
            f"Import-Module {MODULE_NAME}; "
            f"Install-WindowsUpdate -MicrosoftUpdate -AcceptAll -IgnoreReboot{selector} "
            "| Select-Object Title,KB,Result | ConvertTo-Json -Depth 3"
        )
        return self._install(script)

    def install_drivers(self, title_filter: str) -> InstallResult:
        script = (
            f"Import-Module {MODULE_NAME}; "
            f"Install-WindowsUpdate -MicrosoftUpdate -Category Drivers "
            f"-Title {_quote(title_filter)} -AcceptAll -IgnoreReboot "
            "| Select-Object Title,KB,Result | ConvertTo-Json -Depth 3"
        )
        result = self._install(script)
        if not result.installed and not result.failed:
            return InstallResult(
                applicable=False,
                message=f"no {title_filter} driver offered by Windows Update",
            )
        return result

    def _install(self, script: str) -> InstallResult:
        rows = powershell_json(script, timeout=self.timeout)
        installed, failed = [], []
        for row in rows:
            title = str(row.get("Title") or row.get("KB") or "unnamed update")
            outcome = str(row.get("Result") or "").lower()
            if outcome in _FAILED_RESULTS:
                failed.append(title)
            else:
                installed.append(title)

        return InstallResult(
            installed=tuple(installed),
            failed=tuple(failed),
            reboot_required=bool(installed) and self.reboot_pending(),
        )

    def reboot_pending(self) -> bool:
        result = run_powershell(
            f"Import-Module {MODULE_NAME}; Get-WURebootStatus -Silent",
            timeout=self.query_timeout,
        )
        return result.ok and result.stdout.strip().lower() == "true"
