"""
The fixed stage catalogue.

Each factory closes over the collaborator it needs and returns a Stage
with its criticality and dry-run description.

| Stage           | Criticality | Work                                           |
|-----------------|-------------|------------------------------------------------|
| windows-update  | ABORT       | scan and install OS updates                    |
| app-upgrade     | CONTINUE    | upgrade every package-manager application      |
| gpu-driver      | CONTINUE    | fallback chain over driver update methods      |
| cleanup         | CONTINUE    | empty temp and update-cache directories        |
| bios-guidance   | CONTINUE    | report firmware version and vendor guidance    |
"""

from pathlib import Path
from typing import List, Sequence

from ..core.constants import (
    FIRMWARE_GUIDANCE,
    GENERIC_FIRMWARE_GUIDANCE,
    GPU_DRIVER_DOWNLOAD_URL,
)
from ..core.contracts import (
    DisplayAdapterQuery,
    FirmwareQuery,
    OsUpdateService,
    PackageManager,
)
from ..core.dataclasses import FirmwareInfo, MethodResult, RunContext, StageOutcome
from ..core.enums import Criticality, StageStatus
from ..core.exceptions import StageError
from .cleanup import clean_directories
from .fallback_chain import FallbackChain, UpdateMethod
from .scopes import APP_UPGRADE, BIOS_GUIDANCE, CLEANUP, GPU_DRIVER, WINDOWS_UPDATE
from .stage import Stage

MB = 1024**2


def _join_titles(titles: Sequence[str], limit: int = 5) -> str:
    shown = ", ".join(titles[:limit])
    if len(titles) > limit:
        shown += f" (+{len(titles) - limit} more)"
    return shown


# =============================================================================
# SECTION 1: OS UPDATES
# =============================================================================


def windows_update_stage(os_update: OsUpdateService) -> Stage:
    def action(context: RunContext) -> StageOutcome:
        if not os_update.available():
            raise StageError(
                "PSWindowsUpdate module is not installed",
                remediation="Install-Module PSWindowsUpdate -Scope AllUsers",
            )

        context.logger.info("Scanning for Windows updates...")
        items = os_update.scan()
        if not items:
            return StageOutcome.success("No Windows updates available")

        context.logger.info(f"Installing {len(items)} Windows update(s)...")
        result = os_update.install(items)
        if not result.installed and not result.failed:
            return StageOutcome.failure(
                f"Installer reported no results for {len(items)} pending update(s)"
            )
        restart = "; restart required" if result.reboot_required else ""
        if result.failed:
            return StageOutcome(
                status=StageStatus.FAILED,
                detail=(
                    f"{len(result.failed)} of {len(items)} update(s) failed: "
                    f"{_join_titles(result.failed)}{restart}"
                ),
                reboot_required=result.reboot_required,
            )
        return StageOutcome.success(
            f"Installed {len(result.installed)} update(s): "
            f"{_join_titles(result.installed)}{restart}",
            reboot_required=result.reboot_required,
        )

    return Stage(
        name=WINDOWS_UPDATE,
        criticality=Criticality.ABORT,
        action=action,
        dry_run_description="Would scan Windows Update and install all available updates",
    )


# =============================================================================
# SECTION 2: APPLICATIONS
# =============================================================================


def app_upgrade_stage(package_manager: PackageManager) -> Stage:
    def action(context: RunContext) -> StageOutcome:
        if not package_manager.available():
            return StageOutcome.failure("winget is not installed (App Installer missing)")

        context.logger.info("Upgrading applications with winget...")
        result = package_manager.upgrade_all()
        if result.failed:
            return StageOutcome.failure(
                f"{len(result.failed)} package(s) failed to upgrade: "
                f"{_join_titles(result.failed)}; {result.message}"
            )
        if result.installed:
            return StageOutcome.success(
                f"Upgraded {len(result.installed)} package(s): {_join_titles(result.installed)}"
            )
        return StageOutcome.success(result.message or "All applications are up to date")

    return Stage(
        name=APP_UPGRADE,
        criticality=Criticality.CONTINUE,
        action=action,
        dry_run_description="Would upgrade all installed applications with winget",
    )


# =============================================================================
# SECTION 3: GPU DRIVERS
# =============================================================================


def package_manager_method(package_manager: PackageManager, package_id: str) -> UpdateMethod:
    def apply(context: RunContext) -> MethodResult:
        if not package_manager.available():
            return method.skipped("winget not available")
        result = package_manager.upgrade_package(package_id)
        if not result.applicable:
            return method.skipped(result.message)
        if result.failed:
            return method.failed(result.message or f"{package_id} upgrade failed")
        return method.succeeded(result.message or f"{package_id} upgraded")

    method = UpdateMethod("package-manager", apply)
    return method


def os_update_category_method(os_update: OsUpdateService, title_filter: str) -> UpdateMethod:
    def apply(context: RunContext) -> MethodResult:
        if not os_update.available():
            return method.skipped("PSWindowsUpdate not installed")
        result = os_update.install_drivers(title_filter)
        if not result.applicable:
            return method.skipped(result.message)
        if result.failed:
            return method.failed(f"driver install failed: {_join_titles(result.failed)}")
        return method.succeeded(
            f"installed {_join_titles(result.installed)}",
            reboot_required=result.reboot_required,
        )

    method = UpdateMethod("os-update-category", apply)
    return method


def manual_guidance_method(vendor_signature: str) -> UpdateMethod:
    if vendor_signature.lower() == "nvidia":
        guidance = f"download the latest driver from {GPU_DRIVER_DOWNLOAD_URL}"
    else:
        guidance = f"download the latest {vendor_signature} driver from the vendor's website"

    # Guidance never counts as an update
    method = UpdateMethod("manual-guidance", lambda context: method.skipped(guidance))
    return method


def gpu_driver_stage(
    display_adapters: DisplayAdapterQuery,
    package_manager: PackageManager,
    os_update: OsUpdateService,
    vendor_signature: str,
    package_id: str,
) -> Stage:
    chain = FallbackChain(
        methods=[
            package_manager_method(package_manager, package_id),
            os_update_category_method(os_update, vendor_signature),
            manual_guidance_method(vendor_signature),
        ],
        list_adapters=display_adapters.list_adapters,
        vendor_signature=vendor_signature,
    )
    return Stage(
        name=GPU_DRIVER,
        criticality=Criticality.CONTINUE,
        action=chain.execute,
        dry_run_description=(
            f"Would update the {vendor_signature} display driver via "
            + " -> ".join(method.name for method in chain.methods)
        ),
    )


# =============================================================================
# SECTION 4: CLEANUP
# =============================================================================


def cleanup_stage(paths: Sequence[Path]) -> Stage:
    paths = tuple(Path(p) for p in paths)

    def action(context: RunContext) -> StageOutcome:
        context.logger.info(f"Cleaning {len(paths)} temporary location(s)...")
        summary = clean_directories(paths)
        if summary.errors and summary.removed == 0:
            return StageOutcome.failure(
                f"Nothing could be removed; {len(summary.errors)} error(s), "
                f"first: {summary.errors[0]}"
            )
        detail = (
            f"Removed {summary.removed} item(s), freed {summary.freed_bytes / MB:.1f} MB "
            f"from {len(summary.scanned_paths)} location(s)"
        )
        if summary.errors:
            detail += f"; {len(summary.errors)} item(s) in use were left in place"
        return StageOutcome.success(detail)

    return Stage(
        name=CLEANUP,
        criticality=Criticality.CONTINUE,
        action=action,
        dry_run_description=(
            "Would delete temporary files from: " + ", ".join(str(p) for p in paths)
        ),
    )


# =============================================================================
# SECTION 5: FIRMWARE
# =============================================================================


def firmware_guidance(info: FirmwareInfo) -> str:
    manufacturer = (info.manufacturer or "").lower()
    for key, guidance in FIRMWARE_GUIDANCE.items():
        if key in manufacturer:
            return guidance
    return GENERIC_FIRMWARE_GUIDANCE


def bios_guidance_stage(firmware: FirmwareQuery) -> Stage:
    def action(context: RunContext) -> StageOutcome:
        info = firmware.read()
        system = " ".join(p for p in (info.manufacturer, info.model) if p) or "Unknown system"
        bios = info.bios_version or "unknown version"
        if info.release_date:
            bios += f" ({info.release_date})"
        return StageOutcome.success(
            f"{system}, BIOS {bios}. {firmware_guidance(info)}. "
            "Firmware is never flashed automatically."
        )

    return Stage(
        name=BIOS_GUIDANCE,
        criticality=Criticality.CONTINUE,
        action=action,
        dry_run_description="Would read BIOS/UEFI details and print vendor update guidance",
    )


# =============================================================================
# SECTION 6: CATALOGUE
# =============================================================================


def build_catalogue(services, settings) -> List[Stage]:
    """All stages, wired to the run's collaborators."""
    return [
        windows_update_stage(services.os_update),
        app_upgrade_stage(services.package_manager),
        gpu_driver_stage(
            services.display_adapters,
            services.package_manager,
            services.os_update,
            vendor_signature=settings.gpu_vendor_signature,
            package_id=settings.gpu_package_id,
        ),
        cleanup_stage(settings.cleanup_paths),
        bios_guidance_stage(services.firmware),
    ]
