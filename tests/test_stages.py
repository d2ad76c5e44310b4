from types import SimpleNamespace

import pytest

from upkeep.core.dataclasses import FirmwareInfo, InstallResult, UpdateItem
from upkeep.core.enums import Criticality, StageStatus
from upkeep.core.exceptions import StageError
from upkeep.maintenance.scopes import SCOPE_TABLE
from upkeep.maintenance.stages import (
    app_upgrade_stage,
    bios_guidance_stage,
    build_catalogue,
    cleanup_stage,
    firmware_guidance,
    gpu_driver_stage,
    windows_update_stage,
)

from conftest import (
    INTEL,
    NVIDIA,
    NVIDIA_UPDATED,
    FakeDisplayAdapters,
    FakeFirmware,
    FakeOsUpdate,
    FakePackageManager,
    make_context,
)

CU = UpdateItem("2026-10 Cumulative Update for Windows 11", "KB5044284")
DEFENDER = UpdateItem("Security Intelligence Update for Microsoft Defender", "KB2267602")


# =============================================================================
# windows-update
# =============================================================================


def test_windows_update_is_abort_critical():
    assert windows_update_stage(FakeOsUpdate()).criticality is Criticality.ABORT


def test_windows_update_installs_everything_found(log_records):
    os_update = FakeOsUpdate(
        items=[CU, DEFENDER],
        install_result=InstallResult(installed=(CU.title, DEFENDER.title), reboot_required=True),
    )

    outcome = windows_update_stage(os_update).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.reboot_required is True
    assert outcome.detail.startswith("Installed 2 update(s)")
    assert os_update.calls == ["scan", "install"]


def test_windows_update_nothing_pending(log_records):
    os_update = FakeOsUpdate(items=[])

    outcome = windows_update_stage(os_update).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.detail == "No Windows updates available"
    assert os_update.calls == ["scan"]


def test_windows_update_partial_failure(log_records):
    os_update = FakeOsUpdate(
        items=[CU, DEFENDER],
        install_result=InstallResult(installed=(DEFENDER.title,), failed=(CU.title,)),
    )

    outcome = windows_update_stage(os_update).action(make_context())

    assert outcome.status is StageStatus.FAILED
    assert "1 of 2 update(s) failed" in outcome.detail


def test_windows_update_empty_install_result_is_a_failure(log_records):
    os_update = FakeOsUpdate(items=[CU], install_result=InstallResult())

    outcome = windows_update_stage(os_update).action(make_context())

    assert outcome.status is StageStatus.FAILED
    assert outcome.detail == "Installer reported no results for 1 pending update(s)"


def test_windows_update_without_module_raises():
    with pytest.raises(StageError) as info:
        windows_update_stage(FakeOsUpdate(available=False)).action(make_context())
    assert "Install-Module PSWindowsUpdate" in info.value.remediation


# =============================================================================
# app-upgrade
# =============================================================================


def test_app_upgrade_reports_upgraded_packages(log_records):
    pm = FakePackageManager(upgrade_result=InstallResult(installed=("Git.Git", "7zip.7zip")))

    outcome = app_upgrade_stage(pm).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.detail == "Upgraded 2 package(s): Git.Git, 7zip.7zip"


def test_app_upgrade_without_winget_fails(log_records):
    outcome = app_upgrade_stage(FakePackageManager(available=False)).action(make_context())

    assert outcome.status is StageStatus.FAILED
    assert "winget" in outcome.detail


def test_app_upgrade_failed_packages(log_records):
    pm = FakePackageManager(
        upgrade_result=InstallResult(failed=("Zoom.Zoom",), message="installer exit code 1603")
    )

    outcome = app_upgrade_stage(pm).action(make_context())

    assert outcome.failed
    assert "Zoom.Zoom" in outcome.detail


# =============================================================================
# gpu-driver
# =============================================================================


def test_gpu_stage_prefers_package_manager(log_records):
    pm = FakePackageManager(package_result=InstallResult(installed=("Nvidia.GeForceExperience",)))
    os_update = FakeOsUpdate()
    adapters = FakeDisplayAdapters([NVIDIA], [NVIDIA_UPDATED])

    stage = gpu_driver_stage(adapters, pm, os_update, "NVIDIA", "Nvidia.GeForceExperience")
    outcome = stage.action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.detail.startswith("Updated via package-manager")
    assert os_update.calls == []


def test_gpu_stage_falls_back_to_os_update_category(log_records):
    pm = FakePackageManager()  # package not managed by winget
    os_update = FakeOsUpdate(
        driver_result=InstallResult(installed=("NVIDIA - Display - 32.0.15.6094",), reboot_required=True)
    )

    stage = gpu_driver_stage(FakeDisplayAdapters([NVIDIA]), pm, os_update, "NVIDIA", "Nvidia.GeForceExperience")
    outcome = stage.action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.reboot_required is True
    assert "package-manager: skipped (not managed by winget)" in outcome.detail
    assert os_update.calls == [("install_drivers", "NVIDIA")]


def test_gpu_stage_with_nothing_applicable_fails_with_guidance(log_records):
    stage = gpu_driver_stage(
        FakeDisplayAdapters([NVIDIA]), FakePackageManager(), FakeOsUpdate(), "NVIDIA", "Nvidia.GeForceExperience"
    )

    outcome = stage.action(make_context())

    assert outcome.status is StageStatus.FAILED
    assert outcome.detail.startswith("no method applicable")
    assert "manual-guidance: skipped (download the latest driver from" in outcome.detail


def test_gpu_stage_without_hardware(log_records):
    pm = FakePackageManager()
    stage = gpu_driver_stage(FakeDisplayAdapters([INTEL]), pm, FakeOsUpdate(), "NVIDIA", "Nvidia.GeForceExperience")

    outcome = stage.action(make_context())

    assert outcome.status is StageStatus.SKIPPED_NO_HARDWARE
    assert pm.calls == []


def test_gpu_stage_dry_run_description_names_the_chain():
    stage = gpu_driver_stage(
        FakeDisplayAdapters(), FakePackageManager(), FakeOsUpdate(), "NVIDIA", "Nvidia.GeForceExperience"
    )
    assert stage.dry_run_description.endswith("package-manager -> os-update-category -> manual-guidance")


# =============================================================================
# cleanup
# =============================================================================


def test_cleanup_empties_directories_and_keeps_them(tmp_path, log_records):
    temp = tmp_path / "Temp"
    (temp / "sub").mkdir(parents=True)
    (temp / "a.tmp").write_bytes(b"x" * 2048)
    (temp / "sub" / "b.log").write_bytes(b"y" * 1024)

    outcome = cleanup_stage([temp, tmp_path / "missing"]).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.detail.startswith("Removed 2 item(s)")
    assert temp.is_dir()
    assert list(temp.iterdir()) == []


def test_cleanup_with_nothing_to_do(tmp_path, log_records):
    outcome = cleanup_stage([tmp_path]).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert outcome.detail.startswith("Removed 0 item(s)")


# =============================================================================
# bios-guidance
# =============================================================================


def test_bios_guidance_reports_firmware_and_never_flashes(log_records):
    outcome = bios_guidance_stage(FakeFirmware()).action(make_context())

    assert outcome.status is StageStatus.SUCCESS
    assert "Dell Inc. XPS 15 9530, BIOS 1.12.0 (2026-03-02)" in outcome.detail
    assert "never flashed automatically" in outcome.detail


@pytest.mark.parametrize(
    "manufacturer, expected",
    [
        ("LENOVO", "lenovo"),
        ("Micro-Star International Co., Ltd.", "micro-star"),
        ("HP", "hp"),
        ("Hewlett-Packard", "hp"),
    ],
)
def test_firmware_guidance_matches_manufacturer(manufacturer, expected):
    from upkeep.core.constants import FIRMWARE_GUIDANCE

    assert firmware_guidance(FirmwareInfo(manufacturer=manufacturer)) == FIRMWARE_GUIDANCE[expected]


def test_firmware_guidance_generic_fallback():
    from upkeep.core.constants import GENERIC_FIRMWARE_GUIDANCE

    assert firmware_guidance(FirmwareInfo()) == GENERIC_FIRMWARE_GUIDANCE


# =============================================================================
# catalogue
# =============================================================================


def test_catalogue_covers_the_scope_table(fake_services):
    settings = SimpleNamespace(
        gpu_vendor_signature="NVIDIA", gpu_package_id="Nvidia.GeForceExperience", cleanup_paths=[]
    )
    names = {stage.name for stage in build_catalogue(fake_services, settings)}

    for stage_names in SCOPE_TABLE.values():
        assert set(stage_names) <= names
    assert all(
        stage.criticality is Criticality.CONTINUE
        for stage in build_catalogue(fake_services, settings)
        if stage.name != "windows-update"
    )
