from datetime import datetime, timezone

import pytest
from loguru import logger

from upkeep.core.constants import GIB
from upkeep.core.dataclasses import (
    DiagnosticsSnapshot,
    DisplayAdapter,
    FirmwareInfo,
    InstallResult,
    RunContext,
    UpdateItem,
)
from upkeep.core.enums import UpdateScope
from upkeep.core.exceptions import CheckpointError
from upkeep.host import HostServices


@pytest.fixture
def log_records():
    """Capture loguru records (replaces every other sink for the test)."""
    records = []
    logger.remove()
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def make_snapshot(free_disk_bytes=50 * GIB, **overrides) -> DiagnosticsSnapshot:
    values = dict(
        captured_at=datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc),
        host_name="DESKTOP-TEST",
        os_version="Windows 11 Pro (build 10.0.22631)",
        free_disk_bytes=free_disk_bytes,
        total_memory_bytes=16 * GIB,
        available_memory_bytes=8 * GIB,
    )
    values.update(overrides)
    return DiagnosticsSnapshot(**values)


def make_context(dry_run=False, scope=UpdateScope.FULL, snapshot=None) -> RunContext:
    return RunContext(
        scope=scope,
        dry_run=dry_run,
        skip_reboot=False,
        logger=logger.bind(scope=scope.value),
        diagnostics=snapshot or make_snapshot(),
    )


class FakeOsUpdate:
    def __init__(self, items=None, install_result=None, driver_result=None, available=True):
        self.items = list(items or [])
        self.install_result = install_result or InstallResult(
            installed=tuple(i.title for i in self.items)
        )
        self.driver_result = driver_result or InstallResult(applicable=False, message="no driver offered")
        self._available = available
        self.calls = []

    def available(self):
        return self._available

    def scan(self):
        self.calls.append("scan")
        return list(self.items)

    def install(self, items):
        self.calls.append("install")
        return self.install_result

    def install_drivers(self, title_filter):
        self.calls.append(("install_drivers", title_filter))
        return self.driver_result


class FakePackageManager:
    def __init__(self, upgrade_result=None, package_result=None, available=True):
        self.upgrade_result = upgrade_result or InstallResult(message="nothing to upgrade")
        self.package_result = package_result or InstallResult(
            applicable=False, message="not managed by winget"
        )
        self._available = available
        self.calls = []

    def available(self):
        return self._available

    def upgrade_all(self):
        self.calls.append("upgrade_all")
        return self.upgrade_result

    def upgrade_package(self, package_id):
        self.calls.append(("upgrade_package", package_id))
        return self.package_result


class FakeDisplayAdapters:
    def __init__(self, *snapshots):
        # successive calls return successive adapter lists; the last one repeats
        self.snapshots = [list(s) for s in snapshots] or [[]]
        self.calls = 0

    def list_adapters(self):
        index = min(self.calls, len(self.snapshots) - 1)
        self.calls += 1
        return list(self.snapshots[index])


class FakeFirmware:
    def __init__(self, info=None):
        self.info = info or FirmwareInfo(
            manufacturer="Dell Inc.", model="XPS 15 9530", bios_version="1.12.0", release_date="2026-03-02"
        )

    def read(self):
        return self.info


class FakeRestorePoints:
    def __init__(self, fail=False, last=None):
        self.fail = fail
        self.last = last
        self.created = []

    def create(self, description):
        if self.fail:
            raise CheckpointError("System Protection is disabled")
        self.created.append(description)

    def last_created(self):
        return self.last


class FakeScheduler:
    def __init__(self):
        self.registered = []

    def register(self, name, command, at, frequency):
        self.registered.append((name, list(command), at, frequency))


class FakePower:
    def __init__(self):
        self.restarts = []

    def restart(self, delay_seconds=60):
        self.restarts.append(delay_seconds)


class FakeTransport:
    def __init__(self):
        self.sent = []

    def send(self, report, recipient):
        self.sent.append((report, recipient))
        return recipient is not None


NVIDIA = DisplayAdapter("NVIDIA GeForce RTX 4070", "31.0.15.5222", "NVIDIA")
NVIDIA_UPDATED = DisplayAdapter("NVIDIA GeForce RTX 4070", "32.0.15.6094", "NVIDIA")
INTEL = DisplayAdapter("Intel(R) UHD Graphics 770", "31.0.101.4502", "Intel Corporation")


@pytest.fixture
def fake_services():
    return HostServices(
        os_update=FakeOsUpdate(items=[UpdateItem("2026-10 Cumulative Update", "KB5044284")]),
        package_manager=FakePackageManager(),
        display_adapters=FakeDisplayAdapters([NVIDIA, INTEL]),
        firmware=FakeFirmware(),
        restore_points=FakeRestorePoints(),
        scheduler=FakeScheduler(),
        power=FakePower(),
    )
