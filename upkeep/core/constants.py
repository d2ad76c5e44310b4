"""
Application-wide constants and configuration parameters.

Centralized values for thresholds, timeouts and formats that must stay
consistent across the maintenance orchestrator.
"""

import os
from typing import Final

# ==============================================================================
# DIAGNOSTICS CONSTANTS
# ==============================================================================

GIB: Final[int] = 1024**3

# Fixed advisory threshold; affects logging only, never control flow
LOW_DISK_THRESHOLD_BYTES: Final[int] = 10 * GIB
LOW_BATTERY_PERCENT: Final[int] = 30

# ==============================================================================
# NETWORK AND COMMAND CONSTANTS
# ==============================================================================

DEFAULT_CONNECTIVITY_HOST: Final[str] = "www.msftconnecttest.com"
DEFAULT_CONNECTIVITY_PORT: Final[int] = 80
DEFAULT_CONNECTIVITY_TIMEOUT: Final[float] = 5.0  # seconds

DEFAULT_COMMAND_TIMEOUT: Final[int] = 1800  # seconds (30 minutes)
DEFAULT_OS_UPDATE_TIMEOUT: Final[int] = 7200  # seconds (2 hours)
QUERY_TIMEOUT: Final[int] = 60  # seconds for read-only host queries

# ==============================================================================
# LOGGING CONSTANTS
# ==============================================================================

DEFAULT_LOG_PATH: Final[str] = os.path.join(
    os.getenv("PROGRAMDATA", os.path.expanduser("~")), "Upkeep", "upkeep.log"
)
DEFAULT_REPORT_DIR: Final[str] = os.path.join(
    os.getenv("PROGRAMDATA", os.path.expanduser("~")), "Upkeep", "reports"
)

# Level names as they appear in the audit log
LEVEL_LABELS: Final[dict] = {
    "DEBUG": "Debug",
    "INFO": "Info",
    "SUCCESS": "Success",
    "WARNING": "Warning",
    "ERROR": "Error",
    "CRITICAL": "Error",
}

# ==============================================================================
# REPORT DELIVERY CONSTANTS
# ==============================================================================

EVENT_RETRY_COUNT: Final[int] = 3
EVENT_RETRY_DELAY: Final[float] = 2.0  # seconds
EVENT_TIMEOUT: Final[float] = 10.0  # seconds

DEFAULT_WEBHOOK_URL: Final[str] = os.getenv("UPKEEP_WEBHOOK_URL", "")

# ==============================================================================
# STAGE CONSTANTS
# ==============================================================================

DEFAULT_GPU_VENDOR_SIGNATURE: Final[str] = "NVIDIA"
DEFAULT_GPU_PACKAGE_ID: Final[str] = "Nvidia.GeForceExperience"
DEFAULT_TASK_NAME: Final[str] = "UpkeepMaintenance"

GPU_DRIVER_DOWNLOAD_URL: Final[str] = "https://www.nvidia.com/Download/index.aspx"

# Firmware update tooling per system manufacturer
FIRMWARE_GUIDANCE: Final[dict] = {
    "dell": "Use Dell Command | Update or https://www.dell.com/support/drivers",
    "lenovo": "Use Lenovo Vantage or https://pcsupport.lenovo.com",
    "hp": "Use HP Support Assistant or https://support.hp.com/drivers",
    "hewlett": "Use HP Support Assistant or https://support.hp.com/drivers",
    "asus": "Use MyASUS or the ASUS EZ Flash utility from https://www.asus.com/support",
    "micro-star": "Use MSI Center or https://www.msi.com/support",
    "msi": "Use MSI Center or https://www.msi.com/support",
    "acer": "Use Acer Care Center or https://www.acer.com/support",
    "gigabyte": "Use GIGABYTE @BIOS or https://www.gigabyte.com/Support",
    "microsoft": "Surface firmware ships through Windows Update",
}
GENERIC_FIRMWARE_GUIDANCE: Final[str] = (
    "Check the system manufacturer's support site for a newer BIOS/UEFI release"
)
