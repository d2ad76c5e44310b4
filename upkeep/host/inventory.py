"""
Read-only hardware inventory queries via CIM.
"""

from typing import List

from ..core.constants import QUERY_TIMEOUT
from ..core.dataclasses import DisplayAdapter, FirmwareInfo
from .shell import powershell_json


class CimDisplayAdapterQuery:
    """Lists display adapters from Win32_VideoController."""

    def __init__(self, timeout: int = QUERY_TIMEOUT):
        self.timeout = timeout

    def list_adapters(self) -> List[DisplayAdapter]:
        rows = powershell_json(
            "Get-CimInstance Win32_VideoController "
            "| Select-Object Name,DriverVersion,AdapterCompatibility "
            "| ConvertTo-Json",
            timeout=self.timeout,
        )
        return [
            DisplayAdapter(
                name=str(row.get("Name") or "").strip(),
                driver_version=row.get("DriverVersion") or None,
                vendor=row.get("AdapterCompatibility") or None,
            )
            for row in rows
            if row.get("Name")
        ]


class CimFirmwareQuery:
    """Reads BIOS and system vendor details from Win32_BIOS / Win32_ComputerSystem."""

    def __init__(self, timeout: int = QUERY_TIMEOUT):
        self.timeout = timeout

    def read(self) -> FirmwareInfo:
        bios = powershell_json(
            "Get-CimInstance Win32_BIOS | Select-Object SMBIOSBIOSVersion,"
            "@{n='ReleaseDate';e={$_.ReleaseDate.ToString('yyyy-MM-dd')}} "
            "| ConvertTo-Json",
            timeout=self.timeout,
        )
        system = powershell_json(
            "Get-CimInstance Win32_ComputerSystem "
            "| Select-Object Manufacturer,Model | ConvertTo-Json",
            timeout=self.timeout,
        )
        bios_row = bios[0] if bios else {}
        system_row = system[0] if system else {}
        return FirmwareInfo(
            manufacturer=system_row.get("Manufacturer") or None,
            model=system_row.get("Model") or None,
            bios_version=bios_row.get("SMBIOSBIOSVersion") or None,
            release_date=bios_row.get("ReleaseDate") or None,
        )
