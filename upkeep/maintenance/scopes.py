"""
Static scope → stage table.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from ..core.enums import UpdateScope
from ..core.exceptions import ScopeResolutionError

WINDOWS_UPDATE = "windows-update"
APP_UPGRADE = "app-upgrade"
GPU_DRIVER = "gpu-driver"
CLEANUP = "cleanup"
BIOS_GUIDANCE = "bios-guidance"

_WINDOWS_ONLY: Tuple[str, ...] = (WINDOWS_UPDATE,)
_APPS_ONLY: Tuple[str, ...] = (APP_UPGRADE,)
_GPU: Tuple[str, ...] = (GPU_DRIVER,)
_BIOS: Tuple[str, ...] = (BIOS_GUIDANCE,)

# Cleanup has no scope of its own; it only runs as part of Full
SCOPE_TABLE: Mapping[UpdateScope, Tuple[str, ...]] = MappingProxyType(
    {
        UpdateScope.FULL: _WINDOWS_ONLY + _APPS_ONLY + _GPU + (CLEANUP,) + _BIOS,
        UpdateScope.WINDOWS_ONLY: _WINDOWS_ONLY,
        UpdateScope.APPS_ONLY: _APPS_ONLY,
        UpdateScope.GPU: _GPU,
        UpdateScope.BIOS: _BIOS,
    }
)


def resolve_scope(
    scope: UpdateScope, table: Mapping[UpdateScope, Tuple[str, ...]] = SCOPE_TABLE
) -> Tuple[str, ...]:
    """
    Return the ordered stage names for a scope.

    Raises:
        ScopeResolutionError: scope is unknown or maps to no stages
    """
    try:
        names = table[scope]
    except KeyError:
        raise ScopeResolutionError(f"No stage list defined for scope {scope!r}")
    if not names:
        raise ScopeResolutionError(f"Scope {scope.value} has an empty stage list")
    return tuple(names)
