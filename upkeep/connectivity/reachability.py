"""
Network reachability testing.

Provides the advisory connectivity probe run before network-dependent
stages. The probe never raises: DNS failures, refused connections and
timeouts all resolve to False.
"""

import socket

from loguru import logger

from ..core.constants import (
    DEFAULT_CONNECTIVITY_HOST,
    DEFAULT_CONNECTIVITY_PORT,
    DEFAULT_CONNECTIVITY_TIMEOUT,
)


def is_reachable(
    target: str = DEFAULT_CONNECTIVITY_HOST,
    timeout: float = DEFAULT_CONNECTIVITY_TIMEOUT,
    port: int = DEFAULT_CONNECTIVITY_PORT,
) -> bool:
    """
    Test basic TCP connectivity to a host on the specified port.

    Performs a low-level socket connection without protocol negotiation.

    Args:
        target: Target hostname or IP address
        timeout: Connection timeout in seconds (bounds DNS + connect)
        port: TCP port to test (default: 80)

    Returns:
        True if the TCP connection succeeds, False otherwise
    """
    try:
        with socket.create_connection((target, port), timeout=timeout):
            logger.debug(f"✅ Reachability confirmed for {target}:{port}")
            return True
    except (OSError, ValueError) as e:
        # socket.timeout and socket.gaierror are OSError subclasses
        logger.debug(f"❌ Reachability failed for {target}:{port}: {e}")
        return False


def probe_connectivity(
    target: str = DEFAULT_CONNECTIVITY_HOST,
    timeout: float = DEFAULT_CONNECTIVITY_TIMEOUT,
    port: int = DEFAULT_CONNECTIVITY_PORT,
) -> bool:
    """
    Run the probe and log the advisory result.

    The result gates nothing: update stages are still attempted when the
    probe reports no connectivity and handle network errors themselves.
    """
    reachable = is_reachable(target, timeout=timeout, port=port)
    if reachable:
        logger.info(f"Internet connectivity confirmed ({target}:{port})")
    else:
        logger.warning(
            f"No internet connectivity detected ({target}:{port}, timeout {timeout}s); "
            f"network-dependent stages will still be attempted"
        )
    return reachable
