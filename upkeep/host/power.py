"""
Host restart collaborator.
"""

from ..core.constants import QUERY_TIMEOUT
from ..core.exceptions import CommandError
from .shell import run_command


class ShutdownPowerControl:
    def restart(self, delay_seconds: int = 60) -> None:
        result = run_command(
            [
                "shutdown",
                "/r",
                "/t",
                str(delay_seconds),
                "/c",
                "Restarting to finish maintenance",
            ],
            timeout=QUERY_TIMEOUT,
        )
        if not result.ok:
            raise CommandError(f"Restart request failed: {result.tail() or result.returncode}")
