"""
External command execution.

Every collaborator that shells out goes through ``run_command`` so that
timeouts, logging and missing-executable handling stay uniform.
"""

import json
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from loguru import logger

from ..core.constants import DEFAULT_COMMAND_TIMEOUT
from ..core.exceptions import CommandError, CommandNotFoundError

POWERSHELL = "powershell"
TIMEOUT_RETURN_CODE = -9


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one external command."""

    args: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def tail(self, lines: int = 5) -> str:
        """Last non-empty output lines, for failure details."""
        text = (self.stderr.strip() or self.stdout.strip()).splitlines()
        text = [line.strip() for line in text if line.strip()]
        return " | ".join(text[-lines:])


def which(executable: str) -> Optional[str]:
    return shutil.which(executable)


def run_command(
    args: Sequence[str], timeout: int = DEFAULT_COMMAND_TIMEOUT
) -> CommandResult:
    """
    Run a command, capturing output, with a bounded timeout.

    Non-zero exit codes are returned, not raised; callers decide what an
    exit code means for their tool.

    Args:
        args: Command and arguments
        timeout: Maximum runtime in seconds

    Returns:
        CommandResult with exit code and captured output

    Raises:
        CommandNotFoundError: executable is not installed
        CommandError: process could not be started
    """
    args = tuple(str(a) for a in args)
    logger.debug(f"Running command: {' '.join(args)}")
    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        raise CommandNotFoundError(f"{args[0]} is not installed or not on PATH")
    except subprocess.TimeoutExpired as e:
        logger.warning(f"Command timed out after {timeout}s: {args[0]}")
        return CommandResult(
            args=args,
            returncode=TIMEOUT_RETURN_CODE,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr) or f"timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as e:
        raise CommandError(f"Could not start {args[0]}: {e}")

    if proc.returncode != 0:
        logger.debug(f"Command {args[0]} exited with {proc.returncode}")
    return CommandResult(
        args=args,
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def powershell_args(script: str) -> List[str]:
    return [
        POWERSHELL,
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-Command",
        script,
    ]


def run_powershell(script: str, timeout: int = DEFAULT_COMMAND_TIMEOUT) -> CommandResult:
    return run_command(powershell_args(script), timeout=timeout)


def powershell_json(script: str, timeout: int = DEFAULT_COMMAND_TIMEOUT) -> List[dict]:
    """
    Run a PowerShell pipeline ending in ``ConvertTo-Json`` and parse it.

    PowerShell emits a bare object for a single result and nothing for an
    empty pipeline; both are normalised to a list.

    Raises:
        CommandError: non-zero exit or unparseable output
    """
    result = run_powershell(script, timeout=timeout)
    if not result.ok:
        raise CommandError(f"PowerShell query failed: {result.tail() or result.returncode}")

    text = result.stdout.strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CommandError(f"PowerShell returned invalid JSON: {e}")

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    return []
