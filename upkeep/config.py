"""
Configuration Module
Defines application-wide settings and the validated per-run options.

Settings resolve in three layers: built-in defaults, an optional YAML file
(``--config`` or ``UPKEEP_CONFIG``), then ``UPKEEP_*`` environment variables.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECTIVITY_HOST,
    DEFAULT_CONNECTIVITY_PORT,
    DEFAULT_CONNECTIVITY_TIMEOUT,
    DEFAULT_GPU_PACKAGE_ID,
    DEFAULT_GPU_VENDOR_SIGNATURE,
    DEFAULT_LOG_PATH,
    DEFAULT_OS_UPDATE_TIMEOUT,
    DEFAULT_REPORT_DIR,
    DEFAULT_TASK_NAME,
    DEFAULT_WEBHOOK_URL,
)
from .core.enums import TaskFrequency, UpdateScope
from .core.exceptions import ConfigurationError

CONFIG_ENV_VAR = "UPKEEP_CONFIG"
ENV_PREFIX = "UPKEEP_"

SCHEDULE_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _default_cleanup_paths() -> List[str]:
    paths = []
    for env_name in ("TEMP", "TMP"):
        value = os.getenv(env_name)
        if value and value not in paths:
            paths.append(value)
    windir = os.getenv("WINDIR", r"C:\Windows")
    paths.append(os.path.join(windir, "Temp"))
    paths.append(os.path.join(windir, "SoftwareDistribution", "Download"))
    return paths


class Settings(BaseModel):
    """Base application settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    log_path: Path = Path(DEFAULT_LOG_PATH)
    report_dir: Path = Path(DEFAULT_REPORT_DIR)

    connectivity_host: str = DEFAULT_CONNECTIVITY_HOST
    connectivity_port: int = Field(DEFAULT_CONNECTIVITY_PORT, gt=0, lt=65536)
    connectivity_timeout: float = Field(DEFAULT_CONNECTIVITY_TIMEOUT, gt=0)

    command_timeout: int = Field(DEFAULT_COMMAND_TIMEOUT, gt=0)
    os_update_timeout: int = Field(DEFAULT_OS_UPDATE_TIMEOUT, gt=0)

    gpu_vendor_signature: str = DEFAULT_GPU_VENDOR_SIGNATURE
    gpu_package_id: str = DEFAULT_GPU_PACKAGE_ID
    cleanup_paths: List[Path] = Field(default_factory=_default_cleanup_paths)

    task_name: str = DEFAULT_TASK_NAME
    task_frequency: TaskFrequency = TaskFrequency.WEEKLY

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_sender: Optional[str] = None
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True

    webhook_url: Optional[str] = Field(DEFAULT_WEBHOOK_URL or None, validate_default=True)

    @field_validator("webhook_url")
    @classmethod
    def _check_webhook_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"webhook URL '{value}' is invalid: {e}")
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"webhook URL must be an absolute http(s) URL, got '{value}'")
        return value


class RunOptions(BaseModel):
    """Options for one invocation, validated from the command line."""

    model_config = ConfigDict(frozen=True)

    scope: UpdateScope = UpdateScope.FULL
    dry_run: bool = False
    skip_reboot: bool = False
    enable_rollback: bool = False
    schedule_task: bool = False
    schedule_time: str = "03:00"
    log_path: Optional[Path] = None
    email_report: Optional[str] = None
    report_path: Optional[Path] = None

    @field_validator("scope", mode="before")
    @classmethod
    def _parse_scope(cls, value: Any) -> Any:
        if isinstance(value, str):
            return UpdateScope.parse(value)
        return value

    @field_validator("schedule_time")
    @classmethod
    def _check_schedule_time(cls, value: str) -> str:
        if not SCHEDULE_TIME_PATTERN.match(value):
            raise ValueError(f"schedule time must be HH:MM (24h), got '{value}'")
        return value

    @field_validator("email_report")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError(f"'{value}' is not an email address")
        return value


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(
            f"Settings file not found: {path}",
            remediation="Pass an existing file with --config or unset UPKEEP_CONFIG",
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Settings file {path} is not valid YAML: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return data


def _env_overrides(environ: Dict[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in Settings.model_fields:
        env_name = f"{ENV_PREFIX}{name.upper()}"
        if env_name not in environ:
            continue
        raw = environ[env_name]
        if name == "cleanup_paths":
            overrides[name] = [p for p in raw.split(os.pathsep) if p]
        else:
            overrides[name] = raw
    return overrides


def load_settings(
    path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None
) -> Settings:
    """
    Build settings from defaults, an optional YAML file and the environment.

    Args:
        path: Explicit YAML settings file; falls back to ``UPKEEP_CONFIG``
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated, frozen Settings

    Raises:
        ConfigurationError: when the file is missing/invalid or a value fails validation
    """
    environ = dict(os.environ if environ is None else environ)

    if path is None and environ.get(CONFIG_ENV_VAR):
        path = Path(environ[CONFIG_ENV_VAR])

    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_read_yaml(Path(path)))
        logger.debug(f"Loaded settings file {path}")

    values.update(_env_overrides(environ))

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}")
