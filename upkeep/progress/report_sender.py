"""
Run report persistence and delivery.

Writes the JSON report and hands it to the configured transports: email
over SMTP when a recipient is given, and a webhook POST when a URL is
configured. Absent recipient/URL means the transport is a no-op.
"""

import json
import smtplib
import time
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
from loguru import logger

from ..core.constants import EVENT_RETRY_COUNT, EVENT_RETRY_DELAY, EVENT_TIMEOUT
from ..core.dataclasses import ReportDelivery, RunReport
from ..core.enums import RunStatus
from ..core.exceptions import ReportDeliveryError
from ..utils.json_utils import safe_json_serialize
from .formatter import HumanReadableFormatter


# =============================================================================
# SECTION 1: SERIALISATION
# =============================================================================


def report_to_dict(report: RunReport) -> Dict[str, Any]:
    data = safe_json_serialize(report)
    data["duration_seconds"] = round(report.duration, 3)
    data["reboot_required"] = report.reboot_required
    return data


def write_report_json(report: RunReport, path: Path) -> Path:
    """Write the report as pretty-printed JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, indent=2, ensure_ascii=False)
    logger.info(f"Run report written to {path}")
    return path


def email_subject(report: RunReport) -> str:
    status = "Success" if report.status is RunStatus.SUCCESS else "Aborted"
    host = report.diagnostics.host_name or "host"
    prefix = "[dry run] " if report.dry_run else ""
    return f"{prefix}Maintenance {status}: {host} ({report.scope.value})"


# =============================================================================
# SECTION 2: TRANSPORTS
# =============================================================================


class ReportSender:
    """
    Delivers run reports by email and webhook.

    Args:
        settings: Application settings (SMTP and webhook configuration)
        sleep: Delay function between webhook retries
    """

    def __init__(self, settings, sleep: Callable[[float], None] = time.sleep):
        self.settings = settings
        self.sleep = sleep

    def send(self, report: RunReport, recipient: Optional[str]) -> bool:
        """Deliver to every configured transport; True if any accepted it."""
        delivery = self.deliver(report, recipient)
        return delivery.email_sent or delivery.webhook_sent

    def deliver(self, report: RunReport, recipient: Optional[str]) -> ReportDelivery:
        delivery = ReportDelivery()

        if recipient:
            try:
                self.send_email(report, recipient)
                delivery.email_sent = True
            except ReportDeliveryError as e:
                logger.error(f"Email report not sent: {e.message}")
                delivery.errors.append(e.message)

        if self.settings.webhook_url:
            delivery.webhook_sent = self.send_webhook(report)
            if not delivery.webhook_sent:
                delivery.errors.append("webhook delivery failed")

        return delivery

    def send_email(self, report: RunReport, recipient: str) -> None:
        """
        Raises:
            ReportDeliveryError: SMTP not configured or the server rejected the message
        """
        settings = self.settings
        if not settings.smtp_host or not settings.smtp_sender:
            raise ReportDeliveryError(
                "SMTP is not configured",
                remediation="Set smtp_host and smtp_sender in the settings file",
            )

        message = EmailMessage()
        message["Subject"] = email_subject(report)
        message["From"] = settings.smtp_sender
        message["To"] = recipient
        message.set_content(HumanReadableFormatter.render_report(report, icons=False))
        message.add_attachment(
            json.dumps(report_to_dict(report), indent=2).encode("utf-8"),
            maintype="application",
            subtype="json",
            filename="upkeep-report.json",
        )

        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=EVENT_TIMEOUT) as smtp:
                if settings.smtp_use_tls:
                    smtp.starttls()
                if settings.smtp_username:
                    smtp.login(settings.smtp_username, settings.smtp_password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise ReportDeliveryError(f"SMTP delivery to {recipient} failed: {e}")

        logger.info(f"✅ Report emailed to {recipient}")

    def send_webhook(
        self,
        report: RunReport,
        max_retries: int = EVENT_RETRY_COUNT,
        retry_delay: float = EVENT_RETRY_DELAY,
    ) -> bool:
        """
        POST the JSON report with retry and exponential backoff.

        Returns:
            True if the endpoint accepted the report, False otherwise
        """
        payload = report_to_dict(report)
        url = self.settings.webhook_url
        for attempt in range(max_retries + 1):  # +1 for initial attempt
            try:
                response = httpx.post(url, json=payload, timeout=EVENT_TIMEOUT)
                response.raise_for_status()
                logger.info(f"✅ Report delivered to webhook ({response.status_code})")
                return True
            except httpx.InvalidURL as e:
                # not retried
                logger.error(f"Webhook delivery skipped, invalid URL {url!r}: {e}")
                return False
            except httpx.HTTPError as e:
                if attempt < max_retries:
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt + 1}/{max_retries + 1}): {e}. "
                        f"Retrying in {retry_delay}s..."
                    )
                    self.sleep(retry_delay)
                    retry_delay *= 2
                else:
                    logger.error(f"Webhook delivery failed after {max_retries + 1} attempts: {e}")
        return False
