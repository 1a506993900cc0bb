# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Tasks:
# - send_notification_email: Render and deliver one moderation email,
#   retrying transient SMTP failures
# =============================================================================

import logging
import smtplib
from typing import Any

from celery import shared_task

from lib.mailer import EmailDeliveryError, EmailTemplate, deliver_smtp, render_email

logger = logging.getLogger(__name__)

EMAIL_MAX_RETRIES = 3


@shared_task(
    bind=True,
    name="workers.tasks.send_notification_email",
    autoretry_for=(smtplib.SMTPException, OSError),
    retry_backoff=30,
    retry_jitter=True,
    max_retries=EMAIL_MAX_RETRIES,
)
def send_notification_email(
    self,
    to: str,
    subject: str,
    template: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    """
    Send one templated email.

    Connection and SMTP errors are retried up to EMAIL_MAX_RETRIES times
    with exponential backoff. Misconfiguration and unknown templates are
    not retried since another attempt can't succeed.

    Args:
        to: Recipient address
        subject: Subject line
        template: EmailTemplate value ("asset-approved" / "asset-rejected")
        data: Template data (asset_title, asset_id, contributor_name, ...)

    Returns:
        Dict with success flag (and error when not sent)
    """
    logger.info(f"Sending '{subject}' to {to} (attempt {self.request.retries + 1})")

    try:
        rendered = render_email(EmailTemplate(template), data)
        deliver_smtp(to, subject, rendered)
    except (ValueError, EmailDeliveryError) as e:
        logger.error(f"Email '{subject}' to {to} dropped: {e}")
        return {"success": False, "error": str(e)}

    return {"success": True, "to": to}
