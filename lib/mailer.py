# =============================================================================
# lib/mailer.py - Notification Emails
# =============================================================================
# Renders and sends the emails contributors receive when their assets are
# moderated.
#
# Dispatchers accept {to, subject, template, data} and report success as a
# bool; they never raise, so a mail outage cannot fail a moderation request.
#
# - EmailDispatcher: renders and sends over SMTP in the calling process.
#   With EMAIL_ENABLED off it only logs what it would have sent.
# - CeleryEmailDispatcher: enqueues the same call on the worker, which
#   retries transient SMTP failures.
#
# Usage:
#   from lib.mailer import get_email_dispatcher, EmailTemplate
#   get_email_dispatcher().send(
#       to="jane@example.com",
#       subject="Your Asset Has Been Approved",
#       template=EmailTemplate.ASSET_APPROVED,
#       data={"asset_title": "Sunset", "asset_id": "...", "contributor_name": "jane"},
#   )
# =============================================================================

from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from enum import Enum
from typing import Any, Mapping, Protocol

from app.config import settings

logger = logging.getLogger(__name__)


class EmailTemplate(str, Enum):
    ASSET_APPROVED = "asset-approved"
    ASSET_REJECTED = "asset-rejected"


class EmailDeliveryError(Exception):
    """SMTP is misconfigured or the server refused the message."""


@dataclass
class RenderedEmail:
    html: str
    text: str


class EmailSender(Protocol):
    """Anything that can send a templated email and report success."""

    def send(
        self,
        to: str,
        subject: str,
        template: EmailTemplate | str,
        data: Mapping[str, Any],
    ) -> bool:
        ...


# =============================================================================
# Rendering
# =============================================================================

_HTML_SHELL = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: {banner}; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
      <h1 style="color: white; margin: 0;">{heading}</h1>
    </div>
    <div style="background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px;">
      {body}
      <p style="color: #6b7280; font-size: 14px; margin-top: 30px;">Best regards,<br>The Team</p>
    </div>
  </body>
</html>
"""


def render_email(template: EmailTemplate | str, data: Mapping[str, Any]) -> RenderedEmail:
    """
    Build the HTML and plain-text bodies for a template.

    Expected data keys: asset_title, asset_id, contributor_name and, for
    rejections, rejection_reason.

    Raises:
        ValueError: If the template is unknown
    """
    template = EmailTemplate(template)
    base_url = settings.APP_URL.rstrip("/")

    title = str(data.get("asset_title", ""))
    name = str(data.get("contributor_name") or "Contributor")
    asset_url = f"{base_url}/asset/{data.get('asset_id', '')}"
    reason = data.get("rejection_reason")

    safe_title = html.escape(title)
    safe_name = html.escape(name)

    if template == EmailTemplate.ASSET_APPROVED:
        body = (
            f"<p>Hi {safe_name},</p>"
            f"<p>Great news! Your asset <strong>\"{safe_title}\"</strong> has been approved "
            "and is now live on the platform.</p>"
            f"<p><strong>Asset:</strong> {safe_title}<br>"
            "<strong>Status:</strong> <span style=\"color: #10b981;\">Approved ✓</span></p>"
            f"<p style=\"text-align: center;\"><a href=\"{html.escape(asset_url)}\">View Asset</a></p>"
            "<p>Thank you for contributing to our platform!</p>"
        )
        text = (
            "Asset Approved!\n\n"
            f"Hi {name},\n\n"
            f"Great news! Your asset \"{title}\" has been approved and is now live on the platform.\n\n"
            f"Asset: {title}\n"
            "Status: Approved\n\n"
            f"View your asset: {asset_url}\n\n"
            "Thank you for contributing to our platform!\n\n"
            "Best regards,\nThe Team\n"
        )
        page = _HTML_SHELL.format(
            title="Asset Approved",
            banner="linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
            heading="🎉 Asset Approved!",
            body=body,
        )
        return RenderedEmail(html=page, text=text)

    reason_html = f"<br><strong>Reason:</strong> {html.escape(str(reason))}" if reason else ""
    reason_text = f"Reason: {reason}\n" if reason else ""
    body = (
        f"<p>Hi {safe_name},</p>"
        f"<p>We've reviewed your asset <strong>\"{safe_title}\"</strong>, but unfortunately "
        "it doesn't meet our current guidelines.</p>"
        f"<p><strong>Asset:</strong> {safe_title}<br>"
        "<strong>Status:</strong> <span style=\"color: #ef4444;\">Rejected</span>"
        f"{reason_html}</p>"
        "<p>Please review our guidelines and feel free to submit a new asset that meets our requirements.</p>"
        "<p>If you have any questions, please don't hesitate to contact our support team.</p>"
    )
    text = (
        "Asset Review Update\n\n"
        f"Hi {name},\n\n"
        f"We've reviewed your asset \"{title}\", but unfortunately it doesn't meet our current guidelines.\n\n"
        f"Asset: {title}\n"
        "Status: Rejected\n"
        f"{reason_text}\n"
        "Please review our guidelines and feel free to submit a new asset that meets our requirements.\n\n"
        "If you have any questions, please don't hesitate to contact our support team.\n\n"
        "Best regards,\nThe Team\n"
    )
    page = _HTML_SHELL.format(
        title="Asset Rejected",
        banner="linear-gradient(135deg, #ef4444 0%, #dc2626 100%)",
        heading="Asset Review Update",
        body=body,
    )
    return RenderedEmail(html=page, text=text)


# =============================================================================
# Delivery
# =============================================================================

def deliver_smtp(to: str, subject: str, rendered: RenderedEmail) -> None:
    """
    Send a rendered email over SMTP.

    Raises:
        EmailDeliveryError: If SMTP isn't configured
        smtplib.SMTPException / OSError: If sending fails
    """
    sender = settings.SMTP_FROM or settings.SMTP_USER
    if not settings.SMTP_HOST or not sender:
        raise EmailDeliveryError("SMTP is not configured (SMTP_HOST and SMTP_FROM/SMTP_USER required)")

    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(rendered.text)
    msg.add_alternative(rendered.html, subtype="html")

    if settings.SMTP_SECURITY == "ssl":
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as server:
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
        return

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as server:
        server.ehlo()
        if settings.SMTP_SECURITY == "starttls":
            server.starttls()
            server.ehlo()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.send_message(msg)


class EmailDispatcher:
    """Renders and sends emails in-process."""

    def send(
        self,
        to: str,
        subject: str,
        template: EmailTemplate | str,
        data: Mapping[str, Any],
    ) -> bool:
        """
        Send one templated email.

        Returns:
            True if sent (or logged because email is disabled), False on any failure
        """
        if not settings.EMAIL_ENABLED:
            logger.info(f"[Email] Email notifications disabled. Would send '{subject}' ({template}) to {to}")
            return True

        try:
            rendered = render_email(template, data)
            deliver_smtp(to, subject, rendered)
        except (ValueError, EmailDeliveryError, smtplib.SMTPException, OSError) as e:
            logger.error(f"[Email] Failed to send '{subject}' to {to}: {e}")
            return False

        logger.info(f"[Email] Sent '{subject}' ({template}) to {to}")
        return True


class CeleryEmailDispatcher:
    """Hands emails to the Celery worker."""

    def send(
        self,
        to: str,
        subject: str,
        template: EmailTemplate | str,
        data: Mapping[str, Any],
    ) -> bool:
        """
        Enqueue one templated email.

        Returns:
            True if the task was queued, False if the broker refused it
        """
        from workers.tasks import send_notification_email

        try:
            send_notification_email.delay(to, subject, EmailTemplate(template).value, dict(data))
        except Exception as e:
            logger.error(f"[Email] Failed to enqueue '{subject}' for {to}: {e}")
            return False

        logger.info(f"[Email] Queued '{subject}' for {to}")
        return True


def get_email_dispatcher() -> EmailSender:
    """Pick the dispatcher configured by EMAIL_VIA_WORKER."""
    if settings.EMAIL_VIA_WORKER:
        return CeleryEmailDispatcher()
    return EmailDispatcher()
