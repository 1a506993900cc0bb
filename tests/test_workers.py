# =============================================================================
# tests/test_workers.py - Celery Task Tests
# =============================================================================
# Tasks are run directly (no broker); delivery is patched out.
# =============================================================================

import logging
import smtplib
from unittest.mock import patch

from lib.mailer import EmailDeliveryError
from workers.config import CeleryConfig
from workers.tasks import EMAIL_MAX_RETRIES, send_notification_email


DATA = {"asset_title": "Sunset", "asset_id": "a1", "contributor_name": "jane"}


class TestSendNotificationEmail:

    def test_renders_and_delivers(self):
        with patch("workers.tasks.deliver_smtp") as deliver:
            result = send_notification_email.run("jane@example.com", "Approved", "asset-approved", DATA)

        assert result == {"success": True, "to": "jane@example.com"}
        to, subject, rendered = deliver.call_args.args
        assert to == "jane@example.com"
        assert subject == "Approved"
        assert "Sunset" in rendered.text

    def test_misconfiguration_is_dropped_not_retried(self):
        with patch("workers.tasks.deliver_smtp", side_effect=EmailDeliveryError("SMTP is not configured")):
            result = send_notification_email.run("jane@example.com", "Approved", "asset-approved", DATA)

        assert result["success"] is False

    def test_unknown_template_is_dropped(self):
        with patch("workers.tasks.deliver_smtp") as deliver:
            result = send_notification_email.run("jane@example.com", "Hi", "welcome", DATA)

        assert result["success"] is False
        deliver.assert_not_called()

    def test_transient_errors_are_retried(self):
        assert send_notification_email.max_retries == EMAIL_MAX_RETRIES == 3
        assert smtplib.SMTPException in send_notification_email.autoretry_for
        assert OSError in send_notification_email.autoretry_for


def test_email_task_has_its_own_queue():
    assert CeleryConfig.task_routes["workers.tasks.send_notification_email"] == {"queue": "email"}
    assert "email" in CeleryConfig.task_queues


class TestWorkerApp:

    def test_app_uses_email_routing(self):
        from workers.celery_app import celery_app

        assert celery_app.conf.task_routes == CeleryConfig.task_routes
        assert celery_app.conf.task_acks_late is True
        assert "workers.tasks.send_notification_email" in celery_app.tasks

    def test_broker_credentials_are_not_logged(self):
        from workers.celery_app import _redact

        assert _redact("redis://:secret@cache.internal:6379/0") == "cache.internal:6379/0"
        assert _redact("redis://localhost:6379/0") == "redis://localhost:6379/0"

    def test_exhausted_retries_are_logged(self, caplog):
        from workers.celery_app import log_failure

        with caplog.at_level(logging.ERROR, logger="workers.celery_app"):
            log_failure(sender=send_notification_email, task_id="t-1", exception=OSError("refused"))

        assert "t-1" in caplog.text
        assert "refused" in caplog.text
