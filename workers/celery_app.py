# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# Builds the Celery app that delivers notification emails queued by
# CeleryEmailDispatcher.
#
# Usage:
#   celery -A workers.celery_app worker -Q default,email --loglevel=info
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_retry
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from app.config import settings  # noqa: E402

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    """Drop credentials from a broker URL before logging it."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Create the email worker app.

    Returns:
        Celery app configured from workers.config.CeleryConfig
    """
    app = Celery("marketplace_worker", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Email worker using broker {_redact(settings.REDIS_URL)}")
    return app


celery_app = create_celery_app()


# =============================================================================
# Delivery Logging
# =============================================================================

@task_retry.connect
def log_retry(sender=None, request=None, reason=None, **extra):
    """An SMTP attempt failed and will be tried again."""
    logger.warning(f"Retrying {sender.name} [{request.id}]: {reason}")


@task_failure.connect
def log_failure(sender=None, task_id=None, exception=None, **extra):
    """Retries are exhausted; the email is lost."""
    logger.error(f"{sender.name} [{task_id}] gave up: {exception}")
