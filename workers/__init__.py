# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# work that should not hold up an API response, currently notification
# emails (which are retried on SMTP failures).
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (email delivery)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q default,email --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import send_notification_email
#   send_notification_email.delay(to, subject, "asset-approved", data)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
