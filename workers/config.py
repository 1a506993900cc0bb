# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# The worker only delivers notification emails. Each task is one short SMTP
# exchange, retried by the task itself on transient failures.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """Applied to the Celery app via app.config_from_object()."""

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # A message is only removed from Redis once the email went out (or the
    # task gave up), so a worker crash mid-send re-delivers it
    task_acks_late = True
    task_reject_on_worker_lost = True
    worker_prefetch_multiplier = 1

    # Results are only read when debugging a delivery
    result_expires = 3600

    task_time_limit = 60
    task_soft_time_limit = 45

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # Emails get their own queue so a mail outage never backs up other work
    task_queues = {
        "default": {"exchange": "default", "routing_key": "default"},
        "email": {"exchange": "email", "routing_key": "email"},
    }
    task_default_queue = "default"
    task_routes = {
        "workers.tasks.send_notification_email": {"queue": "email"},
    }

    timezone = "UTC"
    enable_utc = True
