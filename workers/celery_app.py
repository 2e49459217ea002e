"""
Celery Application Configuration

Configures Celery with Redis broker and result backend.
Defines task queues and routing.
"""

import os

from celery import Celery
from celery.schedules import crontab

# Broker and backend URLs
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)

app = Celery(
    "bonuspool",
    broker=REDIS_URL,
    backend=RESULT_BACKEND,
)

app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,

    # Result expiry
    result_expires=86400,  # 24 hours

    # Routing
    task_routes={
        "workers.tasks.pool_tasks.*": {"queue": "pools"},
    },

    # Default queue
    task_default_queue="default",

    # Concurrency
    worker_concurrency=2,
)

# Beat schedule for periodic tasks
app.conf.beat_schedule = {
    # Current month's pool revenue nightly at 2 AM UTC
    "refresh-current-pool-revenue": {
        "task": "workers.tasks.pool_tasks.refresh_current_month_pool",
        "schedule": crontab(hour=2, minute=0),
        "options": {"queue": "pools"},
    },
}

# Initialize Sentry for error monitoring in workers
_sentry_dsn = os.getenv("SENTRY_DSN", "")
if _sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration

    sentry_sdk.init(
        dsn=_sentry_dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=f"bonuspool-worker@{os.getenv('APP_VERSION', '0.1.0')}",
        traces_sample_rate=0.1,
        integrations=[CeleryIntegration()],
    )

# Auto-discover tasks
app.autodiscover_tasks(["workers.tasks"])
