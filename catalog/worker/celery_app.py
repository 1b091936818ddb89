# catalog/worker/celery_app.py
"""
Celery application configuration for the catalog pipelines.
"""
from celery import Celery
from celery.signals import worker_ready
import logging
from catalog.core.config import settings

logger = logging.getLogger(__name__)

# Create Celery app
celery_app = Celery(
    "catalog",
    broker=settings.celery_broker_url,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["catalog.worker.tasks.ingest"],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=3600,  # 1 hour time limit per task
    task_soft_time_limit=3300,  # 55 minutes soft time limit
    # Pipelines share one queue so they never run concurrently on a single worker
    task_routes={
        "catalog:*": {"queue": "catalog"},
    },
)


@worker_ready.connect
def at_worker_ready(sender, **kwargs):
    """Log when worker is ready."""
    logger.info("Celery worker is ready.")


if __name__ == "__main__":
    celery_app.start()
