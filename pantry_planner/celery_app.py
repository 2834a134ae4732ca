"""Celery worker for slow AI jobs (receipt scans)."""

from celery import Celery

from pantry_planner.config import get_settings

settings = get_settings()

app = Celery(
    "pantry_planner",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["pantry_planner.tasks.receipt_scan"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 3600,  # scan results live on the ReceiptScan row
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # One vision call at a time per worker process
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=180,
    task_soft_time_limit=150,
    broker_connection_retry_on_startup=True,
)
