"""
Celery application configuration.

Imports and batches run on separate queues so an import waiting on its
batches never starves them of workers. Concurrency lives on the workers:

    celery -A app.tasks.celery_app worker -Q coach-imports -c 2
    celery -A app.tasks.celery_app worker -Q coach-batch-processing -c 10
"""
from celery import Celery

from app.config import get_settings

IMPORT_QUEUE = "coach-imports"
BATCH_QUEUE = "coach-batch-processing"

settings = get_settings()

celery_app = Celery(
    "coach_importer",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.import_tasks"],
)

celery_app.conf.update(
    task_track_started=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=24 * 60 * 60,
    task_routes={
        "app.tasks.import_tasks.process_coach_import": {"queue": IMPORT_QUEUE},
        "app.tasks.import_tasks.process_coach_batch": {"queue": BATCH_QUEUE},
    },
)
