"""Celery tasks for coach workbook import processing."""
import logging
import os

from celery import group

from app.database import SessionLocal
from app.schemas.coach_row import CoachRow
from app.schemas.import_job import BatchResult
from app.services import coach_import
from app.services.coach_import import BatchOutcome, CoachBatch
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def dispatch_batches(batches: list[CoachBatch]) -> list[BatchOutcome]:
    """
    Submit a group of batches to the batch queue and block until all finish.

    A batch whose task failed outright comes back as an outcome without a
    result; the orchestrator counts all its rows as errors.
    """
    group_result = group(
        process_coach_batch.s(**batch.to_payload()) for batch in batches
    ).apply_async()
    group_result.join(propagate=False, disable_sync_subtasks=False)

    outcomes = []
    for batch, async_result in zip(batches, group_result.results):
        if async_result.successful():
            outcomes.append(
                BatchOutcome(
                    batch.batch_number,
                    len(batch.rows),
                    result=BatchResult.model_validate(async_result.result),
                )
            )
        else:
            outcomes.append(
                BatchOutcome(batch.batch_number, len(batch.rows), error=str(async_result.result))
            )
    return outcomes


@celery_app.task(bind=True)
def process_coach_import(self, job_id: str, file_url: str, cleanup: bool = False) -> dict:
    """
    Run a whole coach import in the background.

    Args:
        self: Celery task instance
        job_id: Coach import job ID
        file_url: Workbook URL or local path
        cleanup: Delete the local workbook afterwards (uploaded files)

    Returns:
        Dict with success flag, counts and the first errors
    """
    logger.info(f"🚀 Starting coach import task: job_id={job_id}, file_url={file_url}")

    db = SessionLocal()
    try:
        result = coach_import.run_coach_import(job_id, file_url, db, dispatch_batches)
        logger.info(
            f"🎉 Coach import finished: job_id={job_id}, "
            f"success={result.success_count}, errors={result.error_count}"
        )
        return result.model_dump(by_alias=True)

    finally:
        db.close()

        if cleanup:
            logger.info(f"🧹 Cleaning up uploaded workbook: {file_url}")
            try:
                if os.path.exists(file_url):
                    os.remove(file_url)
                else:
                    logger.warning(f"⚠️ Uploaded workbook not found for cleanup: {file_url}")
            except OSError as cleanup_error:
                logger.warning(f"⚠️ Failed to clean up {file_url}: {cleanup_error}")


@celery_app.task(bind=True)
def process_coach_batch(
    self, job_id: str, batch_number: int, offset: int, rows: list[dict]
) -> dict:
    """
    Import one batch of coach rows.

    Args:
        self: Celery task instance
        job_id: Coach import job ID
        batch_number: 1-based batch number
        offset: Position of the first row within the run
        rows: Row payloads keyed by spreadsheet header

    Returns:
        Dict with successCount, errorCount and errors
    """
    db = SessionLocal()
    try:
        coach_rows = [CoachRow.model_validate(row) for row in rows]
        result = coach_import.process_coach_batch(job_id, coach_rows, db, batch_number, offset)
        return result.model_dump(by_alias=True)
    finally:
        db.close()
