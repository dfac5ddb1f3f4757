"""Coach import pipeline: batch worker, group fan-out and job status tracking."""
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

import redis
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.import_job import CoachImportJob, ImportStatus, InvalidStatusTransition
from app.schemas.coach_row import CoachRow
from app.schemas.import_job import BatchResult, ImportErrorEntry, ImportResult
from app.services.coach_mapper import process_coach_row
from app.services.normalizers import nullify_empty_string
from app.services.row_filter import deduplicate_by_unique_id, filter_invalid_rows
from app.services.spreadsheet_reader import download_workbook, parse_workbook

settings = get_settings()
logger = logging.getLogger(__name__)

JobId = Union[str, uuid.UUID]


@dataclass
class CoachBatch:
    """A fixed-size slice of deduplicated rows handled by one unit of work."""

    job_id: str
    batch_number: int
    offset: int
    rows: list[CoachRow]

    def to_payload(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "batch_number": self.batch_number,
            "offset": self.offset,
            "rows": [row.to_payload() for row in self.rows],
        }


@dataclass
class BatchOutcome:
    """What the scheduler reported for one batch."""

    batch_number: int
    size: int
    result: Optional[BatchResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


BatchDispatcher = Callable[[list[CoachBatch]], list[BatchOutcome]]


def _job_uuid(job_id: JobId) -> uuid.UUID:
    return job_id if isinstance(job_id, uuid.UUID) else uuid.UUID(str(job_id))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_job(db: Session, job_id: JobId) -> Optional[CoachImportJob]:
    return db.get(CoachImportJob, _job_uuid(job_id))


def increment_job_progress(db: Session, job_id: JobId, success: int, errors: int) -> None:
    """
    Add batch counts to the job in one UPDATE statement.

    The increment happens in SQL so concurrent batches never lose updates.
    """
    db.query(CoachImportJob).filter(CoachImportJob.id == _job_uuid(job_id)).update(
        {
            CoachImportJob.success_count: CoachImportJob.success_count + success,
            CoachImportJob.error_count: CoachImportJob.error_count + errors,
        },
        synchronize_session=False,
    )
    db.commit()


def publish_progress(
    job_id: JobId,
    status: str,
    total: Optional[int],
    success: int,
    errors: int,
    error: Optional[str] = None,
) -> None:
    """
    Publish progress to Redis pub/sub for real-time SSE streaming.

    Args:
        job_id: Coach import job ID
        status: Current status (processing, completed, failed)
        total: Number of deduplicated rows, once known
        success: Rows imported so far
        errors: Rows failed so far
        error: Error message (for failed status)
    """
    try:
        redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        message = {
            "job_id": str(job_id),
            "status": status,
            "total": total,
            "success_count": success,
            "error_count": errors,
        }
        if error:
            message["error"] = error
        redis_client.publish(f"coach-import:{job_id}", json.dumps(message))
    except redis.RedisError as e:
        # Progress streaming is best effort; the job record stays authoritative
        logger.warning(f"⚠️ Failed to publish progress for job {job_id}: {e}")


def _error_entry(row: CoachRow, index: int, message: str) -> ImportErrorEntry:
    return ImportErrorEntry(
        row=index,
        error=message,
        unique_id=nullify_empty_string(row.unique_id),
        coach_name=row.coach_name or None,
        school=nullify_empty_string(row.school),
    )


def process_coach_batch(
    job_id: JobId,
    rows: list[CoachRow],
    db: Session,
    batch_number: int = 1,
    offset: int = 0,
) -> BatchResult:
    """
    Import a slice of rows, one transaction per row.

    A failing row is rolled back, logged and recorded; the rest of the batch
    still runs. Job counters are bumped once when the slice is done.

    Args:
        job_id: Coach import job ID
        rows: Rows for this batch, processed in order
        db: Database session
        batch_number: 1-based batch number, for logs
        offset: Position of the first row within the whole run

    Returns:
        BatchResult with counts and per-row errors
    """
    logger.info(f"📦 [Batch {batch_number}] Processing {len(rows)} coaches")
    success_count = 0
    errors: list[ImportErrorEntry] = []

    for index, row in enumerate(rows):
        try:
            process_coach_row(row, db)
            db.commit()
            success_count += 1
        except Exception as e:
            db.rollback()
            entry = _error_entry(row, offset + index, str(e))
            errors.append(entry)
            logger.error(
                f"❌ [Batch {batch_number}] Error processing {entry.unique_id} "
                f"({entry.coach_name} at {entry.school}): {entry.error}"
            )

    logger.info(
        f"✅ [Batch {batch_number}] Complete: {success_count} success, {len(errors)} errors"
    )

    increment_job_progress(db, job_id, success_count, len(errors))
    job = get_job(db, job_id)
    if job:
        publish_progress(
            job_id, job.status, job.total_rows, job.success_count, job.error_count
        )

    return BatchResult(success_count=success_count, error_count=len(errors), errors=errors)


def split_into_batches(job_id: JobId, rows: list[CoachRow], batch_size: int) -> list[CoachBatch]:
    return [
        CoachBatch(
            job_id=str(job_id),
            batch_number=number,
            offset=start,
            rows=rows[start:start + batch_size],
        )
        for number, start in enumerate(range(0, len(rows), batch_size), start=1)
    ]


def make_inline_dispatcher(db: Session) -> BatchDispatcher:
    """Dispatcher that runs every batch in-process, one after another."""

    def dispatch(batches: list[CoachBatch]) -> list[BatchOutcome]:
        outcomes = []
        for batch in batches:
            try:
                result = process_coach_batch(
                    batch.job_id, batch.rows, db, batch.batch_number, batch.offset
                )
                outcomes.append(BatchOutcome(batch.batch_number, len(batch.rows), result=result))
            except Exception as e:
                db.rollback()
                outcomes.append(BatchOutcome(batch.batch_number, len(batch.rows), error=str(e)))
        return outcomes

    return dispatch


def mark_job_failed(db: Session, job_id: JobId, message: str) -> None:
    """Record a job-fatal error on a job that is still processing."""
    job = get_job(db, job_id)
    if job is None or job.import_status is not ImportStatus.PROCESSING:
        logger.warning(f"⚠️ Not marking job {job_id} failed: job missing or not processing")
        return

    job.transition_to(ImportStatus.FAILED)
    job.completed_at = _now()
    job.error_log = [{"error": message}]
    db.commit()
    logger.info(f"📊 Job {job_id} marked as failed")


def run_coach_import(
    job_id: JobId,
    file_url: str,
    db: Session,
    dispatch_group: BatchDispatcher,
    batch_size: Optional[int] = None,
    group_size: Optional[int] = None,
) -> ImportResult:
    """
    Run a whole coach import.

    Downloads and parses the workbook, filters and deduplicates rows, then
    submits batches group by group through ``dispatch_group``, waiting for
    each group before the next. Row and batch failures are tallied; any
    other exception marks the job failed and is re-raised.

    Args:
        job_id: Coach import job ID (must be pending)
        file_url: Workbook locator
        db: Database session
        dispatch_group: Runs a group of batches and returns their outcomes
        batch_size: Rows per batch (defaults to settings)
        group_size: Batches per group (defaults to settings)

    Returns:
        ImportResult with totals and the first errors
    """
    batch_size = batch_size or settings.import_batch_size
    group_size = group_size or settings.import_group_size

    job = get_job(db, job_id)
    if not job:
        logger.error(f"❌ Job not found: {job_id}")
        raise ValueError(f"Job {job_id} not found")

    try:
        job.transition_to(ImportStatus.PROCESSING)
    except InvalidStatusTransition as e:
        # A redelivered task finds its job still processing from the lost run
        if job.import_status is ImportStatus.PROCESSING:
            logger.error(f"💥 Job {job_id} was already processing: {e}")
            mark_job_failed(db, job_id, str(e))
            publish_progress(job_id, ImportStatus.FAILED.value, None, 0, 0, str(e))
        raise
    job.started_at = _now()
    db.commit()
    logger.info(f"🚀 Job {job_id} is processing")
    publish_progress(job_id, ImportStatus.PROCESSING.value, None, 0, 0)

    try:
        content = download_workbook(file_url)
        sheets = parse_workbook(content)
        rows = deduplicate_by_unique_id(filter_invalid_rows(sheets))
        logger.info(f"🔢 Processing {len(rows)} unique coaches for job {job_id}")

        job = get_job(db, job_id)
        job.total_rows = len(rows)
        db.commit()

        batches = split_into_batches(job_id, rows, batch_size)
        groups = [batches[i:i + group_size] for i in range(0, len(batches), group_size)]
        logger.info(f"⚙️ Dispatching {len(batches)} batches in groups of {group_size}")

        success_count = 0
        error_count = 0
        errors: list[ImportErrorEntry] = []

        for group_number, group in enumerate(groups, start=1):
            logger.info(
                f"📤 Group {group_number}: batches {group[0].batch_number}-{group[-1].batch_number}"
            )
            for outcome in dispatch_group(group):
                if outcome.ok:
                    success_count += outcome.result.success_count
                    error_count += outcome.result.error_count
                    errors.extend(outcome.result.errors)
                else:
                    logger.error(f"💥 Batch {outcome.batch_number} failed: {outcome.error}")
                    error_count += outcome.size

        final_status = ImportStatus.FAILED if success_count == 0 else ImportStatus.COMPLETED

        job = get_job(db, job_id)
        db.refresh(job)
        job.transition_to(final_status)
        job.completed_at = _now()
        job.success_count = success_count
        job.error_count = error_count
        job.error_log = [e.to_log() for e in errors[:settings.error_log_limit]] or None
        db.commit()
        logger.info(
            f"🏁 Job {job_id} {final_status.value}: {success_count} success, {error_count} errors"
        )
        publish_progress(job_id, final_status.value, len(rows), success_count, error_count)

        return ImportResult(
            success=True,
            processed=len(rows),
            success_count=success_count,
            error_count=error_count,
            errors=errors[:settings.error_response_limit],
        )

    except Exception as e:
        logger.error(f"💥 Coach import failed for job {job_id}: {e}", exc_info=True)
        db.rollback()
        mark_job_failed(db, job_id, str(e))
        publish_progress(job_id, ImportStatus.FAILED.value, None, 0, 0, str(e))
        raise
