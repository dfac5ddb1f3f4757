"""Coach import API endpoints."""
import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import List
from uuid import UUID

import redis
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.import_job import CoachImportJob, ImportStatus
from app.schemas.import_job import (
    ImportCreatedResponse,
    ImportFromUrlRequest,
    ImportJobResponse,
)
from app.tasks.import_tasks import process_coach_import

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm")
TERMINAL_STATUSES = (ImportStatus.COMPLETED.value, ImportStatus.FAILED.value)

router = APIRouter(prefix="/api/coach-imports", tags=["coach-imports"])

settings = get_settings()
logger = logging.getLogger(__name__)

UPLOAD_DIR = Path(settings.upload_dir)
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)


def _get_job_or_404(job_id: UUID, db: Session) -> CoachImportJob:
    job = db.get(CoachImportJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("", response_model=List[ImportJobResponse])
def list_import_jobs(db: Session = Depends(get_db)):
    """List coach import jobs, newest first."""
    return db.query(CoachImportJob).order_by(CoachImportJob.created_at.desc()).all()


@router.get("/{job_id}", response_model=ImportJobResponse)
def get_import_job(job_id: UUID, db: Session = Depends(get_db)):
    """
    Get import job status, counts and error log.

    Used for polling-based progress tracking when SSE is not available.
    """
    return _get_job_or_404(job_id, db)


@router.delete("/{job_id}", status_code=204)
def delete_import_job(job_id: UUID, db: Session = Depends(get_db)):
    """Delete an import job record."""
    job = _get_job_or_404(job_id, db)
    db.delete(job)
    db.commit()
    return None


@router.get("/{job_id}/stream")
async def stream_progress(job_id: UUID, db: Session = Depends(get_db)):
    """
    Server-Sent Events (SSE) endpoint for real-time progress streaming.

    Relays messages from the job's Redis channel until the job reaches a
    terminal status.
    """
    job = _get_job_or_404(job_id, db)
    snapshot = {
        "job_id": str(job.id),
        "status": job.status,
        "total": job.total_rows,
        "success_count": job.success_count,
        "error_count": job.error_count,
    }

    async def event_generator():
        """Generate SSE events from Redis pub/sub."""
        yield f"data: {json.dumps(snapshot)}\n\n"
        if snapshot["status"] in TERMINAL_STATUSES:
            return

        redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        pubsub = redis_client.pubsub()
        pubsub.subscribe(f"coach-import:{job_id}")

        try:
            while True:
                message = pubsub.get_message(timeout=1.0)

                if message and message["type"] == "message":
                    data = json.loads(message["data"])
                    yield f"data: {json.dumps(data)}\n\n"

                    if data.get("status") in TERMINAL_STATUSES:
                        break

                await asyncio.sleep(0.1)

        except redis.RedisError as e:
            logger.warning(f"SSE stream error for job {job_id}: {str(e)}")
            yield f"data: {json.dumps({'status': 'error', 'error': 'Stream error'})}\n\n"

        finally:
            pubsub.unsubscribe(f"coach-import:{job_id}")
            redis_client.close()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.post("/from-url", response_model=ImportCreatedResponse, status_code=202)
def import_from_url(request: ImportFromUrlRequest, db: Session = Depends(get_db)):
    """Queue an import for a workbook reachable at a URL (e.g. a signed storage URL)."""
    job = CoachImportJob(
        id=uuid.uuid4(),
        original_filename=request.filename,
        file_url=request.file_url,
        status=ImportStatus.PENDING.value,
    )
    db.add(job)
    db.commit()
    logger.info(f"💾 Job record created for remote workbook: {job.id}")

    process_coach_import.delay(str(job.id), request.file_url)
    logger.info(f"✅ Celery task triggered for job {job.id}")

    return ImportCreatedResponse(job_id=str(job.id), status=job.status)


@router.post("", response_model=ImportCreatedResponse, status_code=202)
async def upload_workbook(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """
    Upload a coach workbook and queue it for import.

    This endpoint:
    1. Validates file type and size
    2. Saves the workbook to the upload directory
    3. Creates a pending import job record
    4. Triggers background processing with Celery
    5. Returns job_id for progress tracking
    """
    logger.info(f"📁 Starting workbook upload: filename={file.filename}")

    if not file.filename or not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        logger.warning(f"❌ Invalid file type: {file.filename}")
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Only {', '.join(ALLOWED_EXTENSIONS)} files are allowed.",
        )

    file_size = 0
    content = await file.read(8192)
    while content:
        file_size += len(content)
        if file_size > settings.max_upload_bytes:
            logger.warning(f"❌ File too large: {file_size} bytes")
            raise HTTPException(status_code=413, detail="File size exceeds upload limit")
        content = await file.read(8192)

    if file_size == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    logger.info(f"✅ File validation passed: {file_size} bytes")
    await file.seek(0)

    job_id = uuid.uuid4()
    workbook_path = UPLOAD_DIR / f"{job_id}{Path(file.filename).suffix.lower()}"

    job = CoachImportJob(
        id=job_id,
        original_filename=file.filename,
        file_url=str(workbook_path),
        file_size_bytes=file_size,
        status=ImportStatus.PENDING.value,
    )
    db.add(job)
    db.commit()
    logger.info(f"💾 Job record created in database: {job_id}")

    try:
        with open(workbook_path, "wb") as buffer:
            content = await file.read(8192)
            while content:
                buffer.write(content)
                content = await file.read(8192)
        logger.info(f"✅ Workbook saved to {workbook_path}")

        process_coach_import.delay(str(job_id), str(workbook_path), cleanup=True)
        logger.info(f"🚀 Celery task triggered for job {job_id}")

        return ImportCreatedResponse(job_id=str(job_id), status=job.status)

    except Exception as e:
        logger.error(f"💥 Upload failed for job {job_id}: {str(e)}", exc_info=True)

        db.delete(job)
        db.commit()
        if workbook_path.exists():
            workbook_path.unlink()
            logger.info(f"🧹 Cleaned up workbook: {workbook_path}")

        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")
