"""Run a coach import in-process, without Celery workers."""
import json
import logging
import sys
import uuid

from app.database import Base, SessionLocal, engine
from app.models.import_job import CoachImportJob, ImportStatus
from app.services.coach_import import make_inline_dispatcher, run_coach_import


def main():
    """Create a job for the given workbook and import it against DATABASE_URL."""
    if len(sys.argv) < 2:
        print("Usage: python scripts/run_import.py <workbook path or URL>")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_url = sys.argv[1]

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        job = CoachImportJob(
            id=uuid.uuid4(),
            original_filename=file_url.rsplit("/", 1)[-1],
            file_url=file_url,
            status=ImportStatus.PENDING.value,
        )
        db.add(job)
        db.commit()

        result = run_coach_import(job.id, file_url, db, make_inline_dispatcher(db))
        print(json.dumps(result.model_dump(by_alias=True), indent=2))
    finally:
        db.close()


if __name__ == "__main__":
    main()
