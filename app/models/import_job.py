"""Coach import job model for tracking workbook import progress."""
import enum
import uuid

from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.database import Base


class ImportStatus(str, enum.Enum):
    """Lifecycle of a coach import job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    ImportStatus.PENDING: frozenset({ImportStatus.PROCESSING}),
    ImportStatus.PROCESSING: frozenset({ImportStatus.COMPLETED, ImportStatus.FAILED}),
    ImportStatus.COMPLETED: frozenset(),
    ImportStatus.FAILED: frozenset(),
}


class InvalidStatusTransition(ValueError):
    """Raised when a job is moved between statuses that are not connected."""

    def __init__(self, current: ImportStatus, target: ImportStatus):
        super().__init__(
            f"Cannot move import job from '{current.value}' to '{target.value}'"
        )
        self.current = current
        self.target = target


class CoachImportJob(Base):
    """Model for tracking coach workbook imports."""

    __tablename__ = "coach_import_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    original_filename = Column(String(500), nullable=True)
    file_url = Column(Text, nullable=True)
    file_size_bytes = Column(BigInteger, nullable=True)
    status = Column(
        String(50), nullable=False, default=ImportStatus.PENDING.value
    )  # pending, processing, completed, failed
    total_rows = Column(Integer, nullable=True)
    success_count = Column(Integer, default=0, nullable=False)
    error_count = Column(Integer, default=0, nullable=False)
    error_log = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def import_status(self) -> ImportStatus:
        return ImportStatus(self.status)

    def transition_to(self, target: ImportStatus) -> None:
        """
        Move the job to ``target``.

        Only pending -> processing and processing -> completed/failed are
        accepted; everything else raises InvalidStatusTransition.
        """
        current = self.import_status
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransition(current, target)
        self.status = target.value

    def __repr__(self):
        return f"<CoachImportJob(id={self.id}, status='{self.status}')>"
