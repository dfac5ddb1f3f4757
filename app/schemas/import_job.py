"""Coach import request, result and response schemas."""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ImportErrorEntry(BaseModel):
    """One row-level failure recorded in a job's error log."""

    row: Optional[int] = None
    error: str
    unique_id: Optional[str] = Field(None, alias="uniqueId")
    coach_name: Optional[str] = Field(None, alias="coachName")
    school: Optional[str] = None

    class Config:
        populate_by_name = True

    def to_log(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BatchResult(BaseModel):
    """Outcome of one batch worker run."""

    success_count: int = Field(0, alias="successCount")
    error_count: int = Field(0, alias="errorCount")
    errors: list[ImportErrorEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ImportResult(BaseModel):
    """Outcome of a whole import run."""

    success: bool = True
    processed: int
    success_count: int = Field(..., alias="successCount")
    error_count: int = Field(..., alias="errorCount")
    errors: list[ImportErrorEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ImportFromUrlRequest(BaseModel):
    """Request to import a workbook that already lives at a URL."""

    file_url: str = Field(..., min_length=1, max_length=4096)
    filename: Optional[str] = Field(None, max_length=500)


class ImportCreatedResponse(BaseModel):
    """Response after an import job has been queued."""

    job_id: str
    status: str
    message: str = "Coach import queued"


class ImportJobResponse(BaseModel):
    """Coach import job status response."""

    id: UUID
    original_filename: Optional[str] = None
    file_size_bytes: Optional[int] = None
    status: str
    total_rows: Optional[int] = None
    success_count: int
    error_count: int
    error_log: Optional[list[dict[str, Any]]] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
