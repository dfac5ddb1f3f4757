"""Tests for the coach import API."""
import json
import uuid
from pathlib import Path

import pytest

from app.api import coach_imports
from app.models import CoachImportJob, ImportStatus


class FakeImportTask:
    """Stands in for the Celery task; records queued imports."""

    def __init__(self):
        self.calls = []

    def delay(self, *args, **kwargs):
        self.calls.append((args, kwargs))


@pytest.fixture
def import_task(monkeypatch):
    task = FakeImportTask()
    monkeypatch.setattr(coach_imports, "process_coach_import", task)
    return task


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_upload_rejects_non_workbook(client, import_task):
    """Test that only .xlsx/.xlsm uploads are accepted."""
    response = client.post(
        "/api/coach-imports",
        files={"file": ("coaches.csv", b"a,b,c\n", "text/csv")},
    )
    assert response.status_code == 400
    assert import_task.calls == []


def test_upload_rejects_empty_file(client, import_task):
    response = client.post(
        "/api/coach-imports",
        files={"file": ("coaches.xlsx", b"", "application/octet-stream")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded file is empty"


def test_upload_rejects_oversized_file(client, import_task, monkeypatch):
    monkeypatch.setattr(coach_imports.settings, "max_upload_bytes", 10)
    response = client.post(
        "/api/coach-imports",
        files={"file": ("coaches.xlsx", b"x" * 11, "application/octet-stream")},
    )
    assert response.status_code == 413


def test_upload_queues_import(client, import_task, build_workbook, coach_sheet):
    """Test that an upload is saved, recorded as pending and handed to Celery."""
    content = build_workbook({"DI": coach_sheet([])})

    response = client.post(
        "/api/coach-imports",
        files={"file": ("Coaches.XLSX", content, "application/octet-stream")},
    )

    assert response.status_code == 202
    data = response.json()
    assert data["status"] == "pending"

    [(args, kwargs)] = import_task.calls
    job_id, saved_path = args
    assert job_id == data["job_id"]
    assert kwargs == {"cleanup": True}
    assert saved_path.endswith(f"{job_id}.xlsx")
    assert Path(saved_path).read_bytes() == content
    Path(saved_path).unlink()

    job = client.get(f"/api/coach-imports/{job_id}").json()
    assert job["original_filename"] == "Coaches.XLSX"
    assert job["file_size_bytes"] == len(content)
    assert job["success_count"] == 0


def test_import_from_url(client, import_task):
    url = "https://storage.example.com/coaches.xlsx?sig=abc"

    response = client.post(
        "/api/coach-imports/from-url",
        json={"file_url": url, "filename": "coaches.xlsx"},
    )

    assert response.status_code == 202
    job_id = response.json()["job_id"]
    assert import_task.calls == [((job_id, url), {})]


def test_import_from_url_requires_url(client, import_task):
    response = client.post("/api/coach-imports/from-url", json={"file_url": ""})
    assert response.status_code == 422


def test_get_list_and_delete_jobs(client, db_session):
    job = CoachImportJob(
        id=uuid.uuid4(),
        original_filename="coaches.xlsx",
        status=ImportStatus.COMPLETED.value,
        total_rows=3,
        success_count=2,
        error_count=1,
        error_log=[{"row": 1, "error": "Missing email address - coach record skipped"}],
    )
    db_session.add(job)
    db_session.commit()
    job_id = str(job.id)

    listed = client.get("/api/coach-imports")
    assert listed.status_code == 200
    assert [j["id"] for j in listed.json()] == [job_id]

    detail = client.get(f"/api/coach-imports/{job_id}").json()
    assert detail["status"] == "completed"
    assert detail["total_rows"] == 3
    assert detail["error_log"][0]["row"] == 1

    assert client.delete(f"/api/coach-imports/{job_id}").status_code == 204
    assert client.get(f"/api/coach-imports/{job_id}").status_code == 404


def test_get_unknown_job(client):
    assert client.get(f"/api/coach-imports/{uuid.uuid4()}").status_code == 404
    assert client.get("/api/coach-imports/not-a-uuid").status_code == 422


def test_stream_finished_job_sends_snapshot(client, db_session):
    """Test that a finished job's stream closes after the snapshot event."""
    job = CoachImportJob(
        id=uuid.uuid4(), status=ImportStatus.FAILED.value, success_count=0, error_count=4
    )
    db_session.add(job)
    db_session.commit()

    response = client.get(f"/api/coach-imports/{job.id}/stream")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    [event] = [line for line in response.text.splitlines() if line.startswith("data: ")]
    payload = json.loads(event[len("data: "):])
    assert payload["status"] == "failed"
    assert payload["error_count"] == 4
