"""Pytest configuration and fixtures."""
import os
import tempfile
from io import BytesIO

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="coach-imports-"))
os.environ.setdefault("LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Conference, Division, Event, GoverningBody
from app.schemas.coach_row import CoachRow
from app.services import coach_import

HEADERS = [
    "Unique ID",
    "Removed? (y)",
    "First name",
    "Last name",
    "Position",
    "Email address",
    "School",
    "State",
    "Conference",
    "Sport code",
    "Average GPA",
    "Responsibilities",
]


@pytest.fixture
def engine():
    """Create a test database for testing."""
    # Use in-memory SQLite shared across sessions
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        try:
            db = TestingSessionLocal()
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_progress_publishing(monkeypatch):
    """Keep tests off Redis."""
    monkeypatch.setattr(coach_import, "publish_progress", lambda *args, **kwargs: None)


@pytest.fixture
def reference_data(db_session):
    """Divisions, one conference and a few events."""
    ncaa = GoverningBody(name="NCAA")
    db_session.add(ncaa)
    db_session.flush()

    data = {
        "divisions": {name: Division(name=name) for name in ("DI", "DII")},
        "conference": Conference(name="Big Ten", governing_body_id=ncaa.id),
        "events": {
            name: Event(name=name, event_group=group)
            for name, group in (
                ("100m", "sprints"),
                ("Shot Put", "throws"),
                ("Long Jump", "jumps"),
                ("4x400m Relay", "relays"),
            )
        },
    }
    db_session.add_all(data["divisions"].values())
    db_session.add(data["conference"])
    db_session.add_all(data["events"].values())
    db_session.commit()
    return data


@pytest.fixture
def make_row():
    """Build a CoachRow with sensible defaults."""

    def _make_row(**overrides) -> CoachRow:
        values = {
            "unique_id": "DI-0001",
            "first_name": "Pat",
            "last_name": "Lee",
            "position": "Assistant Coach",
            "email": "pat.lee@northfield.edu",
            "school": "Northfield University",
            "state": "MN",
            "conference": "Big Ten",
            "sport_code": "Men's Track",
            "division_tag": "DI",
            "sheet_name": "DI",
        }
        values.update(overrides)
        return CoachRow(**values)

    return _make_row


@pytest.fixture
def coach_sheet():
    """Rows for one division sheet: banner rows, the header row, then records."""

    def _sheet(records: list[dict], banner_rows: int = 5) -> list[list]:
        rows = [[f"Track & field coaches - banner {i + 1}"] for i in range(banner_rows)]
        rows.append(HEADERS)
        for record in records:
            rows.append([record.get(header) for header in HEADERS])
        return rows

    return _sheet


@pytest.fixture
def build_workbook():
    """Serialize {sheet name: rows} into .xlsx bytes."""

    def _build(sheets: dict) -> bytes:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for name, rows in sheets.items():
            sheet = workbook.create_sheet(name)
            for row in rows:
                sheet.append(row)
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _build
