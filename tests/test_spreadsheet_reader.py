"""Tests for workbook download and parsing."""
import httpx
import pytest

from app.services import spreadsheet_reader
from app.services.spreadsheet_reader import (
    DEFAULT_HEADER_ROW,
    WorkbookDownloadError,
    download_workbook,
    find_header_row,
    parse_sheet,
    parse_workbook,
)

NORTHFIELD = {
    "Unique ID": "DI-0001",
    "First name": "Pat",
    "Last name": "Lee",
    "Position": "Head Coach",
    "Email address": "pat.lee@northfield.edu",
    "School": "Northfield University",
    "State": "MN",
    "Conference": "Big Ten",
    "Sport code": "Men's Track",
    "Average GPA": 3.5,
}


def test_find_header_row_locates_conference_column():
    """Test that the header row is the first one with a Conference cell."""
    rows = [("Banner",), (None,), ("Name", " conference ", "School"), ("x", "y", "z")]
    assert find_header_row(rows) == 2


def test_find_header_row_falls_back_to_default():
    """Test that sheets without a Conference column use the legacy header row."""
    rows = [("Banner",)] * 12
    assert find_header_row(rows) == DEFAULT_HEADER_ROW


def test_find_header_row_only_scans_first_rows():
    rows = [("Banner",)] * 10 + [("Conference",)]
    assert find_header_row(rows) == DEFAULT_HEADER_ROW


def test_parse_sheet_uses_fallback_header_row():
    """Test the legacy layout: headers on row 6, no Conference column."""
    rows = [("Banner",)] * 5 + [
        ("Unique ID", "Email address", "School"),
        ("DII-7", "sam@lakeside.edu", "Lakeside College"),
    ]
    parsed = parse_sheet(rows, "DII")
    assert len(parsed) == 1
    assert parsed[0].unique_id == "DII-7"
    assert parsed[0].email == "sam@lakeside.edu"


def test_parse_sheet_stamps_division_and_coerces_to_text():
    rows = [
        ("Unique ID", "Conference", "School", "No. of undergrads", "Average GPA"),
        ("DI-1", "Big Ten", "Northfield University", 12000.0, 3.5),
    ]
    [row] = parse_sheet(rows, "DI")
    assert row.division_tag == "DI"
    assert row.sheet_name == "DI"
    assert row.undergrads == "12000"
    assert row.average_gpa == "3.5"


def test_parse_sheet_skips_blank_rows_and_pads_short_rows():
    rows = [
        ("Unique ID", "Conference", "School", "State"),
        (None, None, None, None),
        ("DI-1", "Big Ten", "Northfield University"),
    ]
    [row] = parse_sheet(rows, "DI")
    assert row.school == "Northfield University"
    assert row.state is None


def test_parse_sheet_keeps_unknown_columns():
    """Test that columns without a dedicated field survive as extras."""
    rows = [
        ("Unique ID", "Conference", "Mascot", "Mascot"),
        ("DI-1", "Big Ten", "Owls", "Hoot"),
    ]
    [row] = parse_sheet(rows, "DI")
    assert row.extra_columns == {"Mascot": "Owls", "Mascot_1": "Hoot"}


def test_parse_sheet_without_rows_after_header():
    assert parse_sheet([("Conference",)], "DI") == []
    assert parse_sheet([], "DI") == []


def test_parse_workbook_skips_tutorial_and_readme(build_workbook, coach_sheet):
    """Test that every data sheet is parsed and helper sheets are ignored."""
    content = build_workbook(
        {
            "Tutorial": [["How to use this workbook"], ["Conference"]],
            "DI": coach_sheet([NORTHFIELD]),
            "README first": [["Notes"]],
            "DII": coach_sheet([{**NORTHFIELD, "Unique ID": "DII-0001", "School": "Lakeside College"}]),
        }
    )

    sheets = parse_workbook(content)

    assert list(sheets) == ["DI", "DII"]
    [row] = sheets["DI"]
    assert row.unique_id == "DI-0001"
    assert row.coach_name == "Pat Lee"
    assert row.average_gpa == "3.5"
    assert row.removed is None
    assert sheets["DII"][0].school == "Lakeside College"
    assert sheets["DII"][0].division_tag == "DII"


def test_download_workbook_reads_local_path(tmp_path):
    path = tmp_path / "coaches.xlsx"
    path.write_bytes(b"workbook-bytes")

    assert download_workbook(str(path)) == b"workbook-bytes"
    assert download_workbook(f"file://{path}") == b"workbook-bytes"


def test_download_workbook_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        download_workbook(str(tmp_path / "missing.xlsx"))


def test_download_workbook_http_error(monkeypatch):
    """Test that a non-2xx response becomes a WorkbookDownloadError."""
    url = "https://storage.example.com/coaches.xlsx"

    def fake_get(locator, **kwargs):
        return httpx.Response(404, request=httpx.Request("GET", locator))

    monkeypatch.setattr(spreadsheet_reader.httpx, "get", fake_get)

    with pytest.raises(WorkbookDownloadError, match="404 Not Found"):
        download_workbook(url)


def test_download_workbook_http_success(monkeypatch):
    def fake_get(locator, **kwargs):
        assert kwargs["follow_redirects"] is True
        return httpx.Response(200, content=b"xlsx", request=httpx.Request("GET", locator))

    monkeypatch.setattr(spreadsheet_reader.httpx, "get", fake_get)

    assert download_workbook("http://storage.example.com/coaches.xlsx") == b"xlsx"


def test_download_workbook_transport_error(monkeypatch):
    def fake_get(locator, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(spreadsheet_reader.httpx, "get", fake_get)

    with pytest.raises(WorkbookDownloadError, match="connection refused"):
        download_workbook("https://storage.example.com/coaches.xlsx")
