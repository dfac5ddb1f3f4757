"""Download and parse multi-sheet coach workbooks."""
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

import httpx
from openpyxl import load_workbook

from app.config import get_settings
from app.schemas.coach_row import CoachRow
from app.services.normalizers import cell_to_string

HEADER_MARKER = "conference"
HEADER_SCAN_ROWS = 10
DEFAULT_HEADER_ROW = 5  # 0-indexed; legacy layout has headers on row 6
SKIPPED_SHEET_KEYWORDS = ("tutorial", "readme")

settings = get_settings()
logger = logging.getLogger(__name__)


class WorkbookDownloadError(Exception):
    """The source workbook could not be fetched."""


def download_workbook(locator: str) -> bytes:
    """
    Fetch the workbook bytes once.

    Args:
        locator: http(s) URL, ``file://`` URL or local filesystem path

    Returns:
        Raw workbook content
    """
    if locator.startswith(("http://", "https://")):
        logger.info(f"🌐 Downloading workbook from {locator}")
        try:
            response = httpx.get(
                locator, timeout=settings.download_timeout, follow_redirects=True
            )
        except httpx.HTTPError as e:
            raise WorkbookDownloadError(f"Failed to download file: {e}") from e
        if response.is_error:
            raise WorkbookDownloadError(
                f"Failed to download file: {response.status_code} {response.reason_phrase}"
            )
        content = response.content
    else:
        path = Path(locator.removeprefix("file://"))
        if not path.exists():
            logger.error(f"❌ Workbook not found: {path}")
            raise FileNotFoundError(f"Workbook not found: {path}")
        content = path.read_bytes()

    logger.info(f"✅ Workbook loaded: {len(content)} bytes")
    return content


def find_header_row(rows: list[tuple]) -> int:
    """Index of the first row (within the scan window) holding a Conference cell."""
    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        for cell in row:
            if isinstance(cell, str) and cell.strip().lower() == HEADER_MARKER:
                return index
    return DEFAULT_HEADER_ROW


def _header_names(header_row: tuple) -> list[Optional[str]]:
    names: list[Optional[str]] = []
    seen: dict[str, int] = {}
    for cell in header_row:
        name = cell_to_string(cell)
        if name is None or not name.strip():
            names.append(None)
            continue
        name = name.strip()
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def parse_sheet(rows: list[tuple], sheet_name: str) -> list[CoachRow]:
    """Turn raw sheet rows into CoachRow records stamped with the sheet name."""
    header_index = find_header_row(rows)
    if header_index >= len(rows):
        return []

    headers = _header_names(rows[header_index])
    records: list[CoachRow] = []

    for raw in rows[header_index + 1:]:
        record: dict[str, Any] = {}
        for position, header in enumerate(headers):
            if header is None:
                continue
            value = raw[position] if position < len(raw) else None
            record[header] = cell_to_string(value)

        if all(value is None for value in record.values()):
            continue

        record["_division"] = sheet_name
        record["_sheetName"] = sheet_name
        records.append(CoachRow.model_validate(record))

    return records


def is_data_sheet(sheet_name: str) -> bool:
    lowered = sheet_name.lower()
    return not any(keyword in lowered for keyword in SKIPPED_SHEET_KEYWORDS)


def parse_workbook(content: bytes) -> dict[str, list[CoachRow]]:
    """
    Parse every data sheet of a workbook.

    Args:
        content: Raw .xlsx bytes

    Returns:
        Mapping of sheet name to its parsed rows
    """
    workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    logger.info(f"📖 Found sheets: {', '.join(workbook.sheetnames)}")

    sheets: dict[str, list[CoachRow]] = {}
    try:
        for sheet_name in workbook.sheetnames:
            if not is_data_sheet(sheet_name):
                logger.info(f"⏭️ Skipping sheet: {sheet_name}")
                continue

            rows = list(workbook[sheet_name].iter_rows(values_only=True))
            sheets[sheet_name] = parse_sheet(rows, sheet_name)
            logger.info(f"📄 Sheet '{sheet_name}': {len(sheets[sheet_name])} rows")
    finally:
        workbook.close()

    return sheets
