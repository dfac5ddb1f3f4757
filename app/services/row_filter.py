"""Row filtering and deduplication for parsed coach sheets."""
import logging

from app.schemas.coach_row import CoachRow
from app.services.normalizers import nullify_empty_string

logger = logging.getLogger(__name__)


def is_removed(row: CoachRow) -> bool:
    return (row.removed or "").strip().lower() == "y"


def is_structurally_empty(row: CoachRow) -> bool:
    return not any(
        nullify_empty_string(value)
        for value in (row.email, row.position, row.first_name, row.last_name)
    )


def is_valid_row(row: CoachRow) -> bool:
    """Rows marked removed, without any coach fields, or without a school are dropped."""
    if is_removed(row):
        return False
    if is_structurally_empty(row):
        return False
    if nullify_empty_string(row.school) is None:
        return False
    return True


def filter_invalid_rows(sheets: dict[str, list[CoachRow]]) -> list[CoachRow]:
    """
    Flatten parsed sheets into one list of usable rows.

    Args:
        sheets: Sheet name -> parsed rows, in workbook order

    Returns:
        Valid rows, preserving sheet and row order
    """
    valid_rows: list[CoachRow] = []
    for sheet_name, rows in sheets.items():
        kept = [row for row in rows if is_valid_row(row)]
        logger.info(f"🧹 Sheet '{sheet_name}': {len(kept)}/{len(rows)} valid rows")
        valid_rows.extend(kept)
    return valid_rows


def deduplicate_by_unique_id(rows: list[CoachRow]) -> list[CoachRow]:
    """
    Keep the last row for every Unique ID.

    Later rows are treated as more recent edits. Rows without a Unique ID
    are dropped.
    """
    grouped: dict[str, list[CoachRow]] = {}
    for row in rows:
        unique_id = nullify_empty_string(row.unique_id)
        if unique_id is None:
            continue
        grouped.setdefault(unique_id.strip(), []).append(row)

    deduped: list[CoachRow] = []
    for unique_id, group in grouped.items():
        if len(group) > 1:
            logger.info(
                f"🔁 Deduplicating {unique_id}: {len(group)} occurrences, taking latest"
            )
        deduped.append(group[-1])

    logger.info(f"✅ Deduplicated: {len(rows)} → {len(deduped)} rows")
    return deduped
