"""Classified row-level errors raised while importing coaches."""
import re

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

# Constraint name -> human readable field for duplicate key messages
CONSTRAINT_FIELDS = {
    "coaches_email_key": "email",
    "universities_name_state_key": "name and state",
    "universities_name_stateless_key": "name",
    "programs_university_gender_key": "university and gender",
    "university_jobs_open_key": "coach and university",
    "university_divisions_open_key": "university and division",
    "university_conferences_open_key": "university and conference",
    "divisions_name_key": "name",
    "conferences_name_key": "name",
    "events_name_key": "name",
}

PG_CONSTRAINT = re.compile(r'unique constraint "(?P<name>[^"]+)"')
PG_KEY_COLUMNS = re.compile(r"Key \((?P<columns>[^)]+)\)=")
SQLITE_UNIQUE_COLUMNS = re.compile(r"UNIQUE constraint failed: (?P<columns>.+)$", re.MULTILINE)
PG_NOT_NULL_COLUMN = re.compile(r'column "(?P<column>\w+)"')
SQLITE_NOT_NULL_COLUMN = re.compile(r"NOT NULL constraint failed: [\w]+\.(?P<column>\w+)")


class ImportRowError(Exception):
    """A row could not be imported; the message is safe to show to users."""


class RowRejectedError(ImportRowError):
    """The row is structurally invalid and was skipped before any write."""


class WriteConflictError(ImportRowError):
    """A store write violated a constraint."""


def _readable(name: str) -> str:
    return name.replace("_", " ")


def _duplicate_field(message: str) -> str:
    match = PG_CONSTRAINT.search(message)
    if match and match.group("name") in CONSTRAINT_FIELDS:
        return CONSTRAINT_FIELDS[match.group("name")]

    match = PG_KEY_COLUMNS.search(message)
    if match:
        return " and ".join(_readable(c.strip()) for c in match.group("columns").split(","))

    match = SQLITE_UNIQUE_COLUMNS.search(message)
    if match:
        columns = [c.strip().split(".")[-1] for c in match.group("columns").split(",")]
        return " and ".join(_readable(c) for c in columns)

    return "details"


def describe_database_error(message: str, context: str) -> str:
    """
    Rewrite a raw driver error into a stable, human readable message.

    Understands PostgreSQL and SQLite wording for duplicate key, foreign
    key and not-null violations; anything else passes through verbatim.
    """
    lowered = message.lower()

    if "duplicate key value violates unique constraint" in lowered or "unique constraint failed" in lowered:
        return f"{context}: a record with this {_duplicate_field(message)} already exists"

    if "violates foreign key constraint" in lowered or "foreign key constraint failed" in lowered:
        return f"{context}: referenced record not found"

    if "violates not-null constraint" in lowered or "not null constraint failed" in lowered:
        match = PG_NOT_NULL_COLUMN.search(message) or SQLITE_NOT_NULL_COLUMN.search(message)
        column = _readable(match.group("column")) if match else "required field"
        return f'{context}: missing required field "{column}"'

    return f"{context}: {message}"


def classify_database_error(exc: SQLAlchemyError, context: str) -> WriteConflictError:
    """Wrap a SQLAlchemy error in a WriteConflictError with a classified message."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        message = str(exc.orig)
    else:
        message = str(exc)
    return WriteConflictError(describe_database_error(message.strip(), context))
