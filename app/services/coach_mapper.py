"""
Map one coach row onto universities, programs, coaches and jobs.

``process_coach_row`` runs the find-or-create/update sequence for a single
row. Updates only ever set non-null values, so a sparse row never erases
data written by a richer one. Every write is flushed through ``_flush`` so
store errors surface as classified ``WriteConflictError`` messages.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.coach import Coach, CoachResponsibility, Event, Program, UniversityJob
from app.models.university import (
    Conference,
    Division,
    University,
    UniversityConference,
    UniversityDivision,
)
from app.schemas.coach_row import CoachRow
from app.services.import_errors import RowRejectedError, classify_database_error
from app.services.normalizers import (
    currency_to_integer,
    event_groups_from_text,
    event_name_matches_group,
    infer_gender,
    infer_program_scope,
    map_division_code,
    nullify_empty_string,
    parse_date,
    parse_float,
    percentage_to_decimal,
    percentile_range,
    primary_specialty_from_text,
    remove_null_values,
    specific_event_names_from_text,
)

DEFAULT_JOB_TITLE = "Coach"
DEFAULT_EVENT_GROUP = "combined"
MISSING_EMAIL_MESSAGE = "Missing email address - coach record skipped"

logger = logging.getLogger(__name__)


@dataclass
class MappingResult:
    """Ids resolved for one row, plus any non-fatal lookup misses."""

    university_id: Optional[uuid.UUID] = None
    program_id: Optional[uuid.UUID] = None
    coach_id: Optional[uuid.UUID] = None
    job_id: Optional[uuid.UUID] = None
    warnings: list[str] = field(default_factory=list)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _flush(db: Session, context: str) -> None:
    try:
        db.flush()
    except SQLAlchemyError as e:
        raise classify_database_error(e, context) from e


def _apply_updates(instance: Any, values: dict[str, Any]) -> None:
    for key, value in remove_null_values(values).items():
        setattr(instance, key, value)


def process_coach_row(row: CoachRow, db: Session) -> MappingResult:
    """
    Import one validated row.

    Args:
        row: Parsed coach row
        db: Database session; the caller owns commit/rollback

    Returns:
        MappingResult with the ids touched and any warnings

    Raises:
        RowRejectedError: the row has no email; nothing was written
        WriteConflictError: a write violated a store constraint
    """
    email = nullify_empty_string(row.email)
    if email is None:
        raise RowRejectedError(MISSING_EMAIL_MESSAGE)
    email = email.strip()

    try:
        return _map_row(row, email, db)
    except SQLAlchemyError as e:
        raise classify_database_error(e, "Failed to import coach") from e


def _map_row(row: CoachRow, email: str, db: Session) -> MappingResult:
    result = MappingResult()

    university = upsert_university(row, db)
    result.university_id = university.id

    link_division(university, map_division_code(row.division_tag), db, result.warnings)

    conference_name = nullify_empty_string(row.conference)
    if conference_name is not None:
        link_conference(university, conference_name, db, result.warnings)

    program = upsert_program(university, row, db)
    result.program_id = program.id

    coach = upsert_coach(row, email, university, program, db)
    result.coach_id = coach.id

    close_jobs_elsewhere(coach, university, db)

    job = upsert_university_job(coach, university, program, row, email, db)
    result.job_id = job.id

    responsibilities = nullify_empty_string(row.responsibilities)
    if responsibilities is not None:
        replace_responsibilities(job, responsibilities, db)

    return result


def _university_fields(row: CoachRow) -> dict[str, Any]:
    sat_reading = percentile_range(row.sat_reading)
    sat_math = percentile_range(row.sat_math)
    act_composite = percentile_range(row.act_composite)

    return {
        "city": nullify_empty_string(row.city),
        "region": nullify_empty_string(row.region),
        "size_of_city": nullify_empty_string(row.size_of_city),
        "type_public_private": nullify_empty_string(row.public_private),
        "religious_affiliation": nullify_empty_string(row.religious_affiliation),
        "institution_flags_raw": nullify_empty_string(row.institution_flags),
        "average_gpa": parse_float(row.average_gpa),
        "sat_ebrw_25th": sat_reading["min"],
        "sat_ebrw_75th": sat_reading["max"],
        "sat_math_25th": sat_math["min"],
        "sat_math_75th": sat_math["max"],
        "act_composite_25th": act_composite["min"],
        "act_composite_75th": act_composite["max"],
        "acceptance_rate_pct": percentage_to_decimal(row.acceptance_rate),
        "total_yearly_cost": currency_to_integer(row.total_yearly_cost),
        "majors_offered_url": nullify_empty_string(row.majors_offered),
        "undergraduate_enrollment": currency_to_integer(row.undergrads),
        "us_news_ranking_national_2018": currency_to_integer(row.us_news_national),
        "us_news_ranking_liberal_arts_2018": currency_to_integer(row.us_news_liberal_arts),
        "ipeds_nces_id": nullify_empty_string(row.ipeds_id),
    }


def upsert_university(row: CoachRow, db: Session) -> University:
    """Find a university by (name, state) and fill in non-null fields, or create it."""
    name = row.school.strip()
    state = (row.state or "").strip() or None

    query = db.query(University).filter(University.name == name)
    if state:
        query = query.filter(University.state == state)
    else:
        query = query.filter(University.state.is_(None))
    existing = query.first()

    fields = _university_fields(row)

    if existing:
        _apply_updates(existing, fields)
        _flush(db, "Failed to update university")
        return existing

    university = University(name=name, state=state, **fields)
    db.add(university)
    _flush(db, "Failed to create university")
    logger.debug(f"🏫 Created university {name} ({state})")
    return university


def link_division(
    university: University, division_name: Optional[str], db: Session, warnings: list[str]
) -> None:
    """Attach an existing division; divisions are never created here."""
    division = None
    if division_name:
        division = db.query(Division).filter(Division.name == division_name).first()

    if division is None:
        message = f'Division "{division_name}" not found, skipping link'
        logger.warning(f"⚠️ {message}")
        warnings.append(message)
        return

    existing = (
        db.query(UniversityDivision)
        .filter(
            UniversityDivision.university_id == university.id,
            UniversityDivision.division_id == division.id,
            UniversityDivision.end_date.is_(None),
        )
        .first()
    )
    if existing is None:
        db.add(
            UniversityDivision(
                university_id=university.id, division_id=division.id, start_date=_now()
            )
        )
        _flush(db, "Failed to link division")


def link_conference(
    university: University, conference_name: str, db: Session, warnings: list[str]
) -> None:
    """
    Attach an existing conference.

    Conferences need a governing body the sheet does not carry, so a
    missing one is skipped with a warning.
    """
    clean_name = conference_name.strip()
    conference = db.query(Conference).filter(Conference.name == clean_name).first()

    if conference is None:
        message = f'Conference "{clean_name}" not found, skipping link'
        logger.warning(f"⚠️ {message}")
        warnings.append(message)
        return

    existing = (
        db.query(UniversityConference)
        .filter(
            UniversityConference.university_id == university.id,
            UniversityConference.conference_id == conference.id,
            UniversityConference.end_date.is_(None),
        )
        .first()
    )
    if existing is None:
        db.add(
            UniversityConference(
                university_id=university.id, conference_id=conference.id, start_date=_now()
            )
        )
        _flush(db, "Failed to link conference")


def upsert_program(university: University, row: CoachRow, db: Session) -> Program:
    gender = infer_gender(nullify_empty_string(row.sport_code))
    fields = {
        "team_url": nullify_empty_string(row.landing_pages),
        "team_instagram": nullify_empty_string(row.team_instagram),
        "team_twitter": nullify_empty_string(row.team_twitter),
    }

    existing = (
        db.query(Program)
        .filter(Program.university_id == university.id, Program.gender == gender)
        .first()
    )
    if existing:
        _apply_updates(existing, fields)
        _flush(db, "Failed to update program")
        return existing

    program = Program(university_id=university.id, gender=gender, **fields)
    db.add(program)
    _flush(db, "Failed to create program")
    return program


def upsert_coach(
    row: CoachRow, email: str, university: University, program: Program, db: Session
) -> Coach:
    """
    Resolve the coach behind a row.

    Tried in order: coach email, an existing job's work email, then the
    same full name holding an open job at this university and program.
    A new coach is created only when all three miss.
    """
    full_name = row.coach_name or None
    profile = {
        "phone": nullify_empty_string(row.phone),
        "primary_specialty": primary_specialty_from_text(row.responsibilities),
        "twitter_profile": nullify_empty_string(row.individual_twitter),
        "instagram_profile": nullify_empty_string(row.individual_instagram),
    }

    coach = db.query(Coach).filter(Coach.email == email).first()
    if coach:
        _apply_updates(coach, {"full_name": full_name, **profile})
        _flush(db, "Failed to update coach")
        return coach

    job = db.query(UniversityJob).filter(UniversityJob.work_email == email).first()
    if job:
        coach = db.get(Coach, job.coach_id)
        if coach:
            _apply_updates(coach, {"full_name": full_name, "email": email, **profile})
            _flush(db, "Failed to update coach")
            return coach

    if full_name:
        coach = (
            db.query(Coach)
            .join(UniversityJob, UniversityJob.coach_id == Coach.id)
            .filter(
                UniversityJob.university_id == university.id,
                UniversityJob.program_id == program.id,
                UniversityJob.end_date.is_(None),
                Coach.full_name == full_name,
            )
            .first()
        )
        if coach:
            _apply_updates(coach, {"email": email, **profile})
            _flush(db, "Failed to update coach")
            return coach

    coach = Coach(full_name=full_name, email=email, **profile)
    db.add(coach)
    _flush(db, "Failed to create coach")
    return coach


def close_jobs_elsewhere(coach: Coach, university: University, db: Session) -> None:
    """Close every open job the coach holds at another university."""
    open_jobs = (
        db.query(UniversityJob)
        .filter(
            UniversityJob.coach_id == coach.id,
            UniversityJob.university_id != university.id,
            UniversityJob.end_date.is_(None),
        )
        .all()
    )
    if not open_jobs:
        return

    closed_at = _now()
    for job in open_jobs:
        job.end_date = closed_at
        logger.info(
            f"🔚 Closed previous job for coach {coach.id} at university {job.university_id}"
        )
    _flush(db, "Failed to close previous job")


def upsert_university_job(
    coach: Coach,
    university: University,
    program: Program,
    row: CoachRow,
    email: str,
    db: Session,
) -> UniversityJob:
    fields = {
        "program_id": program.id,
        "job_title": nullify_empty_string(row.position) or DEFAULT_JOB_TITLE,
        "work_email": email,
        "work_phone": nullify_empty_string(row.phone),
        "program_scope": infer_program_scope(
            nullify_empty_string(row.sport_code), row.position
        ),
    }

    existing = (
        db.query(UniversityJob)
        .filter(
            UniversityJob.coach_id == coach.id,
            UniversityJob.university_id == university.id,
            UniversityJob.end_date.is_(None),
        )
        .first()
    )
    if existing:
        _apply_updates(existing, fields)
        _flush(db, "Failed to update university job")
        return existing

    job = UniversityJob(
        coach_id=coach.id,
        university_id=university.id,
        start_date=parse_date(row.hire_date) or _now(),
        **fields,
    )
    db.add(job)
    _flush(db, "Failed to create university job")
    return job


def replace_responsibilities(job: UniversityJob, text: str, db: Session) -> None:
    """
    Replace the job's responsibilities with those derived from ``text``.

    Each event group gets one row, linked to the first mentioned event
    that belongs to the group when such an event exists.
    """
    db.query(CoachResponsibility).filter(
        CoachResponsibility.university_job_id == job.id
    ).delete()

    event_groups = event_groups_from_text(text) or [DEFAULT_EVENT_GROUP]
    event_names = specific_event_names_from_text(text)

    event_ids: dict[str, uuid.UUID] = {}
    if event_names:
        for event in db.query(Event).filter(Event.name.in_(event_names)).all():
            event_ids[event.name] = event.id

    for event_group in event_groups:
        event_id = next(
            (
                event_ids[name]
                for name in event_names
                if name in event_ids and event_name_matches_group(name, event_group)
            ),
            None,
        )
        db.add(
            CoachResponsibility(
                university_job_id=job.id, event_group=event_group, event_id=event_id
            )
        )

    _flush(db, "Failed to create coach responsibilities")
