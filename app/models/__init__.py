"""Database models."""
from app.models.coach import Coach, CoachResponsibility, Event, Program, UniversityJob
from app.models.import_job import CoachImportJob, ImportStatus, InvalidStatusTransition
from app.models.university import (
    Conference,
    Division,
    GoverningBody,
    University,
    UniversityConference,
    UniversityDivision,
)

__all__ = [
    "Coach",
    "CoachImportJob",
    "CoachResponsibility",
    "Conference",
    "Division",
    "Event",
    "GoverningBody",
    "ImportStatus",
    "InvalidStatusTransition",
    "Program",
    "University",
    "UniversityConference",
    "UniversityDivision",
    "UniversityJob",
]
