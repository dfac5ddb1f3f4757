"""Program, coach, job and responsibility models."""
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Program(Base):
    """A track program at a university, one per gender."""

    __tablename__ = "programs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    university_id = Column(Uuid, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    gender = Column(String(20), nullable=False)  # men, women
    team_url = Column(String(2048), nullable=True)
    team_instagram = Column(String(2048), nullable=True)
    team_twitter = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("university_id", "gender", name="programs_university_gender_key"),
    )


class Coach(Base):
    """A coach. Email is the primary identity when present."""

    __tablename__ = "coaches"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(500), nullable=True)
    email = Column(String(320), nullable=True)
    phone = Column(String(100), nullable=True)
    primary_specialty = Column(String(20), nullable=True)
    twitter_profile = Column(String(2048), nullable=True)
    instagram_profile = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    jobs = relationship("UniversityJob", back_populates="coach")

    __table_args__ = (UniqueConstraint("email", name="coaches_email_key"),)

    def __repr__(self):
        return f"<Coach(id={self.id}, full_name='{self.full_name}')>"


class UniversityJob(Base):
    """Employment of a coach at a university; open while end_date is null."""

    __tablename__ = "university_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    coach_id = Column(Uuid, ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False)
    university_id = Column(Uuid, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    program_id = Column(Uuid, ForeignKey("programs.id"), nullable=True)
    job_title = Column(String(500), nullable=True)
    work_email = Column(String(320), nullable=True)
    work_phone = Column(String(100), nullable=True)
    program_scope = Column(String(20), nullable=True)  # men, women, both, n/a
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    coach = relationship("Coach", back_populates="jobs")
    responsibilities = relationship(
        "CoachResponsibility", back_populates="job", passive_deletes=True
    )

    __table_args__ = (
        Index(
            "university_jobs_open_key",
            "coach_id",
            "university_id",
            unique=True,
            postgresql_where=end_date.is_(None),
            sqlite_where=end_date.is_(None),
        ),
        Index("idx_university_jobs_work_email", "work_email"),
    )


class Event(Base):
    """Reference track event, e.g. "Shot Put" in the throws group."""

    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    event_group = Column(String(20), nullable=True)


class CoachResponsibility(Base):
    """Event group a coach is responsible for within one job."""

    __tablename__ = "coach_responsibilities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    university_job_id = Column(
        Uuid, ForeignKey("university_jobs.id", ondelete="CASCADE"), nullable=False
    )
    event_group = Column(String(20), nullable=False)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=True)

    job = relationship("UniversityJob", back_populates="responsibilities")
