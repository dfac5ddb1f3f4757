"""University, division and conference models."""
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func

from app.database import Base


class University(Base):
    """A school, keyed by name and (nullable) state."""

    __tablename__ = "universities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(500), nullable=False)
    state = Column(String(100), nullable=True)
    city = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    size_of_city = Column(String(255), nullable=True)
    type_public_private = Column(String(100), nullable=True)
    religious_affiliation = Column(String(255), nullable=True)
    institution_flags_raw = Column(String(255), nullable=True)
    average_gpa = Column(Float, nullable=True)
    sat_ebrw_25th = Column(Integer, nullable=True)
    sat_ebrw_75th = Column(Integer, nullable=True)
    sat_math_25th = Column(Integer, nullable=True)
    sat_math_75th = Column(Integer, nullable=True)
    act_composite_25th = Column(Integer, nullable=True)
    act_composite_75th = Column(Integer, nullable=True)
    acceptance_rate_pct = Column(Float, nullable=True)
    total_yearly_cost = Column(Integer, nullable=True)
    majors_offered_url = Column(Text, nullable=True)
    undergraduate_enrollment = Column(Integer, nullable=True)
    us_news_ranking_national_2018 = Column(Integer, nullable=True)
    us_news_ranking_liberal_arts_2018 = Column(Integer, nullable=True)
    ipeds_nces_id = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("name", "state", name="universities_name_state_key"),
        # NULL states are distinct under the constraint above
        Index(
            "universities_name_stateless_key",
            "name",
            unique=True,
            postgresql_where=state.is_(None),
            sqlite_where=state.is_(None),
        ),
    )

    def __repr__(self):
        return f"<University(id={self.id}, name='{self.name}', state='{self.state}')>"


class GoverningBody(Base):
    """NCAA, NAIA, NJCAA and friends."""

    __tablename__ = "governing_bodies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)


class Division(Base):
    """Reference division (DI, DII, DIII, JuCo, NAIA)."""

    __tablename__ = "divisions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)


class Conference(Base):
    """Reference conference. Never created by the importer."""

    __tablename__ = "conferences"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    governing_body_id = Column(Uuid, ForeignKey("governing_bodies.id"), nullable=False)


class UniversityDivision(Base):
    """Time-ranged university/division membership; open while end_date is null."""

    __tablename__ = "university_divisions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    university_id = Column(Uuid, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    division_id = Column(Uuid, ForeignKey("divisions.id"), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "university_divisions_open_key",
            "university_id",
            "division_id",
            unique=True,
            postgresql_where=end_date.is_(None),
            sqlite_where=end_date.is_(None),
        ),
    )


class UniversityConference(Base):
    """Time-ranged university/conference membership; open while end_date is null."""

    __tablename__ = "university_conferences"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    university_id = Column(Uuid, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    conference_id = Column(Uuid, ForeignKey("conferences.id"), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "university_conferences_open_key",
            "university_id",
            "conference_id",
            unique=True,
            postgresql_where=end_date.is_(None),
            sqlite_where=end_date.is_(None),
        ),
    )
