"""Typed representation of one coach spreadsheet row."""
from typing import Any, Optional

from pydantic import BaseModel, Field


class CoachRow(BaseModel):
    """
    One coaching staff record as parsed from the workbook.

    Known columns are typed fields aliased to their spreadsheet header; any
    other column survives in ``model_extra``. Values are raw strings, typing
    happens in the normalizers.
    """

    # Pipeline-added provenance
    division_tag: Optional[str] = Field(None, alias="_division")
    sheet_name: Optional[str] = Field(None, alias="_sheetName")

    # Coach identification
    unique_id: Optional[str] = Field(None, alias="Unique ID")
    first_name: Optional[str] = Field(None, alias="First name")
    last_name: Optional[str] = Field(None, alias="Last name")
    email: Optional[str] = Field(None, alias="Email address")
    phone: Optional[str] = Field(None, alias="Phone number")
    position: Optional[str] = Field(None, alias="Position")

    # University information
    school: Optional[str] = Field(None, alias="School")
    state: Optional[str] = Field(None, alias="State")
    city: Optional[str] = Field(None, alias="City")
    division: Optional[str] = Field(None, alias="Division")
    conference: Optional[str] = Field(None, alias="Conference")
    region: Optional[str] = Field(None, alias="Region")
    size_of_city: Optional[str] = Field(None, alias="Size of city")
    public_private: Optional[str] = Field(None, alias="Private/Public")
    religious_affiliation: Optional[str] = Field(None, alias="Religious affiliation?")
    institution_flags: Optional[str] = Field(
        None, alias="HBCU? Community College? Women only?"
    )

    # Academic metrics
    average_gpa: Optional[str] = Field(None, alias="Average GPA")
    sat_reading: Optional[str] = Field(None, alias="SAT-Reading (25th-75th percentile)")
    sat_math: Optional[str] = Field(None, alias="SAT-Math (25th-75th percentile)")
    act_composite: Optional[str] = Field(None, alias="ACT composite (25th-75th percentile)")
    acceptance_rate: Optional[str] = Field(None, alias="Acceptance rate")
    total_yearly_cost: Optional[str] = Field(
        None, alias="Total yearly cost (in-state/out-of-state)"
    )
    majors_offered: Optional[str] = Field(None, alias="Majors offered")
    undergrads: Optional[str] = Field(None, alias="No. of undergrads")
    us_news_national: Optional[str] = Field(None, alias="U.S. News ranking (National, 2018)")
    us_news_liberal_arts: Optional[str] = Field(
        None, alias="U.S. News ranking (national liberal arts, 2018)"
    )
    ipeds_id: Optional[str] = Field(None, alias="IPEDS/NCES ID")

    # Team/program information
    landing_pages: Optional[str] = Field(None, alias="Landing pages")
    team_twitter: Optional[str] = Field(None, alias="Team's Twitter")
    team_instagram: Optional[str] = Field(None, alias="Team's Instagram")
    questionnaire: Optional[str] = Field(None, alias="Questionnaire")
    sport_code: Optional[str] = Field(None, alias="Sport code")

    # Coach social media
    individual_twitter: Optional[str] = Field(None, alias="Individual's Twitter")
    individual_instagram: Optional[str] = Field(None, alias="Individual's Instagram")

    # Import tracking
    change_flag: Optional[str] = Field(
        None, alias="Added? x=new person | j=job change | e=email change | #=# change"
    )
    removed: Optional[str] = Field(None, alias="Removed? (y)")
    hire_date: Optional[str] = Field(None, alias="Hire date")
    responsibilities: Optional[str] = Field(None, alias="Responsibilities")

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def extra_columns(self) -> dict[str, Any]:
        """Columns present in the sheet that have no dedicated field."""
        return dict(self.model_extra or {})

    @property
    def coach_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe mapping keyed by spreadsheet header, for task payloads."""
        return self.model_dump(by_alias=True)
