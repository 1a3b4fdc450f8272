"""
Pydantic schemas for the staffing API

Defines request models for:
- Ticket creation and updates
- Profiler creation and updates
- Placement creation and updates
"""
from pydantic import BaseModel, Field, validator
from typing import List, Dict, Any, Optional, Union

from talentmatch.domain.constants import (
    DEFAULT_CURRENCY,
    PlacementStatus,
    RateType,
    TicketPriority,
    TicketStatus,
    WorkArrangement,
)


# ===================== HELPERS =====================

def _clean_string_list(v):
    """Accept a list or a comma-separated string; drop blanks."""
    if v is None:
        return []
    if isinstance(v, str):
        v = v.split(",")
    return [s.strip() for s in v if isinstance(s, str) and s.strip()]


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ===================== TICKETS =====================

class TicketCreateRequest(BaseModel):
    """Hiring request raised by an Account Manager"""

    ticket_number: Optional[str] = Field(None, description="Auto-generated when omitted")
    created_by: Optional[str] = None
    status: TicketStatus = TicketStatus.NEW
    priority: Optional[TicketPriority] = None

    # Client information
    client_name: Optional[str] = None
    client_company: str = Field(..., min_length=1, max_length=255)
    client_email: Optional[str] = None
    client_phone: Optional[str] = None

    # Position details
    position_title: str = Field(..., min_length=1, max_length=255)
    department: Optional[str] = None
    seniority: Optional[str] = None
    contract_type: Optional[str] = None
    duration: Optional[str] = None
    start_date: Optional[str] = None
    work_location: Optional[str] = None
    work_arrangement: Optional[WorkArrangement] = None

    # Requirements
    required_skills: List[str] = Field(default_factory=list)
    preferred_skills: List[str] = Field(default_factory=list)
    min_years_experience: Optional[float] = Field(None, ge=0)
    education: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)

    # Project details
    project_description: Optional[str] = None
    responsibilities: Optional[str] = None

    # Budget & terms
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(DEFAULT_CURRENCY, min_length=3, max_length=3)
    rate_type: RateType = RateType.HOURLY

    # Additional information
    urgency: Optional[str] = None
    special_requirements: Optional[str] = None
    notes: Optional[str] = None

    @validator("required_skills", "preferred_skills", "certifications", pre=True)
    def clean_lists(cls, v):
        return _clean_string_list(v)

    @validator("client_company", "position_title")
    def strip_whitespace(cls, v):
        return v.strip()

    @validator("currency")
    def upper_currency(cls, v):
        return v.upper()

    @validator("budget_max")
    def budget_range(cls, v, values):
        budget_min = values.get("budget_min")
        if v is not None and budget_min is not None and v < budget_min:
            raise ValueError("budget_max must be greater than or equal to budget_min")
        return v

    class Config:
        use_enum_values = True
        validate_default = True
        json_schema_extra = {
            "example": {
                "client_company": "Acme Bank",
                "position_title": "Senior Backend Engineer",
                "seniority": "senior",
                "required_skills": ["Python", "FastAPI", "PostgreSQL"],
                "preferred_skills": ["Kubernetes"],
                "work_location": "Amsterdam, Netherlands",
                "work_arrangement": "hybrid",
                "budget_min": 60,
                "budget_max": 90,
                "rate_type": "hourly",
            }
        }


class TicketUpdateRequest(BaseModel):
    """Partial ticket update; omitted fields are left unchanged"""
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    client_name: Optional[str] = None
    client_company: Optional[str] = None
    position_title: Optional[str] = None
    seniority: Optional[str] = None
    contract_type: Optional[str] = None
    start_date: Optional[str] = None
    work_location: Optional[str] = None
    work_arrangement: Optional[WorkArrangement] = None
    required_skills: Optional[List[str]] = None
    preferred_skills: Optional[List[str]] = None
    min_years_experience: Optional[float] = Field(None, ge=0)
    project_description: Optional[str] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    rate_type: Optional[RateType] = None
    notes: Optional[str] = None

    @validator("required_skills", "preferred_skills", pre=True)
    def clean_lists(cls, v):
        return None if v is None else _clean_string_list(v)

    class Config:
        use_enum_values = True


# ===================== PROFILERS =====================

class SkillEntry(BaseModel):
    """Structured skill with an optional proficiency level"""
    name: str = Field(..., min_length=1)
    level: Optional[str] = None


class ProfilerCreateRequest(BaseModel):
    """Candidate profile"""
    email: str = Field(..., max_length=254)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    location: Optional[str] = None
    availability_status: str = "available"
    preferred_work_arrangement: List[str] = Field(default_factory=list)
    skills: List[Union[str, SkillEntry]] = Field(default_factory=list)
    experience_level: Optional[str] = None
    years_of_experience: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    daily_rate: Optional[float] = Field(None, ge=0)
    currency: str = Field(DEFAULT_CURRENCY, min_length=3, max_length=3)
    bio: Optional[str] = Field(None, max_length=5000)
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    preferred_industries: List[str] = Field(default_factory=list)
    contract_types: List[str] = Field(default_factory=list)
    notice_period_days: int = Field(0, ge=0)

    @validator(
        "preferred_work_arrangement", "certifications", "languages",
        "preferred_industries", "contract_types", pre=True
    )
    def clean_lists(cls, v):
        return _clean_string_list(v)

    @validator("first_name", "last_name", "email")
    def strip_whitespace(cls, v):
        return v.strip()

    @validator("phone", "location", "experience_level", "bio", pre=True)
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @validator("currency")
    def upper_currency(cls, v):
        return v.upper()

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump()
        doc["skills"] = [
            s if isinstance(s, str) else {k: v for k, v in s.items() if v is not None}
            for s in doc["skills"]
        ]
        return doc


class ProfilerUpdateRequest(BaseModel):
    """Partial profiler update"""
    email: Optional[str] = Field(None, max_length=254)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    location: Optional[str] = None
    availability_status: Optional[str] = None
    preferred_work_arrangement: Optional[List[str]] = None
    skills: Optional[List[Union[str, SkillEntry]]] = None
    experience_level: Optional[str] = None
    years_of_experience: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    daily_rate: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    bio: Optional[str] = Field(None, max_length=5000)
    contract_types: Optional[List[str]] = None
    notice_period_days: Optional[int] = Field(None, ge=0)

    def to_updates(self) -> Dict[str, Any]:
        """Only the fields the caller set"""
        updates = self.model_dump(exclude_none=True)
        if "skills" in updates:
            updates["skills"] = [
                s if isinstance(s, str) else {k: v for k, v in s.items() if v is not None}
                for s in updates["skills"]
            ]
        return updates


# ===================== PLACEMENTS =====================

class PlacementCreateRequest(BaseModel):
    """Propose a profiler for a ticket"""
    ticket_id: str = Field(..., min_length=1, description="Ticket id or ticket number")
    profiler_id: str = Field(..., min_length=1)
    assigned_by: Optional[str] = None
    status: PlacementStatus = PlacementStatus.PROPOSED
    match_score: Optional[float] = Field(None, ge=0, le=1, description="Computed when omitted")
    notes: Optional[str] = None
    interview_scheduled_at: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    placement_fee: Optional[float] = Field(None, ge=0)

    class Config:
        use_enum_values = True
        validate_default = True


class PlacementUpdateRequest(BaseModel):
    """Partial placement update; status changes are written to history"""
    status: Optional[PlacementStatus] = None
    status_change_reason: Optional[str] = None
    assigned_by: Optional[str] = None
    notes: Optional[str] = None
    interview_scheduled_at: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    placement_fee: Optional[float] = Field(None, ge=0)

    class Config:
        use_enum_values = True
