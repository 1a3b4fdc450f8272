"""
Centralized Constants for the TalentMatch staffing backend

SINGLE SOURCE OF TRUTH for enums, keyword lists and lookup tables.
All modules should import from here.
"""

from typing import Dict, FrozenSet, List
from enum import Enum


# =============================================================================
# SHARED ENUMS
# =============================================================================

class AvailabilityStatus(str, Enum):
    """Canonical profiler availability."""
    AVAILABLE = "available"
    BUSY = "busy"
    UNAVAILABLE = "unavailable"


class TicketStatus(str, Enum):
    """Lifecycle of a staffing ticket."""
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TicketPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RateType(str, Enum):
    """How a ticket's budget range is expressed."""
    HOURLY = "hourly"
    DAILY = "daily"


class WorkArrangement(str, Enum):
    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"


class PlacementStatus(str, Enum):
    """Placement pipeline: proposed -> interviewing -> accepted -> placed -> completed."""
    PROPOSED = "proposed"
    INTERVIEWING = "interviewing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PLACED = "placed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    WITHDRAWN = "withdrawn"

    @property
    def is_active(self) -> bool:
        """Inactive placements free the (ticket, profiler) pair for a new proposal."""
        return self not in (PlacementStatus.WITHDRAWN, PlacementStatus.CANCELLED)


# =============================================================================
# AVAILABILITY NORMALIZATION
# =============================================================================
# Free-form availability strings seen in profiler records, keyed after
# lowercasing and replacing spaces/hyphens with underscores.

AVAILABILITY_ALIASES: Dict[str, AvailabilityStatus] = {
    "available": AvailabilityStatus.AVAILABLE,
    "open": AvailabilityStatus.AVAILABLE,
    "immediate": AvailabilityStatus.AVAILABLE,
    "immediately": AvailabilityStatus.AVAILABLE,
    "immediately_available": AvailabilityStatus.AVAILABLE,
    "free": AvailabilityStatus.AVAILABLE,
    "busy": AvailabilityStatus.BUSY,
    "partial": AvailabilityStatus.BUSY,
    "partially_available": AvailabilityStatus.BUSY,
    "limited": AvailabilityStatus.BUSY,
    "available_soon": AvailabilityStatus.BUSY,
    "soon": AvailabilityStatus.BUSY,
    "unavailable": AvailabilityStatus.UNAVAILABLE,
    "not_available": AvailabilityStatus.UNAVAILABLE,
    "booked": AvailabilityStatus.UNAVAILABLE,
    "on_assignment": AvailabilityStatus.UNAVAILABLE,
    "placed": AvailabilityStatus.UNAVAILABLE,
}


# =============================================================================
# EXPERIENCE / SENIORITY
# =============================================================================
# Minimum years implied by a seniority or experience-level label.

SENIORITY_MIN_YEARS: Dict[str, float] = {
    "intern": 0,
    "entry": 0,
    "junior": 0,
    "mid": 3,
    "mid_level": 3,
    "intermediate": 3,
    "medior": 3,
    "senior": 5,
    "expert": 5,
    "lead": 8,
    "staff": 8,
    "principal": 10,
    "architect": 10,
}


# =============================================================================
# LOCATION KEYWORDS
# =============================================================================
# Either side carrying one of these means location is not a constraint.

REMOTE_LOCATION_KEYWORDS: FrozenSet[str] = frozenset({
    "remote",
    "anywhere",
    "any",
    "worldwide",
    "global",
    "fully remote",
    "remote only",
})


# =============================================================================
# PROFILE FIELDS
# =============================================================================
# Profiler fields echoed back in match results.

PROFILER_PUBLIC_FIELDS: List[str] = [
    "id",
    "email",
    "first_name",
    "last_name",
    "phone",
    "location",
    "availability_status",
    "preferred_work_arrangement",
    "skills",
    "experience_level",
    "years_of_experience",
    "hourly_rate",
    "daily_rate",
    "currency",
    "bio",
    "linkedin_url",
    "portfolio_url",
    "contract_types",
    "notice_period_days",
]

DEFAULT_CURRENCY = "USD"
HOURS_PER_DAY = 8
