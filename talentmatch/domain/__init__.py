"""Domain layer - enums, lookup tables and exceptions."""

from talentmatch.domain.constants import (
    AvailabilityStatus,
    PlacementStatus,
    RateType,
    TicketPriority,
    TicketStatus,
    WorkArrangement,
)
from talentmatch.domain.errors import (
    ConflictError,
    DuplicateProfilerError,
    InvalidMatchOptionsError,
    MalformedRecordError,
    NotFoundError,
    PlacementConflictError,
    TalentMatchError,
    ValidationFailedError,
)

__all__ = [
    "AvailabilityStatus",
    "PlacementStatus",
    "RateType",
    "TicketPriority",
    "TicketStatus",
    "WorkArrangement",
    "ConflictError",
    "DuplicateProfilerError",
    "InvalidMatchOptionsError",
    "MalformedRecordError",
    "NotFoundError",
    "PlacementConflictError",
    "TalentMatchError",
    "ValidationFailedError",
]
