"""
Domain exceptions.

Services raise these; routes translate them to HTTP status codes.
"""


class TalentMatchError(Exception):
    """Base class for all domain errors."""


class NotFoundError(TalentMatchError):
    """A referenced ticket, profiler or placement does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class ConflictError(TalentMatchError):
    """Write would violate a uniqueness rule."""


class PlacementConflictError(ConflictError):
    def __init__(self, ticket_id: str, profiler_id: str):
        self.ticket_id = ticket_id
        self.profiler_id = profiler_id
        super().__init__(
            "Placement already exists for this ticket-profiler combination "
            f"(ticket={ticket_id}, profiler={profiler_id})"
        )


class DuplicateProfilerError(ConflictError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Profiler with this email already exists: {email}")


class ValidationFailedError(TalentMatchError, ValueError):
    """Caller supplied an out-of-range or inconsistent value."""


class InvalidMatchOptionsError(ValidationFailedError):
    """MatchOptions rejected before any scoring happens."""


class MalformedRecordError(TalentMatchError, ValueError):
    """A stored record lacks a field needed for scoring."""

    def __init__(self, record_id, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(reason)
