"""
MongoDB Repositories - Domain-specific data access.

Repository Pattern Implementation:
- TicketRepository - Staffing requests
- ProfilerRepository - Candidate profiles
- PlacementRepository, PlacementHistoryRepository - Placement lifecycle
"""

from talentmatch.infra.mongodb.repositories.ticket_repo import (
    TicketRepository,
    generate_ticket_number,
    get_ticket_repo,
)

from talentmatch.infra.mongodb.repositories.profiler_repo import (
    ProfilerRepository,
    get_profiler_repo,
)

from talentmatch.infra.mongodb.repositories.placement_repo import (
    PlacementRepository,
    PlacementHistoryRepository,
    get_placement_repo,
    get_placement_history_repo,
)


def ensure_indexes():
    """Create indexes that back uniqueness rules. Safe to call on every startup."""
    get_profiler_repo().ensure_indexes()
    get_placement_repo().ensure_indexes()
    get_placement_history_repo().ensure_indexes()


__all__ = [
    "TicketRepository",
    "generate_ticket_number",
    "get_ticket_repo",
    "ProfilerRepository",
    "get_profiler_repo",
    "PlacementRepository",
    "PlacementHistoryRepository",
    "get_placement_repo",
    "get_placement_history_repo",
    "ensure_indexes",
]
