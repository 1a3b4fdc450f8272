"""
Application Services - Business Logic Layer

Services contain business logic extracted from route handlers,
coordinating repositories, the Matcher and external services.
"""

from talentmatch.services.ticket_service import TicketService, get_ticket_service
from talentmatch.services.profiler_service import ProfilerService, get_profiler_service
from talentmatch.services.placement_service import PlacementService, get_placement_service
from talentmatch.services.matching_service import MatchingService, get_matching_service
from talentmatch.services.match_analysis_service import (
    MatchAnalysisService,
    get_match_analysis_service,
)

__all__ = [
    "TicketService",
    "get_ticket_service",
    "ProfilerService",
    "get_profiler_service",
    "PlacementService",
    "get_placement_service",
    "MatchingService",
    "get_matching_service",
    "MatchAnalysisService",
    "get_match_analysis_service",
]
