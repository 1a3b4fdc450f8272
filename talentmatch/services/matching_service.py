"""
Matching Service - runs the Matcher for a ticket.

Loads the ticket, the full profiler pool and the ticket's active placements,
scores everything with the deterministic Matcher and shapes the JSON
response consumed by the delivery-manager candidates view.
"""
import logging
from typing import Any, Dict, Optional

from talentmatch.config import settings
from talentmatch.domain.errors import NotFoundError
from talentmatch.infra.mongodb.repositories.placement_repo import PlacementRepository, get_placement_repo
from talentmatch.infra.mongodb.repositories.profiler_repo import ProfilerRepository, get_profiler_repo
from talentmatch.infra.mongodb.repositories.ticket_repo import TicketRepository, get_ticket_repo
from talentmatch.services.match_analysis_service import MatchAnalysisService, get_match_analysis_service
from talentmatch.utils.match_scorer import Matcher, MatchOptions, ScoringWeights
from talentmatch.utils.profile_normalizer import Ticket

logger = logging.getLogger(__name__)


class MatchingService:
    """
    Usage:
        service = MatchingService()
        response = service.match_ticket("tkt_123", MatchOptions(limit=10))
    """

    def __init__(
        self,
        ticket_repo: TicketRepository = None,
        profiler_repo: ProfilerRepository = None,
        placement_repo: PlacementRepository = None,
        matcher: Matcher = None,
        analysis_service: MatchAnalysisService = None
    ):
        self.ticket_repo = ticket_repo or get_ticket_repo()
        self.profiler_repo = profiler_repo or get_profiler_repo()
        self.placement_repo = placement_repo or get_placement_repo()
        self.matcher = matcher or Matcher(ScoringWeights.from_settings(settings))
        self._analysis_service = analysis_service

    @property
    def analysis_service(self) -> MatchAnalysisService:
        if self._analysis_service is None:
            self._analysis_service = get_match_analysis_service()
        return self._analysis_service

    def match_ticket(
        self,
        ticket_ref: str,
        options: MatchOptions,
        include_analysis: bool = False
    ) -> Dict[str, Any]:
        """
        Score all profilers against a ticket.

        Raises:
            InvalidMatchOptionsError: options out of range (checked before any lookup)
            NotFoundError: no ticket with that id or ticket number
        """
        options.validate()

        record = self.ticket_repo.get(ticket_ref)
        if not record:
            raise NotFoundError("Ticket", ticket_ref)
        ticket = Ticket.from_record(record)

        profilers = self.profiler_repo.list_all()
        placement_index = self.placement_repo.active_index_for_ticket(ticket.id)
        logger.info(
            f"Matching {len(profilers)} profilers against ticket {ticket.ticket_number or ticket.id} "
            f"(availability_only={options.availability_only}, min_match_score={options.min_match_score}, "
            f"limit={options.limit})"
        )

        outcome = self.matcher.match(ticket, profilers, options, placement_index)

        matched = [result.to_dict() for result in outcome.results]
        if include_analysis:
            analyses = self.analysis_service.analyze(ticket, outcome.results)
            for item in matched:
                item["ai_analysis"] = analyses.get(item["id"])

        return {
            "ticket": ticket.to_summary(),
            "matched_profilers": matched,
            "total_matches": outcome.total_matches,
            "skipped": [s.to_dict() for s in outcome.skipped],
            "filters_applied": {
                "min_match_score": options.min_match_score,
                "availability_only": options.availability_only,
                "limit": options.limit,
            },
        }


_matching_service: Optional[MatchingService] = None

def get_matching_service() -> MatchingService:
    global _matching_service
    if _matching_service is None:
        _matching_service = MatchingService()
    return _matching_service
