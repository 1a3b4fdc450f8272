"""
Placement Service - proposing profilers for tickets.

Invariant: at most one active placement per (ticket, profiler) pair.
Withdrawn and cancelled placements are inactive and free the pair.

The check-then-insert here gives callers a clean 409; the partial unique
index in PlacementRepository catches concurrent inserts that both pass the
check.
"""
import logging
from typing import Any, Dict, List, Optional
from pymongo.errors import DuplicateKeyError

from talentmatch.config import settings
from talentmatch.domain.constants import PlacementStatus
from talentmatch.domain.errors import (
    MalformedRecordError,
    NotFoundError,
    PlacementConflictError,
    ValidationFailedError,
)
from talentmatch.infra.mongodb.repositories.placement_repo import (
    PlacementHistoryRepository,
    PlacementRepository,
    get_placement_history_repo,
    get_placement_repo,
)
from talentmatch.infra.mongodb.repositories.profiler_repo import ProfilerRepository, get_profiler_repo
from talentmatch.infra.mongodb.repositories.ticket_repo import TicketRepository, get_ticket_repo
from talentmatch.services.ticket_service import pagination
from talentmatch.utils.match_scorer import Matcher, ScoringWeights
from talentmatch.utils.profile_normalizer import CandidateProfile, Ticket

logger = logging.getLogger(__name__)

PROFILER_SUMMARY_FIELDS = (
    "id", "first_name", "last_name", "email", "phone",
    "availability_status", "skills", "experience_level", "location",
)
TICKET_SUMMARY_FIELDS = (
    "id", "ticket_number", "position_title", "client_company", "status",
    "required_skills", "preferred_skills", "priority", "start_date",
    "budget_min", "budget_max",
)


def _parse_status(value: Any) -> PlacementStatus:
    try:
        return PlacementStatus(value)
    except ValueError:
        raise ValidationFailedError(f"Invalid placement status: {value}")


def _summary(document: Optional[Dict[str, Any]], fields) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return {f: document.get(f) for f in fields}


class PlacementService:
    """
    Placement lifecycle.

    Usage:
        service = PlacementService()
        placement = service.create({"ticket_id": ..., "profiler_id": ...})
    """

    def __init__(
        self,
        placement_repo: PlacementRepository = None,
        history_repo: PlacementHistoryRepository = None,
        ticket_repo: TicketRepository = None,
        profiler_repo: ProfilerRepository = None,
        matcher: Matcher = None
    ):
        self.placement_repo = placement_repo or get_placement_repo()
        self.history_repo = history_repo or get_placement_history_repo()
        self.ticket_repo = ticket_repo or get_ticket_repo()
        self.profiler_repo = profiler_repo or get_profiler_repo()
        self.matcher = matcher or Matcher(ScoringWeights.from_settings(settings))

    # ===================== CREATE =====================

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a placement.

        Raises:
            ValidationFailedError: unknown ticket or profiler, or inactive initial status
            PlacementConflictError: pair already has an active placement
        """
        ticket_ref = data.get("ticket_id")
        profiler_id = data.get("profiler_id")
        if not ticket_ref or not profiler_id:
            raise ValidationFailedError("Ticket ID and Profiler ID are required")

        ticket = self.ticket_repo.get(ticket_ref)
        if not ticket:
            raise ValidationFailedError(f"Invalid ticket ID: no ticket found for id or ticket_number {ticket_ref}")

        profiler = self.profiler_repo.get(profiler_id)
        if not profiler:
            raise ValidationFailedError(f"Invalid profiler ID: {profiler_id}")

        status = _parse_status(data.get("status") or PlacementStatus.PROPOSED.value)
        if not status.is_active:
            raise ValidationFailedError(f"A placement cannot be created with status '{status.value}'")

        ticket_id = ticket["id"]
        if self.placement_repo.find_active(ticket_id, profiler_id):
            raise PlacementConflictError(ticket_id, profiler_id)

        match_score = data.get("match_score")
        if match_score is None:
            match_score = self._score_pair(ticket, profiler)

        doc = {
            "ticket_id": ticket_id,
            "profiler_id": profiler_id,
            "assigned_by": data.get("assigned_by"),
            "status": status.value,
            "active": True,
            "match_score": match_score,
            "notes": data.get("notes"),
            "interview_scheduled_at": data.get("interview_scheduled_at"),
            "start_date": data.get("start_date"),
            "end_date": data.get("end_date"),
            "placement_fee": data.get("placement_fee"),
        }

        try:
            placement = self.placement_repo.create(doc)
        except DuplicateKeyError:
            raise PlacementConflictError(ticket_id, profiler_id)

        self.history_repo.add(
            placement_id=placement["id"],
            status_changed_to=status.value,
            changed_by=data.get("assigned_by"),
            notes="Placement created",
        )
        return placement

    def _score_pair(self, ticket: Dict[str, Any], profiler: Dict[str, Any]) -> Optional[float]:
        try:
            result = self.matcher.score(Ticket.from_record(ticket), CandidateProfile.from_record(profiler))
        except MalformedRecordError as e:
            logger.warning(f"Cannot score profiler {profiler.get('id')} for placement: {e.reason}")
            return None
        return result.match_score

    # ===================== READ =====================

    def get(self, placement_id: str) -> Dict[str, Any]:
        placement = self.placement_repo.get(placement_id)
        if not placement:
            raise NotFoundError("Placement", placement_id)

        placement["ticket"] = _summary(self.ticket_repo.get(placement["ticket_id"]), TICKET_SUMMARY_FIELDS)
        placement["profiler"] = _summary(self.profiler_repo.get(placement["profiler_id"]), PROFILER_SUMMARY_FIELDS)
        placement["history"] = self.history_repo.list_for(placement_id)
        return placement

    def list(
        self,
        ticket_id: str = None,
        profiler_id: str = None,
        status: str = None,
        offset: int = 0,
        limit: int = 50
    ) -> Dict[str, Any]:
        placements, total = self.placement_repo.list(
            ticket_id=ticket_id,
            profiler_id=profiler_id,
            status=status,
            offset=offset,
            limit=limit,
        )
        profilers = self._profilers_by_id([p["profiler_id"] for p in placements])
        for placement in placements:
            placement["profiler"] = _summary(profilers.get(placement["profiler_id"]), PROFILER_SUMMARY_FIELDS)
        return {"placements": placements, "pagination": pagination(total, limit, offset)}

    def _profilers_by_id(self, profiler_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not profiler_ids:
            return {}
        return {p["id"]: p for p in self.profiler_repo.get_many(sorted(set(profiler_ids)))}

    # ===================== UPDATE / DELETE =====================

    def update(self, placement_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a placement; status changes are appended to history.

        Reactivating a withdrawn/cancelled placement is refused when the pair
        already has another active placement.
        """
        current = self.placement_repo.get(placement_id)
        if not current:
            raise NotFoundError("Placement", placement_id)

        updates = {k: v for k, v in updates.items() if v is not None}
        reason = updates.pop("status_change_reason", None)
        changed_by = updates.pop("changed_by", None) or updates.get("assigned_by")
        if not updates:
            raise ValidationFailedError("No fields to update")

        new_status = None
        if "status" in updates:
            new_status = _parse_status(updates["status"])
            updates["status"] = new_status.value
            updates["active"] = new_status.is_active

            if new_status.is_active and not current.get("active", True):
                other = self.placement_repo.find_active(current["ticket_id"], current["profiler_id"])
                if other and other["id"] != placement_id:
                    raise PlacementConflictError(current["ticket_id"], current["profiler_id"])

        try:
            updated = self.placement_repo.update(placement_id, updates)
        except DuplicateKeyError:
            raise PlacementConflictError(current["ticket_id"], current["profiler_id"])
        if updated is None:
            raise NotFoundError("Placement", placement_id)

        if new_status is not None and new_status.value != current.get("status"):
            self.history_repo.add(
                placement_id=placement_id,
                status_changed_to=new_status.value,
                changed_by=changed_by,
                reason=reason,
                notes=f"Status changed from {current.get('status')} to {new_status.value}",
            )
            logger.info(f"Placement {placement_id}: {current.get('status')} -> {new_status.value}")

        return updated

    def withdraw(self, placement_id: str, changed_by: str = None, reason: str = None) -> Dict[str, Any]:
        return self.update(placement_id, {
            "status": PlacementStatus.WITHDRAWN.value,
            "changed_by": changed_by,
            "status_change_reason": reason,
        })

    def delete(self, placement_id: str) -> Dict[str, Any]:
        placement = self.placement_repo.get(placement_id)
        if not placement:
            raise NotFoundError("Placement", placement_id)
        self.placement_repo.delete(placement_id)
        self.history_repo.delete_for(placement_id)
        logger.info(f"Deleted placement {placement_id}")
        return placement


_placement_service: Optional[PlacementService] = None

def get_placement_service() -> PlacementService:
    global _placement_service
    if _placement_service is None:
        _placement_service = PlacementService()
    return _placement_service
