"""
Ticket Service - staffing request management.
"""
import logging
from typing import Any, Dict, Optional

from talentmatch.domain.errors import NotFoundError, ValidationFailedError
from talentmatch.infra.mongodb.repositories.ticket_repo import TicketRepository, get_ticket_repo

logger = logging.getLogger(__name__)


def pagination(total: int, limit: int, offset: int) -> Dict[str, Any]:
    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + limit < total,
    }


class TicketService:
    """
    CRUD over tickets.

    Tickets can be addressed by id or by ticket_number everywhere.
    """

    def __init__(self, ticket_repo: TicketRepository = None):
        self.ticket_repo = ticket_repo or get_ticket_repo()

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.ticket_repo.create(data)

    def get(self, ticket_ref: str) -> Dict[str, Any]:
        ticket = self.ticket_repo.get(ticket_ref)
        if not ticket:
            raise NotFoundError("Ticket", ticket_ref)
        return ticket

    def list(
        self,
        status: str = None,
        priority: str = None,
        created_by: str = None,
        search: str = None,
        offset: int = 0,
        limit: int = 50
    ) -> Dict[str, Any]:
        tickets, total = self.ticket_repo.list(
            status=status,
            priority=priority,
            created_by=created_by,
            search=search,
            offset=offset,
            limit=limit,
        )
        return {"tickets": tickets, "pagination": pagination(total, limit, offset)}

    def update(self, ticket_ref: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        if not updates:
            raise ValidationFailedError("No fields to update")

        ticket = self.get(ticket_ref)
        budget_min = updates.get("budget_min", ticket.get("budget_min"))
        budget_max = updates.get("budget_max", ticket.get("budget_max"))
        if budget_min is not None and budget_max is not None and budget_max < budget_min:
            raise ValidationFailedError("budget_max must be greater than or equal to budget_min")

        updated = self.ticket_repo.update(ticket["id"], updates)
        if updated is None:
            raise NotFoundError("Ticket", ticket_ref)
        logger.info(f"Updated ticket {ticket['id']}: {sorted(updates)}")
        return updated

    def delete(self, ticket_ref: str) -> Dict[str, Any]:
        ticket = self.get(ticket_ref)
        self.ticket_repo.delete(ticket["id"])
        return ticket


_ticket_service: Optional[TicketService] = None

def get_ticket_service() -> TicketService:
    global _ticket_service
    if _ticket_service is None:
        _ticket_service = TicketService()
    return _ticket_service
