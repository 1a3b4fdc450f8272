"""
Ticket Routes

CRUD for hiring tickets raised by Account Managers.
Tickets are addressed by id or by ticket number (TKT-...).
"""
import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from talentmatch.config import settings
from talentmatch.domain.errors import TalentMatchError
from talentmatch.middleware.auth import verify_admin_key, verify_api_key
from talentmatch.models.staffing_schema import TicketCreateRequest, TicketUpdateRequest
from talentmatch.routes.errors import http_error
from talentmatch.services.ticket_service import TicketService, get_ticket_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tickets", tags=["tickets"])


@router.post("", status_code=201)
def create_ticket(
    request: TicketCreateRequest,
    service: TicketService = Depends(get_ticket_service),
    _: dict = Depends(verify_api_key)
):
    """Create a ticket. A ticket number is generated when none is given."""
    try:
        ticket = service.create(request.model_dump())
        return {"success": True, "ticket": ticket}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating ticket: {e}")
        raise HTTPException(500, str(e))


@router.get("")
def list_tickets(
    status: Optional[str] = Query(None, description="Filter by ticket status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    created_by: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search title, company or ticket number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: TicketService = Depends(get_ticket_service),
    _: dict = Depends(verify_api_key)
):
    try:
        result = service.list(
            status=status,
            priority=priority,
            created_by=created_by,
            search=search,
            offset=offset,
            limit=limit,
        )
        return {"success": True, **result}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing tickets: {e}")
        raise HTTPException(500, str(e))


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    _: dict = Depends(verify_api_key)
):
    try:
        return {"success": True, "ticket": service.get(ticket_id)}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching ticket {ticket_id}: {e}")
        raise HTTPException(500, str(e))


@router.put("/{ticket_id}")
def update_ticket(
    ticket_id: str,
    request: TicketUpdateRequest,
    service: TicketService = Depends(get_ticket_service),
    _: dict = Depends(verify_api_key)
):
    try:
        ticket = service.update(ticket_id, request.model_dump(exclude_none=True))
        return {"success": True, "ticket": ticket}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating ticket {ticket_id}: {e}")
        raise HTTPException(500, str(e))


@router.delete("/{ticket_id}")
def delete_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    _: dict = Depends(verify_admin_key)
):
    try:
        ticket = service.delete(ticket_id)
        return {"success": True, "message": f"Ticket {ticket['ticket_number']} deleted"}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting ticket {ticket_id}: {e}")
        raise HTTPException(500, str(e))
