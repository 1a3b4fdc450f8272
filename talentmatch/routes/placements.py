"""
Placement Routes

Proposing profilers for tickets and tracking them through the hiring
pipeline. A (ticket, profiler) pair can hold only one active placement;
a second one is refused with 409 until the first is withdrawn or cancelled.
"""
import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel
from typing import Optional

from talentmatch.config import settings
from talentmatch.domain.errors import TalentMatchError
from talentmatch.middleware.auth import verify_admin_key, verify_api_key
from talentmatch.models.staffing_schema import PlacementCreateRequest, PlacementUpdateRequest
from talentmatch.routes.errors import http_error
from talentmatch.services.placement_service import PlacementService, get_placement_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/placements", tags=["placements"])


class WithdrawRequest(BaseModel):
    changed_by: Optional[str] = None
    reason: Optional[str] = None


@router.post("", status_code=201)
def create_placement(
    request: PlacementCreateRequest,
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_api_key)
):
    try:
        placement = service.create(request.model_dump())
        return {"success": True, "placement": placement}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating placement: {e}")
        raise HTTPException(500, str(e))


@router.get("")
def list_placements(
    ticket_id: Optional[str] = Query(None),
    profiler_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_api_key)
):
    try:
        result = service.list(
            ticket_id=ticket_id,
            profiler_id=profiler_id,
            status=status,
            offset=offset,
            limit=limit,
        )
        return {"success": True, **result}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing placements: {e}")
        raise HTTPException(500, str(e))


@router.get("/{placement_id}")
def get_placement(
    placement_id: str,
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_api_key)
):
    """Placement with ticket and profiler summaries and its status history."""
    try:
        return {"success": True, "placement": service.get(placement_id)}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching placement {placement_id}: {e}")
        raise HTTPException(500, str(e))


@router.put("/{placement_id}")
def update_placement(
    placement_id: str,
    request: PlacementUpdateRequest,
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_api_key)
):
    try:
        placement = service.update(placement_id, request.model_dump(exclude_none=True))
        return {"success": True, "placement": placement}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating placement {placement_id}: {e}")
        raise HTTPException(500, str(e))


@router.post("/{placement_id}/withdraw")
def withdraw_placement(
    placement_id: str,
    request: Optional[WithdrawRequest] = None,
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_api_key)
):
    """Withdraw a placement, freeing the ticket/profiler pair for a new one."""
    request = request or WithdrawRequest()
    try:
        placement = service.withdraw(placement_id, changed_by=request.changed_by, reason=request.reason)
        return {"success": True, "placement": placement}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error withdrawing placement {placement_id}: {e}")
        raise HTTPException(500, str(e))


@router.delete("/{placement_id}")
def delete_placement(
    placement_id: str,
    service: PlacementService = Depends(get_placement_service),
    _: dict = Depends(verify_admin_key)
):
    try:
        service.delete(placement_id)
        return {"success": True, "message": f"Placement {placement_id} deleted"}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting placement {placement_id}: {e}")
        raise HTTPException(500, str(e))
