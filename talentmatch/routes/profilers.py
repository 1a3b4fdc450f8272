"""
Profiler Routes

Candidate profile management and the candidate matching endpoint.

Endpoints:
- GET /api/profilers/match/{ticket_id} - Ranked candidates for a ticket
- GET/POST /api/profilers - List / create profilers
- GET/PUT/DELETE /api/profilers/{profiler_id} - Profiler CRUD
"""
import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from talentmatch.config import settings
from talentmatch.domain.errors import TalentMatchError
from talentmatch.middleware.auth import verify_admin_key, verify_api_key
from talentmatch.models.staffing_schema import ProfilerCreateRequest, ProfilerUpdateRequest
from talentmatch.routes.errors import http_error
from talentmatch.services.matching_service import MatchingService, get_matching_service
from talentmatch.services.profiler_service import ProfilerService, get_profiler_service
from talentmatch.utils.match_scorer import MatchOptions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profilers", tags=["profilers"])


# ===================== MATCHING =====================
# Registered before /{profiler_id} so "match" is not taken for an id.

@router.get("/match/{ticket_id}")
def match_profilers(
    ticket_id: str,
    availability_only: bool = Query(False, description="Only profilers marked available"),
    min_match_score: Optional[float] = Query(None, description="Minimum composite score in [0, 1]"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    include_analysis: bool = Query(False, description="Attach AI commentary to each result"),
    service: MatchingService = Depends(get_matching_service),
    _: dict = Depends(verify_api_key)
):
    """
    Rank every profiler against a ticket.

    Scores are deterministic; include_analysis only adds commentary.
    """
    options = MatchOptions(
        availability_only=availability_only,
        min_match_score=settings.MATCH_DEFAULT_MIN_SCORE if min_match_score is None else min_match_score,
        limit=settings.MATCH_DEFAULT_LIMIT if limit is None else limit,
    )
    try:
        result = service.match_ticket(ticket_id, options, include_analysis=include_analysis)
        return {"success": True, **result}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error matching profilers for ticket {ticket_id}: {e}")
        raise HTTPException(500, str(e))


# ===================== CRUD =====================

@router.post("", status_code=201)
def create_profiler(
    request: ProfilerCreateRequest,
    service: ProfilerService = Depends(get_profiler_service),
    _: dict = Depends(verify_api_key)
):
    try:
        profiler = service.create(request.to_document())
        return {"success": True, "profiler": profiler}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating profiler: {e}")
        raise HTTPException(500, str(e))


@router.get("")
def list_profilers(
    search: Optional[str] = Query(None, description="Search first name, last name or e-mail"),
    availability: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    skills: Optional[str] = Query(None, description="Comma-separated; matches any"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: ProfilerService = Depends(get_profiler_service),
    _: dict = Depends(verify_api_key)
):
    try:
        skill_list = [s.strip() for s in skills.split(",") if s.strip()] if skills else None
        result = service.list(
            search=search,
            availability=availability,
            location=location,
            skills=skill_list,
            offset=offset,
            limit=limit,
        )
        return {"success": True, **result}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing profilers: {e}")
        raise HTTPException(500, str(e))


@router.get("/{profiler_id}")
def get_profiler(
    profiler_id: str,
    service: ProfilerService = Depends(get_profiler_service),
    _: dict = Depends(verify_api_key)
):
    """Profiler with its placements."""
    try:
        return {"success": True, "profiler": service.get(profiler_id)}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching profiler {profiler_id}: {e}")
        raise HTTPException(500, str(e))


@router.put("/{profiler_id}")
def update_profiler(
    profiler_id: str,
    request: ProfilerUpdateRequest,
    service: ProfilerService = Depends(get_profiler_service),
    _: dict = Depends(verify_api_key)
):
    try:
        profiler = service.update(profiler_id, request.to_updates())
        return {"success": True, "profiler": profiler}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating profiler {profiler_id}: {e}")
        raise HTTPException(500, str(e))


@router.delete("/{profiler_id}")
def delete_profiler(
    profiler_id: str,
    service: ProfilerService = Depends(get_profiler_service),
    _: dict = Depends(verify_admin_key)
):
    try:
        service.delete(profiler_id)
        return {"success": True, "message": f"Profiler {profiler_id} deleted"}
    except TalentMatchError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting profiler {profiler_id}: {e}")
        raise HTTPException(500, str(e))
