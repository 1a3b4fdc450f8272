"""
Routes package - exports all API routers
"""
from talentmatch.routes.tickets import router as tickets_router
from talentmatch.routes.profilers import router as profilers_router
from talentmatch.routes.placements import router as placements_router

__all__ = ["tickets_router", "profilers_router", "placements_router"]
