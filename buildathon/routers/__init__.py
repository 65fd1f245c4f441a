"""API routers for the buildathon backend."""
from fastapi import APIRouter

from . import admin, health, milestones, projects, teams


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(admin.router)
    api_router.include_router(teams.router)
    api_router.include_router(teams.admin_router)
    api_router.include_router(projects.router)
    api_router.include_router(milestones.router)
    return api_router
