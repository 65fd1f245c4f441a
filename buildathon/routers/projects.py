"""Project endpoints."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from buildathon.db import get_db
from buildathon.models import Project
from buildathon.schemas.project import ProjectCreate, ProjectRead
from buildathon.security import PUBLIC_ACTOR, require_admin
from buildathon.services import projects as projects_service

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=list[ProjectRead])
def list_projects(
    team_id: int = Query(...),
    db: Session = Depends(get_db),
) -> list[Project]:
    return projects_service.list_projects(db, team_id)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
) -> Project:
    """Register a project; its Registration milestone is recorded with it."""

    return projects_service.create_project(db, payload, actor=PUBLIC_ACTOR)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
) -> Response:
    projects_service.delete_project(db, project_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"Cache-Control": "no-store"})
