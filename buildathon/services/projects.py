"""Project services."""
from __future__ import annotations

from fastapi import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from buildathon.core.logging import get_logger
from buildathon.models import MilestoneType, Project, Team
from buildathon.schemas.project import ProjectCreate
from buildathon.services import milestones as milestones_service
from buildathon.services.milestone_rules import is_absolute_url
from buildathon.utils.audit import log_audit
from buildathon.utils.errors import reject

logger = get_logger(__name__)


def create_project(db: Session, payload: ProjectCreate, *, actor: str) -> Project:
    """Create a project for a team and record its Registration milestone."""

    if db.get(Team, payload.team_id) is None:
        raise reject(status.HTTP_404_NOT_FOUND, "TEAM_NOT_FOUND", "Team not found.")

    project_name = payload.project_name.strip()
    if not project_name:
        raise reject(status.HTTP_400_BAD_REQUEST, "PROJECT_NAME_REQUIRED", "Project name is required.")

    github_repo = (payload.github_repo or "").strip() or None
    if github_repo is not None and not is_absolute_url(github_repo):
        raise reject(status.HTTP_400_BAD_REQUEST, "INVALID_URL", "Invalid URL in github_repo.")

    project = Project(
        team_id=payload.team_id,
        project_name=project_name,
        description=(payload.description or "").strip() or None,
        github_repo=github_repo,
    )
    db.add(project)
    db.flush()

    # Creating the project is the registration itself.
    milestones_service.record_submission(db, project.id, MilestoneType.REGISTRATION, {})
    log_audit(
        db,
        actor=actor,
        action="CREATE_PROJECT",
        entity="Project",
        entity_id=project.id,
        data={"team_id": payload.team_id, "project_name": project_name},
    )
    db.commit()
    db.refresh(project)
    logger.info("Project created", extra={"project_id": project.id, "team_id": payload.team_id})
    return project


def list_projects(db: Session, team_id: int) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.team_id == team_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    return list(db.scalars(stmt).all())


def delete_project(db: Session, project_id: int, *, actor: str) -> None:
    """Delete a project together with all of its milestones."""

    project = db.get(Project, project_id)
    if project is None:
        raise reject(status.HTTP_404_NOT_FOUND, "PROJECT_NOT_FOUND", "Project not found.")

    log_audit(
        db,
        actor=actor,
        action="DELETE_PROJECT",
        entity="Project",
        entity_id=project.id,
        data={"team_id": project.team_id, "project_name": project.project_name},
    )
    db.delete(project)
    db.commit()
    logger.info("Project deleted", extra={"project_id": project_id, "actor": actor})


__all__ = ["create_project", "delete_project", "list_projects"]
