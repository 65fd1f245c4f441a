"""Milestone submission endpoints."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from buildathon.db import get_db
from buildathon.models import MilestoneRecord
from buildathon.schemas.milestone import MilestoneProgressRead, MilestoneRead, MilestoneSubmit
from buildathon.security import PUBLIC_ACTOR, require_admin
from buildathon.services import milestones as milestones_service

router = APIRouter(prefix="/api/milestones", tags=["milestones"])


@router.get("", response_model=list[MilestoneRead])
def list_milestones(
    project_id: int = Query(...),
    db: Session = Depends(get_db),
) -> list[MilestoneRecord]:
    return milestones_service.list_milestones(db, project_id)


@router.get("/progress", response_model=list[MilestoneProgressRead])
def milestone_progress(
    project_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Completion and unlock state of every milestone for a project."""

    return milestones_service.project_progress(db, project_id)


@router.post("", response_model=MilestoneRead, status_code=status.HTTP_200_OK)
def submit_milestone(
    payload: MilestoneSubmit,
    db: Session = Depends(get_db),
) -> MilestoneRecord:
    """Create or replace the project's record for a milestone type."""

    return milestones_service.submit_milestone(db, payload, actor=PUBLIC_ACTOR)


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_milestone(
    milestone_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
) -> Response:
    milestones_service.delete_milestone(db, milestone_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"Cache-Control": "no-store"})
