"""Team registration, lookup and final submission endpoints."""
from collections.abc import Iterator

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.orm import Session

from buildathon.db import get_db
from buildathon.models import Submission, Team
from buildathon.schemas.team import (
    SubmissionCreate,
    SubmissionRead,
    TeamMembersReplace,
    TeamRead,
    TeamRegister,
    TeamUpdate,
)
from buildathon.security import require_admin
from buildathon.services import teams as teams_service
from buildathon.services.github import GithubClient

router = APIRouter(prefix="/api/buildathon", tags=["buildathon"])
admin_router = APIRouter(prefix="/api/teams", tags=["teams"])


def get_github_client() -> Iterator[GithubClient]:
    client = GithubClient.from_env()
    try:
        yield client
    finally:
        client.close()


@router.post("/register", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
def register(
    payload: TeamRegister,
    db: Session = Depends(get_db),
    github: GithubClient = Depends(get_github_client),
    user_agent: str | None = Header(default=None),
) -> Team:
    """Register a team; a GitHub repo must have no commits before the start date."""

    return teams_service.register_team(db, payload, user_agent=user_agent, github=github)


@router.get("/teams", response_model=list[TeamRead])
def list_teams(db: Session = Depends(get_db)) -> list[Team]:
    return teams_service.list_teams(db)


@router.patch("/teams/{team_id}", response_model=TeamRead)
def replace_members(
    team_id: int,
    payload: TeamMembersReplace,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
) -> Team:
    return teams_service.replace_team_members(db, team_id, payload.members, actor=actor)


@router.get("/team/find", response_model=TeamRead)
def find_team(email: str = Query(default=""), db: Session = Depends(get_db)) -> Team:
    return teams_service.find_team_by_email(db, email)


@router.put("/team/update", response_model=TeamRead)
def update_team(payload: TeamUpdate, db: Session = Depends(get_db)) -> Team:
    return teams_service.update_team(db, payload)


@router.post("/submit", response_model=SubmissionRead)
def submit(payload: SubmissionCreate, db: Session = Depends(get_db)) -> Submission:
    """Save the team's final hand-in (Karma GAP link and tracks)."""

    return teams_service.submit_final(db, payload)


@admin_router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
) -> Response:
    teams_service.delete_team(db, team_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"Cache-Control": "no-store"})
