"""Admin login and dashboard schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from buildathon.schemas.milestone import MilestoneRead
from buildathon.schemas.team import SubmissionRead, TeamMemberRead


class AdminLogin(BaseModel):
    username: str = ""
    password: str = ""


class CountryShare(BaseModel):
    country: str
    count: int
    percentage: float


class DashboardProject(BaseModel):
    id: int
    project_name: str
    github_repo: str | None
    milestones: list[MilestoneRead]

    model_config = ConfigDict(from_attributes=True)


class DashboardTeam(BaseModel):
    id: int
    team_name: str
    wallet_address: str
    github_repo: str | None
    created_at: datetime
    members: list[TeamMemberRead]
    projects: list[DashboardProject]
    submission: SubmissionRead | None = None

    model_config = ConfigDict(from_attributes=True)


class DashboardRead(BaseModel):
    total_teams: int
    total_members: int
    countries: list[CountryShare]
    teams: list[DashboardTeam]
