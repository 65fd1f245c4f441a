"""Project schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    team_id: int
    project_name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    github_repo: str | None = Field(default=None, max_length=500)


class ProjectRead(BaseModel):
    id: int
    team_id: int
    project_name: str
    description: str | None
    github_repo: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
