"""Team registration and submission schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TeamMemberCreate(BaseModel):
    member_name: str = ""
    member_email: str = ""
    member_github: str | None = None
    country: str | None = None


class TeamRegister(BaseModel):
    team_name: str = ""
    wallet_address: str = ""
    members: list[TeamMemberCreate] = Field(default_factory=list)
    github_repo: str | None = None
    karma_gap_link: str | None = None


class TeamMemberUpdate(TeamMemberCreate):
    # Existing member id, or a client-side placeholder starting with "new-".
    id: str


class TeamUpdate(BaseModel):
    team_id: int
    team_name: str = Field(min_length=1)
    wallet_address: str = Field(min_length=1)
    members: list[TeamMemberUpdate]


class TeamMemberPatch(BaseModel):
    member_name: str = ""
    member_github: str | None = None
    country: str | None = None


class TeamMembersReplace(BaseModel):
    members: list[TeamMemberPatch] = Field(default_factory=list)


class TeamMemberRead(BaseModel):
    id: int
    member_name: str
    member_email: str | None
    member_github: str | None
    country: str | None

    model_config = ConfigDict(from_attributes=True)


class TeamRead(BaseModel):
    id: int
    team_name: str
    wallet_address: str
    github_repo: str | None
    karma_gap_link: str | None
    created_at: datetime
    members: list[TeamMemberRead]

    model_config = ConfigDict(from_attributes=True)


class SubmissionCreate(BaseModel):
    team_id: int
    karma_gap_link: str = ""
    track_open_track: bool = False
    track_farcaster_miniapp: bool = False
    track_self: bool = False
    track_v0: bool = False


class SubmissionRead(BaseModel):
    id: int
    team_id: int
    karma_gap_link: str
    track_open_track: bool
    track_farcaster_miniapp: bool
    track_self: bool
    track_v0: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
