"""Schemas for milestone submissions."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from buildathon.models.milestone import MilestoneType


class MilestoneSubmit(BaseModel):
    project_id: int
    # Kept as free text so unknown types get the domain error, not a schema error.
    milestone_type: str = Field(min_length=1, max_length=50)
    contract_address: str | None = Field(default=None, max_length=200)
    karma_gap_link: str | None = Field(default=None, max_length=500)
    farcaster_link: str | None = Field(default=None, max_length=500)
    slides_link: str | None = Field(default=None, max_length=500)
    pitch_deck_link: str | None = Field(default=None, max_length=500)


class MilestoneRead(BaseModel):
    id: int
    project_id: int
    milestone_type: MilestoneType
    contract_address: str | None
    karma_gap_link: str | None
    farcaster_link: str | None
    slides_link: str | None
    pitch_deck_link: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MilestoneProgressRead(BaseModel):
    milestone_type: MilestoneType
    label: str
    completed: bool
    unlocked: bool
    optional: bool
    blocked_by: str | None = None

    model_config = ConfigDict(from_attributes=True)
