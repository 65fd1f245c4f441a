"""Milestone model definitions."""
from enum import Enum as PyEnum

from sqlalchemy import Enum as SqlEnum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class MilestoneType(str, PyEnum):
    """Checkpoints a project goes through during the buildathon.

    Values are the slugs used on the wire; the database stores member names.
    """

    REGISTRATION = "registration"
    TESTNET = "testnet"
    KARMA_GAP = "karma-gap"
    MAINNET = "mainnet"
    FARCASTER = "farcaster"
    FINAL_SUBMISSION = "final-submission"


class MilestoneRecord(Base):
    """A completed milestone for a project, at most one per milestone type."""

    __tablename__ = "milestones"
    __table_args__ = (
        UniqueConstraint("project_id", "milestone_type", name="uq_milestone_project_type"),
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    milestone_type: Mapped[MilestoneType] = mapped_column(
        SqlEnum(MilestoneType, name="milestonetype"), nullable=False
    )
    contract_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    karma_gap_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    farcaster_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    slides_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    pitch_deck_link: Mapped[str | None] = mapped_column(String(500), nullable=True)

    project = relationship("Project", back_populates="milestones")


# Columns a submission may fill; everything else on the row is bookkeeping.
PAYLOAD_FIELDS = (
    "contract_address",
    "karma_gap_link",
    "farcaster_link",
    "slides_link",
    "pitch_deck_link",
)
