"""Team, member and final submission models."""
from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Team(Base):
    """A registered buildathon team."""

    __tablename__ = "teams"

    team_name: Mapped[str] = mapped_column(String(200), nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(100), nullable=False)
    github_repo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    karma_gap_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TeamMember.id",
    )
    projects = relationship(
        "Project",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Project.id",
    )
    submission = relationship(
        "Submission",
        back_populates="team",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TeamMember(Base):
    """A participant; an e-mail address belongs to at most one team."""

    __tablename__ = "team_members"

    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_name: Mapped[str] = mapped_column(String(200), nullable=False)
    member_email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    member_github: Mapped[str | None] = mapped_column(String(200), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    team = relationship("Team", back_populates="members")


class Submission(Base):
    """Final hand-in for a team: Karma GAP page plus selected tracks."""

    __tablename__ = "submissions"

    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    karma_gap_link: Mapped[str] = mapped_column(String(500), nullable=False)
    track_open_track: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    track_farcaster_miniapp: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    track_self: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    track_v0: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    team = relationship("Team", back_populates="submission")
