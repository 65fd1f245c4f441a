"""Project model."""
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Project(Base):
    """A team's buildathon project; owns its milestone records."""

    __tablename__ = "projects"

    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_repo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    team = relationship("Team", back_populates="projects")
    milestones = relationship(
        "MilestoneRecord",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MilestoneRecord.id",
    )
