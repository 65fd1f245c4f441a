"""ORM models package."""
from .audit import AuditLog
from .base import Base
from .milestone import PAYLOAD_FIELDS, MilestoneRecord, MilestoneType
from .project import Project
from .team import Submission, Team, TeamMember

__all__ = [
    "AuditLog",
    "Base",
    "MilestoneRecord",
    "MilestoneType",
    "PAYLOAD_FIELDS",
    "Project",
    "Submission",
    "Team",
    "TeamMember",
]
