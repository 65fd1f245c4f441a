"""Schema package exports."""
from .admin import AdminLogin, CountryShare, DashboardProject, DashboardRead, DashboardTeam
from .milestone import MilestoneProgressRead, MilestoneRead, MilestoneSubmit
from .project import ProjectCreate, ProjectRead
from .team import (
    SubmissionCreate,
    SubmissionRead,
    TeamMemberCreate,
    TeamMemberPatch,
    TeamMemberRead,
    TeamMembersReplace,
    TeamMemberUpdate,
    TeamRead,
    TeamRegister,
    TeamUpdate,
)

__all__ = [
    "AdminLogin",
    "CountryShare",
    "DashboardProject",
    "DashboardRead",
    "DashboardTeam",
    "MilestoneProgressRead",
    "MilestoneRead",
    "MilestoneSubmit",
    "ProjectCreate",
    "ProjectRead",
    "SubmissionCreate",
    "SubmissionRead",
    "TeamMemberCreate",
    "TeamMemberPatch",
    "TeamMemberRead",
    "TeamMembersReplace",
    "TeamMemberUpdate",
    "TeamRead",
    "TeamRegister",
    "TeamUpdate",
]
