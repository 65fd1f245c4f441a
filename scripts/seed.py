"""Seed a demo team and project into the configured database."""
from __future__ import annotations

from buildathon.config import get_settings
from buildathon.db import get_sessionmaker, init_engine
from buildathon.models import MilestoneType, Project, Team, TeamMember
from buildathon.services import milestones as milestones_service


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    init_engine()
    session = get_sessionmaker()()

    try:
        team = Team(team_name="Demo Team", wallet_address="0x" + "11" * 20)
        team.members = [
            TeamMember(member_name="Ada", member_email="ada@example.com", country="Nigeria"),
            TeamMember(member_name="Bruno", member_email="bruno@example.com", country="Brazil"),
        ]
        session.add(team)
        session.flush()

        project = Project(team_id=team.id, project_name="Demo dApp")
        session.add(project)
        session.flush()
        milestones_service.record_submission(session, project.id, MilestoneType.REGISTRATION, {})
        session.commit()
        print(f"Seeded team {team.id} with project {project.id}.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
