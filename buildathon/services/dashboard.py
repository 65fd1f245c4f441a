"""Admin dashboard aggregation."""
from __future__ import annotations

from collections import Counter
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from buildathon.models import Project, Team, TeamMember
from buildathon.schemas.admin import CountryShare, DashboardRead, DashboardTeam


def country_distribution(members: Iterable[TeamMember]) -> tuple[int, list[CountryShare]]:
    """Count members per country, most represented first.

    Members without a country are left out of both the total and the shares.
    """

    counts = Counter(member.country for member in members if member.country)
    total = sum(counts.values())
    shares = [
        CountryShare(
            country=country,
            count=count,
            percentage=round(count / total * 100, 1) if total else 0.0,
        )
        for country, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    return total, shares


def build_dashboard(db: Session) -> DashboardRead:
    stmt = (
        select(Team)
        .options(
            selectinload(Team.members),
            selectinload(Team.projects).selectinload(Project.milestones),
            selectinload(Team.submission),
        )
        .order_by(Team.created_at.desc(), Team.id.desc())
    )
    teams = list(db.scalars(stmt).all())
    total, shares = country_distribution(member for team in teams for member in team.members)
    return DashboardRead(
        total_teams=len(teams),
        total_members=total,
        countries=shares,
        teams=[DashboardTeam.model_validate(team) for team in teams],
    )


__all__ = ["build_dashboard", "country_distribution"]
