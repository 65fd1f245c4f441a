"""Team registration, editing and final submission services."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from buildathon.config import get_settings
from buildathon.core.logging import get_logger
from buildathon.models import Submission, Team, TeamMember
from buildathon.schemas.team import (
    SubmissionCreate,
    TeamMemberCreate,
    TeamMemberPatch,
    TeamRegister,
    TeamUpdate,
)
from buildathon.services.github import GithubCheckError, GithubClient
from buildathon.services.milestone_rules import is_absolute_url
from buildathon.utils.audit import log_audit
from buildathon.utils.errors import reject

logger = get_logger(__name__)

NEW_MEMBER_PREFIX = "new-"


@dataclass
class _CleanMember:
    member_name: str
    member_email: str
    member_github: str | None
    country: str | None
    ref: str | None = None


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _clean_member(member: TeamMemberCreate, ref: str | None = None) -> _CleanMember:
    return _CleanMember(
        member_name=_clean(member.member_name),
        member_email=_clean(member.member_email).lower(),
        member_github=_clean(member.member_github) or None,
        country=_clean(member.country) or None,
        ref=ref,
    )


def _check_members(members: Sequence[_CleanMember]) -> None:
    if not members:
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "MEMBERS_REQUIRED",
            "At least one team member is required.",
        )
    if any(not m.member_name or not m.member_email or not m.country for m in members):
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "MEMBER_FIELDS_REQUIRED",
            "All members must have name, email, and country.",
        )
    emails = [m.member_email for m in members]
    if len(emails) != len(set(emails)):
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "DUPLICATE_MEMBER_EMAIL",
            "Duplicate email addresses in team members.",
        )


def _email_taken_elsewhere(db: Session, emails: Iterable[str], team_id: int | None) -> bool:
    stmt = select(TeamMember.id).where(func.lower(TeamMember.member_email).in_(list(emails)))
    if team_id is not None:
        stmt = stmt.where(TeamMember.team_id != team_id)
    return db.scalars(stmt.limit(1)).first() is not None


def _email_conflict() -> Exception:
    return reject(
        status.HTTP_409_CONFLICT,
        "EMAIL_ALREADY_REGISTERED",
        "One or more email addresses are already registered with another team.",
    )


def _optional_url(value: str | None, field: str) -> str | None:
    text = _clean(value)
    if not text:
        return None
    if not is_absolute_url(text):
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "INVALID_URL",
            f"Invalid URL in {field}.",
            {"field": field},
        )
    return text


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise reject(status.HTTP_404_NOT_FOUND, "TEAM_NOT_FOUND", "Team not found.")
    return team


def register_team(
    db: Session,
    payload: TeamRegister,
    *,
    user_agent: str | None,
    github: GithubClient,
) -> Team:
    """Register a new team with its members."""

    team_name = _clean(payload.team_name)
    wallet_address = _clean(payload.wallet_address)
    members = [m for m in (_clean_member(member) for member in payload.members) if m.member_name]
    if not team_name or not wallet_address or not members:
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "TEAM_FIELDS_REQUIRED",
            "team_name, wallet_address and at least one named member are required.",
        )
    _check_members(members)

    github_repo = _optional_url(payload.github_repo, "github_repo")
    karma_gap_link = _optional_url(payload.karma_gap_link, "karma_gap_link")

    if _email_taken_elsewhere(db, (m.member_email for m in members), None):
        raise _email_conflict()

    if github_repo:
        try:
            github.assert_no_activity_before(github_repo, get_settings().BUILDATHON_START_AT)
        except GithubCheckError as exc:
            logger.info("GitHub repo rejected", extra={"github_repo": github_repo, "reason": str(exc)})
            raise reject(status.HTTP_400_BAD_REQUEST, "GITHUB_REPO_REJECTED", str(exc)) from exc

    team = Team(
        team_name=team_name,
        wallet_address=wallet_address,
        github_repo=github_repo,
        karma_gap_link=karma_gap_link,
        user_agent=user_agent,
    )
    team.members = [
        TeamMember(
            member_name=m.member_name,
            member_email=m.member_email,
            member_github=m.member_github,
            country=m.country,
        )
        for m in members
    ]
    db.add(team)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _email_conflict() from exc

    db.refresh(team)
    logger.info("Team registered", extra={"team_id": team.id, "members": len(members)})
    return team


def list_teams(db: Session) -> list[Team]:
    stmt = (
        select(Team)
        .options(selectinload(Team.members))
        .order_by(Team.created_at.desc(), Team.id.desc())
    )
    return list(db.scalars(stmt).all())


def find_team_by_email(db: Session, email: str) -> Team:
    """Return the team of the member registered with ``email``."""

    normalized = _clean(email).lower()
    if not normalized:
        raise reject(status.HTTP_400_BAD_REQUEST, "EMAIL_REQUIRED", "Email is required.")

    stmt = select(TeamMember).where(func.lower(TeamMember.member_email) == normalized)
    member = db.scalars(stmt).first()
    if member is None:
        raise reject(
            status.HTTP_404_NOT_FOUND,
            "TEAM_NOT_FOUND",
            "No team found with this email address.",
        )
    return member.team


def update_team(db: Session, payload: TeamUpdate) -> Team:
    """Rename a team and reconcile its member list.

    Members whose id starts with ``new-`` are created, known ids are updated
    and existing members missing from the payload are removed.
    """

    team_name = _clean(payload.team_name)
    wallet_address = _clean(payload.wallet_address)
    if not team_name or not wallet_address:
        raise reject(status.HTTP_400_BAD_REQUEST, "TEAM_FIELDS_REQUIRED", "Missing required fields.")

    members = [_clean_member(member, ref=member.id.strip()) for member in payload.members]
    _check_members(members)

    team = get_team_or_404(db, payload.team_id)
    existing = {str(member.id): member for member in team.members}

    kept_refs = {m.ref for m in members if not (m.ref or "").startswith(NEW_MEMBER_PREFIX)}
    unknown = kept_refs - existing.keys()
    if unknown:
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "UNKNOWN_MEMBER",
            "One or more members do not belong to this team.",
            {"member_ids": sorted(ref or "" for ref in unknown)},
        )

    if _email_taken_elsewhere(db, (m.member_email for m in members), team.id):
        raise _email_conflict()

    team.team_name = team_name
    team.wallet_address = wallet_address

    try:
        # Flush removals first so a freed e-mail can be reused in the same request.
        for ref, member in existing.items():
            if ref not in kept_refs:
                team.members.remove(member)
        db.flush()

        for m in members:
            if m.ref in existing:
                target = existing[m.ref]
            else:
                target = TeamMember()
                team.members.append(target)
            target.member_name = m.member_name
            target.member_email = m.member_email
            target.member_github = m.member_github
            target.country = m.country
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _email_conflict() from exc

    db.refresh(team)
    logger.info("Team updated", extra={"team_id": team.id, "members": len(members)})
    return team


def replace_team_members(db: Session, team_id: int, members: Sequence[TeamMemberPatch], *, actor: str) -> Team:
    """Drop every member of a team and recreate the named ones."""

    cleaned = [
        (_clean(m.member_name), _clean(m.member_github) or None, _clean(m.country) or None)
        for m in members
    ]
    if not cleaned:
        raise reject(status.HTTP_400_BAD_REQUEST, "MEMBERS_REQUIRED", "At least one team member is required.")
    named = [row for row in cleaned if row[0]]
    if not named:
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "MEMBERS_REQUIRED",
            "At least one team member with a name is required.",
        )
    if any(country is None for _, _, country in named):
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "MEMBER_FIELDS_REQUIRED",
            "Country is required for all team members.",
        )

    team = get_team_or_404(db, team_id)
    team.members.clear()
    db.flush()
    for name, github, country in named:
        team.members.append(TeamMember(member_name=name, member_github=github, country=country))

    log_audit(
        db,
        actor=actor,
        action="REPLACE_TEAM_MEMBERS",
        entity="Team",
        entity_id=team.id,
        data={"members": len(named)},
    )
    db.commit()
    db.refresh(team)
    return team


def delete_team(db: Session, team_id: int, *, actor: str) -> None:
    """Delete a team with its members, projects, milestones and submission."""

    team = get_team_or_404(db, team_id)
    log_audit(
        db,
        actor=actor,
        action="DELETE_TEAM",
        entity="Team",
        entity_id=team.id,
        data={"team_name": team.team_name},
    )
    db.delete(team)
    db.commit()
    logger.info("Team deleted", extra={"team_id": team_id, "actor": actor})


def submit_final(db: Session, payload: SubmissionCreate) -> Submission:
    """Create or update the team's final submission."""

    karma_gap_link = _clean(payload.karma_gap_link)
    if not karma_gap_link:
        raise reject(status.HTTP_400_BAD_REQUEST, "KARMA_GAP_LINK_REQUIRED", "Karma Gap link is required.")
    if not (payload.track_open_track or payload.track_farcaster_miniapp):
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "PRIMARY_TRACK_REQUIRED",
            "Please select at least one primary track: Open Track or MiniApps.",
        )
    if not is_absolute_url(karma_gap_link):
        raise reject(status.HTTP_400_BAD_REQUEST, "INVALID_URL", "Invalid URL format.")

    team = get_team_or_404(db, payload.team_id)
    values = {
        "karma_gap_link": karma_gap_link,
        "track_open_track": payload.track_open_track,
        "track_farcaster_miniapp": payload.track_farcaster_miniapp,
        "track_self": payload.track_self,
        "track_v0": payload.track_v0,
    }

    submission = team.submission
    if submission is None:
        submission = Submission(team_id=team.id, **values)
        db.add(submission)
    else:
        for name, value in values.items():
            setattr(submission, name, value)

    try:
        db.commit()
    except IntegrityError:
        # Concurrent first submission for the same team: update the stored row.
        db.rollback()
        submission = db.scalars(select(Submission).where(Submission.team_id == team.id)).one()
        for name, value in values.items():
            setattr(submission, name, value)
        db.commit()

    db.refresh(submission)
    logger.info("Final submission saved", extra={"team_id": team.id, "submission_id": submission.id})
    return submission


__all__ = [
    "NEW_MEMBER_PREFIX",
    "delete_team",
    "find_team_by_email",
    "get_team_or_404",
    "list_teams",
    "register_team",
    "replace_team_members",
    "submit_final",
    "update_team",
]
