"""initial buildathon schema

Revision ID: 20260105_initial
Revises:
Create Date: 2026-01-05 10:12:41.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260105_initial"
down_revision = None
branch_labels = None
depends_on = None

MILESTONE_TYPES = (
    "REGISTRATION",
    "TESTNET",
    "KARMA_GAP",
    "MAINNET",
    "FARCASTER",
    "FINAL_SUBMISSION",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("team_name", sa.String(length=200), nullable=False),
        sa.Column("wallet_address", sa.String(length=100), nullable=False),
        sa.Column("github_repo", sa.String(length=500), nullable=True),
        sa.Column("karma_gap_link", sa.String(length=500), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_name", sa.String(length=200), nullable=False),
        sa.Column("member_email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("member_github", sa.String(length=200), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_team_members_team_id", "team_members", ["team_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("github_repo", sa.String(length=500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_projects_team_id", "projects", ["team_id"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "project_id", sa.Integer, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("milestone_type", sa.Enum(*MILESTONE_TYPES, name="milestonetype"), nullable=False),
        sa.Column("contract_address", sa.String(length=42), nullable=True),
        sa.Column("karma_gap_link", sa.String(length=500), nullable=True),
        sa.Column("farcaster_link", sa.String(length=500), nullable=True),
        sa.Column("slides_link", sa.String(length=500), nullable=True),
        sa.Column("pitch_deck_link", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "milestone_type", name="uq_milestone_project_type"),
    )
    op.create_index("ix_milestones_project_id", "milestones", ["project_id"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "team_id", sa.Integer, sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("karma_gap_link", sa.String(length=500), nullable=False),
        sa.Column("track_open_track", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("track_farcaster_miniapp", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("track_self", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("track_v0", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer, nullable=False),
        sa.Column("data_json", sa.JSON, nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("submissions")
    op.drop_index("ix_milestones_project_id", table_name="milestones")
    op.drop_table("milestones")
    sa.Enum(name="milestonetype").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_projects_team_id", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_team_members_team_id", table_name="team_members")
    op.drop_table("team_members")
    op.drop_table("teams")
