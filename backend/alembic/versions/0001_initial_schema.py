"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for group-assignment redemption:
organizations, users, groupings, groups, group_assignments,
group_assignment_invitations, group_assignment_repos, repo_accesses.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- organizations ---
    op.create_table(
        "organizations",
        sa.Column("organization_id", sa.String(36), primary_key=True),
        sa.Column("github_id", sa.Integer, nullable=False, unique=True),
        sa.Column("login", sa.String(100), nullable=False),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("github_token", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("login", sa.String(100), nullable=False, unique=True),
        sa.Column("github_uid", sa.Integer, nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- groupings ---
    op.create_table(
        "groupings",
        sa.Column("grouping_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column(
            "organization_id", sa.String(36), sa.ForeignKey("organizations.organization_id"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- groups ---
    op.create_table(
        "groups",
        sa.Column("group_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("grouping_id", sa.String(36), sa.ForeignKey("groupings.grouping_id"), nullable=False),
        sa.Column("github_team_id", sa.BigInteger, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("grouping_id", "title", name="uq_groups_grouping_title"),
    )

    # --- group_assignments ---
    op.create_table(
        "group_assignments",
        sa.Column("group_assignment_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("slug", sa.String(150), nullable=False),
        sa.Column(
            "organization_id", sa.String(36), sa.ForeignKey("organizations.organization_id"), nullable=False
        ),
        sa.Column("grouping_id", sa.String(36), sa.ForeignKey("groupings.grouping_id"), nullable=False),
        sa.Column("max_members", sa.Integer, nullable=True),
        sa.Column("public_repo", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- group_assignment_invitations ---
    op.create_table(
        "group_assignment_invitations",
        sa.Column("invitation_id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(64), nullable=False, unique=True),
        sa.Column(
            "group_assignment_id",
            sa.String(36),
            sa.ForeignKey("group_assignments.group_assignment_id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- group_assignment_repos ---
    op.create_table(
        "group_assignment_repos",
        sa.Column("repo_id", sa.String(36), primary_key=True),
        sa.Column(
            "group_assignment_id",
            sa.String(36),
            sa.ForeignKey("group_assignments.group_assignment_id"),
            nullable=False,
        ),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id"), nullable=False),
        sa.Column("github_team_id", sa.BigInteger, nullable=False),
        sa.Column("github_repo_id", sa.BigInteger, nullable=False),
        sa.Column("github_repo_name", sa.String(255), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("retired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    # at most one active record per (group, assignment)
    op.create_index(
        "uq_group_assignment_repos_active",
        "group_assignment_repos",
        ["group_id", "group_assignment_id"],
        unique=True,
        postgresql_where=sa.text("active"),
        sqlite_where=sa.text("active"),
    )

    # --- repo_accesses ---
    op.create_table(
        "repo_accesses",
        sa.Column("repo_access_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column(
            "organization_id", sa.String(36), sa.ForeignKey("organizations.organization_id"), nullable=False
        ),
        sa.Column("group_id", sa.String(36), sa.ForeignKey("groups.group_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "group_id", name="uq_repo_accesses_user_group"),
    )


def downgrade() -> None:
    op.drop_table("repo_accesses")
    op.drop_index("uq_group_assignment_repos_active", table_name="group_assignment_repos")
    op.drop_table("group_assignment_repos")
    op.drop_table("group_assignment_invitations")
    op.drop_table("group_assignments")
    op.drop_table("groups")
    op.drop_table("groupings")
    op.drop_table("users")
    op.drop_table("organizations")
