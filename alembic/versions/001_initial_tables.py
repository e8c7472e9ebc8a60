"""001_initial_tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates all initial tables for CarbonMeter:
  - users
  - user_sessions
  - activities
  - community_posts
  - post_likes
  - post_comments
  - challenges
  - challenge_participants
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("now()"),
    )


def upgrade() -> None:
    # ── Enums ─────────────────────────────────────────────────────────────────
    activity_type_enum = postgresql.ENUM(
        "transport", "energy", "food", "shopping",
        name="activity_type_enum", create_type=False
    )
    activity_type_enum.create(op.get_bind(), checkfirst=True)

    post_type_enum = postgresql.ENUM(
        "achievement", "tip", "question", "challenge",
        name="post_type_enum", create_type=False
    )
    post_type_enum.create(op.get_bind(), checkfirst=True)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "monthly_target",
            sa.Numeric(10, 2),
            nullable=False,
            server_default="4.5",
        ),
        sa.Column("goals", postgresql.JSONB(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("last_login", nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # ── user_sessions ─────────────────────────────────────────────────────────
    op.create_table(
        "user_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_user_sessions_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_sessions"),
        sa.UniqueConstraint("token_hash", name="uq_user_sessions_token_hash"),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    op.create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"])

    # ── activities ────────────────────────────────────────────────────────────
    op.create_table(
        "activities",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", activity_type_enum, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("impact", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit", sa.String(50), nullable=False, server_default="kg CO₂"),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("details", postgresql.JSONB(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("impact >= 0", name="ck_activities_impact_non_negative"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_activities_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_activities"),
    )
    op.create_index("ix_activities_user_id_date", "activities", ["user_id", "date"])
    op.create_index(
        "ix_activities_user_id_created_at", "activities", ["user_id", "created_at"]
    )
    op.create_index("ix_activities_user_id_type", "activities", ["user_id", "type"])

    # ── community_posts ───────────────────────────────────────────────────────
    op.create_table(
        "community_posts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", post_type_enum, nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        sa.CheckConstraint("likes >= 0", name="ck_community_posts_likes_non_negative"),
        sa.CheckConstraint(
            "comments_count >= 0",
            name="ck_community_posts_comments_count_non_negative",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_community_posts_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_community_posts"),
    )
    op.create_index("ix_community_posts_created_at", "community_posts", ["created_at"])
    op.create_index("ix_community_posts_type", "community_posts", ["type"])

    # ── post_likes ────────────────────────────────────────────────────────────
    op.create_table(
        "post_likes",
        sa.Column("post_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["post_id"], ["community_posts.id"],
            name="fk_post_likes_post_id_community_posts",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_post_likes_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("post_id", "user_id", name="pk_post_likes"),
    )

    # ── post_comments ─────────────────────────────────────────────────────────
    op.create_table(
        "post_comments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("post_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["post_id"], ["community_posts.id"],
            name="fk_post_comments_post_id_community_posts",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_post_comments_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_post_comments"),
    )
    op.create_index("ix_post_comments_post_id", "post_comments", ["post_id"])
    op.create_index("ix_post_comments_user_id", "post_comments", ["user_id"])

    # ── challenges ────────────────────────────────────────────────────────────
    op.create_table(
        "challenges",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_reduction", sa.Numeric(10, 2), nullable=False),
        sa.Column("category", activity_type_enum, nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"],
            name="fk_challenges_created_by_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_challenges"),
    )
    op.create_index("ix_challenges_window", "challenges", ["start_date", "end_date"])

    # ── challenge_participants ────────────────────────────────────────────────
    op.create_table(
        "challenge_participants",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("progress", sa.Numeric(10, 2), nullable=False, server_default="0"),
        _timestamp("joined_at"),
        sa.ForeignKeyConstraint(
            ["challenge_id"], ["challenges.id"],
            name="fk_challenge_participants_challenge_id_challenges",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_challenge_participants_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "challenge_id", "user_id", name="pk_challenge_participants"
        ),
    )
    op.create_index(
        "ix_challenge_participants_user_id", "challenge_participants", ["user_id"]
    )


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table("challenge_participants")
    op.drop_table("challenges")
    op.drop_table("post_comments")
    op.drop_table("post_likes")
    op.drop_table("community_posts")
    op.drop_table("activities")
    op.drop_table("user_sessions")
    op.drop_table("users")

    # Drop enums
    for enum_name in ["post_type_enum", "activity_type_enum"]:
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
