"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for VinStack Code:
profiles, folders, teams, team_members, snippets, snippet_versions,
snippet_collaborators, snippet_comments, snippet_likes, snippet_views,
notifications, activities, subscriptions, players, quest_completions.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(150), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("preferred_languages", sa.JSON, nullable=False),
        sa.Column("subscription_tier", sa.String(10), nullable=False, server_default="free"),
        *_timestamps(),
    )

    # --- folders ---
    op.create_table(
        "folders",
        sa.Column("folder_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("folders.folder_id"), nullable=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- teams ---
    op.create_table(
        "teams",
        sa.Column("team_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "team_members",
        sa.Column("team_id", sa.String(36), sa.ForeignKey("teams.team_id"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), primary_key=True),
        sa.Column("role", sa.String(10), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- snippets ---
    op.create_table(
        "snippets",
        sa.Column("snippet_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("language", sa.String(50), nullable=False),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("visibility", sa.String(10), nullable=False, server_default="private"),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("folder_id", sa.String(36), sa.ForeignKey("folders.folder_id"), nullable=True),
        sa.Column("team_id", sa.String(36), sa.ForeignKey("teams.team_id"), nullable=True),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("custom_fields", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_snippets_owner_id", "snippets", ["owner_id"])

    op.create_table(
        "snippet_versions",
        sa.Column("version_id", sa.String(36), primary_key=True),
        sa.Column("snippet_id", sa.String(36), sa.ForeignKey("snippets.snippet_id"), nullable=False),
        sa.Column("version_number", sa.Integer, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("change_message", sa.String(500), nullable=True),
        sa.Column("author_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("snippet_id", "version_number", name="uq_snippet_version"),
    )

    op.create_table(
        "snippet_collaborators",
        sa.Column("collaborator_id", sa.String(36), primary_key=True),
        sa.Column("snippet_id", sa.String(36), sa.ForeignKey("snippets.snippet_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="viewer"),
        sa.Column("invited_by", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("snippet_id", "user_id", name="uq_snippet_collaborator"),
    )

    op.create_table(
        "snippet_comments",
        sa.Column("comment_id", sa.String(36), primary_key=True),
        sa.Column("snippet_id", sa.String(36), sa.ForeignKey("snippets.snippet_id"), nullable=False),
        sa.Column("author_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("snippet_comments.comment_id"), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("line_number", sa.Integer, nullable=True),
        sa.Column("is_resolved", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("resolved_by", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "snippet_likes",
        sa.Column("like_id", sa.String(36), primary_key=True),
        sa.Column("snippet_id", sa.String(36), sa.ForeignKey("snippets.snippet_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("snippet_id", "user_id", name="uq_snippet_like"),
    )
    op.create_table(
        "snippet_views",
        sa.Column("view_id", sa.String(36), primary_key=True),
        sa.Column("snippet_id", sa.String(36), sa.ForeignKey("snippets.snippet_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- notifications / activities ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "activities",
        sa.Column("activity_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("entity_type", sa.String(20), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activities_user_id", "activities", ["user_id"])

    # --- billing ---
    op.create_table(
        "subscriptions",
        sa.Column("subscription_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False),
        sa.Column("plan", sa.String(10), nullable=False, server_default="free"),
        sa.Column("status", sa.String(20), nullable=False, server_default="incomplete"),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("checkout_session_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])

    # --- game ---
    op.create_table(
        "players",
        sa.Column("player_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.user_id"), nullable=False, unique=True),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("experience", sa.Integer, nullable=False, server_default="0"),
        sa.Column("code_coins", sa.Integer, nullable=False, server_default="100"),
        sa.Column("quests_completed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_xp", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "quest_completions",
        sa.Column("completion_id", sa.String(36), primary_key=True),
        sa.Column("player_id", sa.String(36), sa.ForeignKey("players.player_id"), nullable=False),
        sa.Column("quest_id", sa.String(64), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("xp_gained", sa.Integer, nullable=False),
        sa.Column("coins_gained", sa.Integer, nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("player_id", "quest_id", name="uq_quest_completion"),
    )


def downgrade() -> None:
    op.drop_table("quest_completions")
    op.drop_table("players")
    op.drop_index("ix_subscriptions_user_id", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_index("ix_activities_user_id", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("snippet_views")
    op.drop_table("snippet_likes")
    op.drop_table("snippet_comments")
    op.drop_table("snippet_collaborators")
    op.drop_table("snippet_versions")
    op.drop_index("ix_snippets_owner_id", table_name="snippets")
    op.drop_table("snippets")
    op.drop_table("team_members")
    op.drop_table("teams")
    op.drop_table("folders")
    op.drop_table("profiles")
