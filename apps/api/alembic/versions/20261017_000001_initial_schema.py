"""create initial schema

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17 00:00:01.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261017_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(length=25), nullable=False),
        sa.Column("display_name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("avatar_path", sa.String(), nullable=True),
        sa.Column("private_profile", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("prevent_index", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("privacy_hide_days", sa.Integer(), nullable=True),
        sa.Column("default_status_visibility", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mastodon_visibility", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "social_profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("twitter_id", sa.String(), nullable=True),
        sa.Column("twitter_token_encrypted", sa.Text(), nullable=True),
        sa.Column("twitter_refresh_token_encrypted", sa.Text(), nullable=True),
        sa.Column("twitter_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_social_profiles_user_id"), "social_profiles", ["user_id"], unique=True)
    op.create_index(op.f("ix_social_profiles_twitter_id"), "social_profiles", ["twitter_id"], unique=False)

    op.create_table(
        "statuses",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("visibility", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("business", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("line_name", sa.String(), nullable=False),
        sa.Column("origin_name", sa.String(), nullable=False),
        sa.Column("destination_name", sa.String(), nullable=False),
        sa.Column("departure_planned", sa.DateTime(timezone=True), nullable=False),
        sa.Column("departure_real", sa.DateTime(timezone=True), nullable=True),
        sa.Column("arrival_planned", sa.DateTime(timezone=True), nullable=False),
        sa.Column("arrival_real", sa.DateTime(timezone=True), nullable=True),
        sa.Column("distance_meters", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tweet_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_statuses_user_id"), "statuses", ["user_id"], unique=False)
    op.create_index(op.f("ix_statuses_departure_planned"), "statuses", ["departure_planned"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("payload_json", sa.JSON(), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"], unique=False)
    op.create_index(op.f("ix_notifications_created_at"), "notifications", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_notifications_created_at"), table_name="notifications")
    op.drop_index(op.f("ix_notifications_user_id"), table_name="notifications")
    op.drop_table("notifications")
    op.drop_index(op.f("ix_statuses_departure_planned"), table_name="statuses")
    op.drop_index(op.f("ix_statuses_user_id"), table_name="statuses")
    op.drop_table("statuses")
    op.drop_index(op.f("ix_social_profiles_twitter_id"), table_name="social_profiles")
    op.drop_index(op.f("ix_social_profiles_user_id"), table_name="social_profiles")
    op.drop_table("social_profiles")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")
