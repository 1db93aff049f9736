"""Initial schema: users, preferences, content cache, snapshots, feedback.

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_baseline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    # ==========================================================================
    # USERS & PREFERENCES
    # ==========================================================================

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("crypto_assets", sa.JSON(), nullable=False),
        sa.Column("investor_type", sa.String(32)),
        sa.Column("market_news", sa.Boolean()),
        sa.Column("charts", sa.Boolean()),
        sa.Column("social", sa.Boolean()),
        sa.Column("fun", sa.Boolean()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_user_preferences"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_user_preferences_user_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", name="uq_user_preferences_user_id"),
    )

    # ==========================================================================
    # CONTENT CACHE
    # ==========================================================================

    op.create_table(
        "content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("asset", sa.String(128), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("content_day", sa.Date(), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_content"),
        sa.CheckConstraint(
            "kind IN ('PRICE', 'NEWS', 'MEME', 'AI_INSIGHT')", name="ck_content_kind"
        ),
        sa.UniqueConstraint("kind", "asset", "content_day", name="uq_content_kind_asset_day"),
    )
    op.create_index("idx_content_kind_fetched", "content", ["kind", "fetched_at"])

    # ==========================================================================
    # DASHBOARD
    # ==========================================================================

    op.create_table(
        "dashboard_snapshots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("market_news_json", sa.Text()),
        sa.Column("coin_prices_json", sa.Text()),
        sa.Column("meme_json", sa.Text()),
        sa.Column("ai_insight_json", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_dashboard_snapshots"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_dashboard_snapshots_user_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "snapshot_date", name="uq_dashboard_snapshot_user_day"),
    )

    op.create_table(
        "dashboard_feedback",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("snapshot_id", sa.Integer(), nullable=False),
        sa.Column("content_id", sa.Integer()),
        sa.Column("section", sa.String(32), nullable=False),
        sa.Column("vote", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_dashboard_feedback"),
        sa.ForeignKeyConstraint(
            ["snapshot_id"], ["dashboard_snapshots.id"],
            name="fk_dashboard_feedback_snapshot_id_dashboard_snapshots",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["content_id"], ["content.id"],
            name="fk_dashboard_feedback_content_id_content",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint("vote IN (-1, 0, 1)", name="ck_dashboard_feedback_vote"),
        sa.CheckConstraint(
            "section IN ('NEWS', 'PRICES', 'MEME', 'AI_INSIGHT')",
            name="ck_dashboard_feedback_section",
        ),
    )
    op.create_index(
        "idx_dashboard_feedback_latest",
        "dashboard_feedback",
        ["snapshot_id", "section", "created_at", "id"],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_dashboard_feedback_latest", table_name="dashboard_feedback")
    op.drop_table("dashboard_feedback")
    op.drop_table("dashboard_snapshots")
    op.drop_index("idx_content_kind_fetched", table_name="content")
    op.drop_table("content")
    op.drop_table("user_preferences")
    op.drop_table("users")
