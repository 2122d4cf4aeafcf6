"""users, picks, custom bets and participants

Revision ID: 0001_foundation
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_foundation"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False, unique=True),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("wins >= 0", name="ck_users_wins_non_negative"),
        sa.CheckConstraint("losses >= 0", name="ck_users_losses_non_negative"),
    )
    op.create_index("ix_users_username", "users", ["username"])

    op.create_table(
        "picks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("projection_id", sa.String(length=255), nullable=False),
        sa.Column("pick_type", sa.String(length=10), nullable=False),
        sa.Column("player_name", sa.String(length=255), nullable=False),
        sa.Column("player_image_url", sa.Text(), nullable=True),
        sa.Column("stat_type", sa.String(length=100), nullable=False),
        sa.Column("line_score", sa.Float(), nullable=False),
        sa.Column("outcome", sa.String(length=10), nullable=True),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("user_id", "projection_id", name="uq_pick_user_projection"),
        sa.CheckConstraint("pick_type IN ('OVER', 'UNDER')", name="ck_picks_pick_type"),
        sa.CheckConstraint("outcome IS NULL OR outcome IN ('WIN', 'LOSS')", name="ck_picks_outcome"),
        sa.CheckConstraint(
            "(is_resolved AND outcome IS NOT NULL) OR (NOT is_resolved AND outcome IS NULL)",
            name="ck_picks_resolved_outcome",
        ),
    )
    op.create_index("ix_picks_user_id", "picks", ["user_id"])
    op.create_index("ix_picks_projection_id", "picks", ["projection_id"])
    op.create_index("ix_picks_is_resolved", "picks", ["is_resolved"])
    op.create_index("ix_picks_created_at", "picks", ["created_at"])

    op.create_table(
        "custom_bets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("creator_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("player", sa.String(length=255), nullable=False),
        sa.Column("stat", sa.String(length=100), nullable=False),
        sa.Column("line", sa.Float(), nullable=False),
        sa.Column("creator_pick_type", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("outcome", sa.String(length=10), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("creator_pick_type IN ('OVER', 'UNDER')", name="ck_custom_bets_creator_pick_type"),
        sa.CheckConstraint("status IN ('PENDING', 'ACCEPTED', 'DECLINED', 'COMPLETED')", name="ck_custom_bets_status"),
        sa.CheckConstraint("outcome IS NULL OR outcome IN ('WIN', 'LOSS', 'TBD')", name="ck_custom_bets_outcome"),
        sa.CheckConstraint(
            "(status IN ('PENDING', 'DECLINED') AND outcome IS NULL)"
            " OR (status = 'ACCEPTED' AND (outcome IS NULL OR outcome = 'TBD'))"
            " OR (status = 'COMPLETED' AND outcome IN ('WIN', 'LOSS'))",
            name="ck_custom_bets_outcome_matches_status",
        ),
    )
    op.create_index("ix_custom_bets_creator_id", "custom_bets", ["creator_id"])
    op.create_index("ix_custom_bets_status", "custom_bets", ["status"])
    op.create_index("ix_custom_bets_created_at", "custom_bets", ["created_at"])

    op.create_table(
        "custom_bet_participants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("bet_id", sa.Uuid(), sa.ForeignKey("custom_bets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("pick_type", sa.String(length=10), nullable=False),
        sa.Column("outcome", sa.String(length=10), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("bet_id", "user_id", name="uq_custom_bet_participant"),
        sa.CheckConstraint("pick_type IN ('OVER', 'UNDER')", name="ck_custom_bet_participants_pick_type"),
        sa.CheckConstraint("outcome IS NULL OR outcome IN ('WIN', 'LOSS', 'TBD')", name="ck_custom_bet_participants_outcome"),
    )
    op.create_index("ix_custom_bet_participants_bet_id", "custom_bet_participants", ["bet_id"])
    op.create_index("ix_custom_bet_participants_user_id", "custom_bet_participants", ["user_id"])


def downgrade() -> None:
    op.drop_table("custom_bet_participants")
    op.drop_table("custom_bets")
    op.drop_table("picks")
    op.drop_table("users")
