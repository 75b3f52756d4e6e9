"""initial raffle schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-06-14 10:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "raffle_entries",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("entry_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("has_won", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_raffle_entries")),
        sa.UniqueConstraint("first_name", "last_name", name="uq_raffle_entries_name"),
    )
    op.create_table(
        "prizes",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_available", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prizes")),
    )
    op.create_table(
        "winners",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("entry_id", ID_TYPE, nullable=False),
        sa.Column("prize_id", ID_TYPE, nullable=True),
        sa.Column("drawn_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_no_show", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "claimed_at IS NULL OR prize_id IS NOT NULL",
            name=op.f("ck_winners_claim_requires_prize"),
        ),
        sa.CheckConstraint(
            "NOT (is_no_show AND claimed_at IS NOT NULL)",
            name=op.f("ck_winners_no_show_or_claimed"),
        ),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["raffle_entries.id"],
            name=op.f("fk_winners_entry_id_raffle_entries"),
        ),
        sa.ForeignKeyConstraint(
            ["prize_id"],
            ["prizes.id"],
            name=op.f("fk_winners_prize_id_prizes"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_winners")),
    )
    op.create_index(op.f("ix_winners_entry_id"), "winners", ["entry_id"])
    op.create_index(op.f("ix_winners_prize_id"), "winners", ["prize_id"])
    op.create_index("ix_winners_is_no_show", "winners", ["is_no_show"])

    op.create_table(
        "admins",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admins")),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)
    op.create_index(op.f("ix_admins_id"), "admins", ["id"])

    op.create_table(
        "admin_sessions",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("admin_id", ID_TYPE, nullable=False),
        sa.Column("token_digest", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["admin_id"],
            ["admins.id"],
            name=op.f("fk_admin_sessions_admin_id_admins"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admin_sessions")),
        sa.UniqueConstraint("token_digest", name=op.f("uq_admin_sessions_token_digest")),
    )
    op.create_index(op.f("ix_admin_sessions_admin_id"), "admin_sessions", ["admin_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_admin_sessions_admin_id"), table_name="admin_sessions")
    op.drop_table("admin_sessions")
    op.drop_index(op.f("ix_admins_id"), table_name="admins")
    op.drop_index(op.f("ix_admins_email"), table_name="admins")
    op.drop_table("admins")
    op.drop_index("ix_winners_is_no_show", table_name="winners")
    op.drop_index(op.f("ix_winners_prize_id"), table_name="winners")
    op.drop_index(op.f("ix_winners_entry_id"), table_name="winners")
    op.drop_table("winners")
    op.drop_table("prizes")
    op.drop_table("raffle_entries")
