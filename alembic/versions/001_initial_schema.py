"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_SLOT_WHERE = sa.text("status IN ('pending', 'confirmed')")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "battle_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("twitch_username", sa.String(length=100), nullable=False),
        sa.Column("game", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("requested_date", sa.Date(), nullable=False),
        sa.Column("requested_time", sa.String(length=16), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "rejected", name="battlestatus"),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_battle_requests_id"), "battle_requests", ["id"], unique=False)
    op.create_index(
        op.f("ix_battle_requests_requested_date"), "battle_requests", ["requested_date"], unique=False
    )
    op.create_index(op.f("ix_battle_requests_token"), "battle_requests", ["token"], unique=True)
    op.create_index(
        "uq_battle_requests_active_slot",
        "battle_requests",
        ["requested_date", "requested_time"],
        unique=True,
        postgresql_where=ACTIVE_SLOT_WHERE,
        sqlite_where=ACTIVE_SLOT_WHERE,
    )


def downgrade() -> None:
    op.drop_index("uq_battle_requests_active_slot", table_name="battle_requests")
    op.drop_index(op.f("ix_battle_requests_token"), table_name="battle_requests")
    op.drop_index(op.f("ix_battle_requests_requested_date"), table_name="battle_requests")
    op.drop_index(op.f("ix_battle_requests_id"), table_name="battle_requests")
    op.drop_table("battle_requests")

    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS battlestatus")
