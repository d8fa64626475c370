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


def upgrade() -> None:
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("role", sa.Enum("user", "admin", name="playerrole"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_players_id"), "players", ["id"], unique=False)
    op.create_index(op.f("ix_players_username"), "players", ["username"], unique=True)
    op.create_index(op.f("ix_players_email"), "players", ["email"], unique=True)
    op.create_index(op.f("ix_players_role"), "players", ["role"], unique=False)

    op.create_table(
        "player_auth_providers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("provider", sa.String(length=20), nullable=False),
        sa.Column("provider_user_id", sa.String(length=100), nullable=False),
        sa.Column("provider_email", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider", "provider_user_id", name="uq_auth_provider_identity"),
        sa.UniqueConstraint("player_id", "provider", name="uq_auth_provider_player"),
    )
    op.create_index(op.f("ix_player_auth_providers_id"), "player_auth_providers", ["id"], unique=False)
    op.create_index(
        op.f("ix_player_auth_providers_player_id"), "player_auth_providers", ["player_id"], unique=False
    )

    op.create_table(
        "runs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("seed", sa.String(length=32), nullable=False),
        sa.Column("root_spatial_id", sa.Integer(), nullable=True),
        sa.Column("planet_count", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("creating", "active", "paused", "completed", name="runstatus"),
            nullable=False,
        ),
        sa.Column("current_turn", sa.Integer(), nullable=False),
        sa.Column("max_players", sa.Integer(), nullable=False),
        sa.Column("turn_interval_hours", sa.Integer(), nullable=False),
        sa.Column("next_turn_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_runs_id"), "runs", ["id"], unique=False)
    op.create_index(op.f("ix_runs_status"), "runs", ["status"], unique=False)

    op.create_table(
        "spatial_entities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("run_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column(
            "entity_type",
            sa.Enum("universe", "galaxy", "sector", "system", name="entitytype"),
            nullable=False,
        ),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("x_coord", sa.Integer(), nullable=False),
        sa.Column("y_coord", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("child_count", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("level >= 0 AND level <= 3", name="ck_spatial_entities_level"),
        sa.CheckConstraint(
            "(level = 0 AND parent_id IS NULL) OR (level > 0 AND parent_id IS NOT NULL)",
            name="ck_spatial_entities_parent_level",
        ),
        sa.ForeignKeyConstraint(["run_id"], ["runs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["spatial_entities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_spatial_entities_id"), "spatial_entities", ["id"], unique=False)
    op.create_index(op.f("ix_spatial_entities_run_id"), "spatial_entities", ["run_id"], unique=False)
    op.create_index(
        op.f("ix_spatial_entities_parent_id"), "spatial_entities", ["parent_id"], unique=False
    )
    op.create_index(
        "ix_spatial_entities_parent_coords",
        "spatial_entities",
        ["parent_id", "x_coord", "y_coord"],
        unique=True,
    )

    op.create_table(
        "planets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("system_id", sa.Integer(), nullable=False),
        sa.Column("planet_index", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "type",
            sa.Enum("barren", "terrestrial", "gas_giant", "ice", "volcanic", name="planettype"),
            nullable=False,
        ),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("population", sa.BigInteger(), nullable=False),
        sa.Column("max_population", sa.BigInteger(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["system_id"], ["spatial_entities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_id"], ["players.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("system_id", "planet_index", name="uq_planets_system_index"),
    )
    op.create_index(op.f("ix_planets_id"), "planets", ["id"], unique=False)
    op.create_index(op.f("ix_planets_system_id"), "planets", ["system_id"], unique=False)
    op.create_index(op.f("ix_planets_owner_id"), "planets", ["owner_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_planets_owner_id"), table_name="planets")
    op.drop_index(op.f("ix_planets_system_id"), table_name="planets")
    op.drop_index(op.f("ix_planets_id"), table_name="planets")
    op.drop_table("planets")

    op.drop_index("ix_spatial_entities_parent_coords", table_name="spatial_entities")
    op.drop_index(op.f("ix_spatial_entities_parent_id"), table_name="spatial_entities")
    op.drop_index(op.f("ix_spatial_entities_run_id"), table_name="spatial_entities")
    op.drop_index(op.f("ix_spatial_entities_id"), table_name="spatial_entities")
    op.drop_table("spatial_entities")

    op.drop_index(op.f("ix_runs_status"), table_name="runs")
    op.drop_index(op.f("ix_runs_id"), table_name="runs")
    op.drop_table("runs")

    op.drop_index(op.f("ix_player_auth_providers_player_id"), table_name="player_auth_providers")
    op.drop_index(op.f("ix_player_auth_providers_id"), table_name="player_auth_providers")
    op.drop_table("player_auth_providers")

    op.drop_index(op.f("ix_players_role"), table_name="players")
    op.drop_index(op.f("ix_players_email"), table_name="players")
    op.drop_index(op.f("ix_players_username"), table_name="players")
    op.drop_index(op.f("ix_players_id"), table_name="players")
    op.drop_table("players")

    op.execute("DROP TYPE IF EXISTS planettype")
    op.execute("DROP TYPE IF EXISTS entitytype")
    op.execute("DROP TYPE IF EXISTS runstatus")
    op.execute("DROP TYPE IF EXISTS playerrole")
