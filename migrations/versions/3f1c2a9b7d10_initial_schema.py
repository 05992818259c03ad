"""initial schema

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c2a9b7d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("api_token", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_api_token"), ["api_token"], unique=True)
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=True)
        batch_op.create_index(batch_op.f("ix_users_username"), ["username"], unique=True)

    op.create_table(
        "competitions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("organiser_id", sa.Integer(), nullable=False),
        sa.Column("lives_per_player", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("lives_per_player >= 1", name="positive_lives_per_player"),
        sa.ForeignKeyConstraint(["organiser_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("competitions", schema=None) as batch_op:
        batch_op.create_index("idx_competition_organiser", ["organiser_id"], unique=False)

    op.create_table(
        "competition_players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("lives_remaining", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=True),
        sa.Column("eliminated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("lives_remaining >= 0", name="non_negative_lives"),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "user_id", name="unique_competition_user"),
    )
    with op.batch_alter_table("competition_players", schema=None) as batch_op:
        batch_op.create_index(
            "idx_competition_players_status", ["competition_id", "status"], unique=False
        )

    op.create_table(
        "rounds",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("lock_time", sa.DateTime(), nullable=True),
        sa.Column("no_pick_processed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("competition_id", "round_number", name="unique_competition_round"),
    )

    op.create_table(
        "fixtures",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("round_id", sa.Integer(), nullable=False),
        sa.Column("home_team", sa.String(length=100), nullable=False),
        sa.Column("away_team", sa.String(length=100), nullable=False),
        sa.Column("home_team_short", sa.String(length=20), nullable=False),
        sa.Column("away_team_short", sa.String(length=20), nullable=False),
        sa.Column("kickoff_time", sa.DateTime(), nullable=True),
        sa.Column("result", sa.String(length=100), nullable=True),
        sa.Column("processed", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("home_team_short != away_team_short", name="different_teams"),
        sa.ForeignKeyConstraint(["round_id"], ["rounds.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("fixtures", schema=None) as batch_op:
        batch_op.create_index("idx_fixture_round", ["round_id"], unique=False)
        batch_op.create_index(
            "idx_fixture_round_processed", ["round_id", "processed"], unique=False
        )

    op.create_table(
        "picks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("round_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("fixture_id", sa.Integer(), nullable=True),
        sa.Column("team", sa.String(length=100), nullable=True),
        sa.Column("outcome", sa.String(length=10), nullable=True),
        sa.Column("set_by_admin", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["fixture_id"], ["fixtures.id"]),
        sa.ForeignKeyConstraint(["round_id"], ["rounds.id"]),
        sa.ForeignKeyConstraint(["set_by_admin"], ["users.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("round_id", "user_id", name="unique_round_user_pick"),
    )
    with op.batch_alter_table("picks", schema=None) as batch_op:
        batch_op.create_index(
            "idx_pick_fixture_outcome", ["fixture_id", "outcome"], unique=False
        )
        batch_op.create_index("idx_pick_round", ["round_id"], unique=False)

    op.create_table(
        "player_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=False),
        sa.Column("round_id", sa.Integer(), nullable=False),
        sa.Column("fixture_id", sa.Integer(), nullable=True),
        sa.Column("chosen_team", sa.String(length=100), nullable=True),
        sa.Column("outcome", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["fixture_id"], ["fixtures.id"]),
        sa.ForeignKeyConstraint(["player_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["round_id"], ["rounds.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "round_id", name="unique_player_round_progress"),
    )
    with op.batch_alter_table("player_progress", schema=None) as batch_op:
        batch_op.create_index("idx_progress_competition", ["competition_id"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("competition_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("audit_log", schema=None) as batch_op:
        batch_op.create_index("idx_audit_action", ["action"], unique=False)
        batch_op.create_index("idx_audit_competition", ["competition_id"], unique=False)
        batch_op.create_index("idx_audit_created", ["created_at"], unique=False)


def downgrade():
    with op.batch_alter_table("audit_log", schema=None) as batch_op:
        batch_op.drop_index("idx_audit_created")
        batch_op.drop_index("idx_audit_competition")
        batch_op.drop_index("idx_audit_action")
    op.drop_table("audit_log")

    with op.batch_alter_table("player_progress", schema=None) as batch_op:
        batch_op.drop_index("idx_progress_competition")
    op.drop_table("player_progress")

    with op.batch_alter_table("picks", schema=None) as batch_op:
        batch_op.drop_index("idx_pick_round")
        batch_op.drop_index("idx_pick_fixture_outcome")
    op.drop_table("picks")

    with op.batch_alter_table("fixtures", schema=None) as batch_op:
        batch_op.drop_index("idx_fixture_round_processed")
        batch_op.drop_index("idx_fixture_round")
    op.drop_table("fixtures")

    op.drop_table("rounds")

    with op.batch_alter_table("competition_players", schema=None) as batch_op:
        batch_op.drop_index("idx_competition_players_status")
    op.drop_table("competition_players")

    with op.batch_alter_table("competitions", schema=None) as batch_op:
        batch_op.drop_index("idx_competition_organiser")
    op.drop_table("competitions")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_username"))
        batch_op.drop_index(batch_op.f("ix_users_email"))
        batch_op.drop_index(batch_op.f("ix_users_api_token"))
    op.drop_table("users")
