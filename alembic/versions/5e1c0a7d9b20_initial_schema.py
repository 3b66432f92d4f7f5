"""Initial schema: users, name observations, games, rounds, interactions

Revision ID: 5e1c0a7d9b20
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5e1c0a7d9b20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_table(
        "user_name_observations",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "user_id", sa.String(32),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("observed_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "name", "observed_at", name="uq_name_obs_user_name_time"),
    )
    op.create_index("ix_name_obs_user_time", "user_name_observations", ["user_id", "observed_at"])
    op.create_index("ix_name_obs_name_time", "user_name_observations", ["name", "observed_at"])

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), autoincrement=False, primary_key=True),
        sa.Column("discord_channel_id", sa.String(32), nullable=False),
        sa.Column("era", sa.String(100), nullable=False),
        sa.Column("host_user_name", sa.String(100), nullable=True),
        sa.Column("host_user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("countdown_start_time", sa.DateTime(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("cancelled", sa.Boolean(), nullable=False),
        sa.Column("xp_multiplier", sa.Float(), nullable=False),
        sa.Column("reward_coins", sa.Integer(), nullable=False),
        sa.UniqueConstraint(
            "discord_channel_id", "countdown_start_time", name="uq_games_channel_countdown"
        ),
    )
    op.create_index("ix_games_host_unresolved", "games", ["host_user_name", "host_user_id"])

    op.create_table(
        "rounds",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "game_id", sa.Integer(),
            sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("post_time", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("game_id", "round_number", name="uq_rounds_game_number"),
    )

    op.create_table(
        "interaction_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("event", sa.String(100), nullable=False),
        sa.UniqueConstraint("text", "event", name="uq_interaction_messages_text_event"),
    )
    op.create_table(
        "interaction_user_mentions",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("killed", sa.Boolean(), nullable=False),
        sa.Column("suffix", sa.String(200), nullable=False),
    )
    op.create_index(
        "ix_mentions_name_unresolved", "interaction_user_mentions", ["user_name", "user_id"]
    )
    op.create_table(
        "items",
        sa.Column("name", sa.String(200), primary_key=True),
    )

    op.create_table(
        "interactions",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "round_id", sa.Integer(),
            sa.ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "message_id", sa.Integer(),
            sa.ForeignKey("interaction_messages.id"), nullable=False,
        ),
        sa.UniqueConstraint("round_id", "position", name="uq_interactions_round_position"),
    )
    op.create_table(
        "interaction_user_mention_mappings",
        sa.Column(
            "interaction_id", sa.Integer(),
            sa.ForeignKey("interactions.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "interaction_user_mention_id", sa.Integer(),
            sa.ForeignKey("interaction_user_mentions.id", ondelete="CASCADE"), primary_key=True,
        ),
    )
    op.create_table(
        "interaction_item_mappings",
        sa.Column(
            "interaction_id", sa.Integer(),
            sa.ForeignKey("interactions.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("item_name", sa.String(200), sa.ForeignKey("items.name"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("interaction_item_mappings")
    op.drop_table("interaction_user_mention_mappings")
    op.drop_table("interactions")
    op.drop_table("items")
    op.drop_index("ix_mentions_name_unresolved", table_name="interaction_user_mentions")
    op.drop_table("interaction_user_mentions")
    op.drop_table("interaction_messages")
    op.drop_table("rounds")
    op.drop_index("ix_games_host_unresolved", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_name_obs_name_time", table_name="user_name_observations")
    op.drop_index("ix_name_obs_user_time", table_name="user_name_observations")
    op.drop_table("user_name_observations")
    op.drop_table("users")
