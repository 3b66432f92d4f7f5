"""
chronicle.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- users                      — Discord accounts (snowflake string PK)
- user_name_observations     — Append-only display-name history per user
- games                      — One Rumble Royale session per row
- rounds                     — Narrative beats of a game
- interaction_messages       — Deduplicated narrative templates
- interaction_user_mentions  — A user referenced inside one narrative
- items                      — Game items, deduplicated by name
- interactions               — One narrated line (or event block) in a round

Every table carries a natural unique key so that replaying the same
archives twice converges to the same rows.

All timestamps are naive UTC; the export decoder normalizes offsets.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Chronicle ORM models."""


# ---------------------------------------------------------------------------
# Users — one row per Discord account ever referenced
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    name_observations: Mapped[list[UserNameObservation]] = relationship(
        back_populates="user",
        order_by="[UserNameObservation.observed_at, UserNameObservation.id]",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id}>"


class UserNameObservation(Base):
    """A display name seen attached to a user at a point in time.

    The chronologically last row for a user is that user's current name.
    """
    __tablename__ = "user_name_observations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    observed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped[User] = relationship(back_populates="name_observations")

    __table_args__ = (
        UniqueConstraint("user_id", "name", "observed_at", name="uq_name_obs_user_name_time"),
        Index("ix_name_obs_user_time", "user_id", "observed_at"),
        Index("ix_name_obs_name_time", "name", "observed_at"),
    )

    def __repr__(self) -> str:
        return f"<UserNameObservation user={self.user_id} name={self.name!r} at={self.observed_at}>"


# ---------------------------------------------------------------------------
# Games — one row per session (countdown → running → ended | cancelled)
# ---------------------------------------------------------------------------
class Game(Base):
    __tablename__ = "games"

    # Allocated by the importer from max(id) + 1, never by the database
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    discord_channel_id: Mapped[str] = mapped_column(String(32), nullable=False)
    era: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    host_user_name: Mapped[str | None] = mapped_column(String(100), default=None)
    host_user_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("users.id"), default=None
    )
    countdown_start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    start_time: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    xp_multiplier: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    reward_coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    host_user: Mapped[User | None] = relationship()
    rounds: Mapped[list[Round]] = relationship(
        back_populates="game", cascade="all, delete-orphan", order_by="Round.round_number"
    )

    __table_args__ = (
        UniqueConstraint(
            "discord_channel_id", "countdown_start_time", name="uq_games_channel_countdown"
        ),
        Index("ix_games_host_unresolved", "host_user_name", "host_user_id"),
    )

    def __repr__(self) -> str:
        return f"<Game id={self.id} era={self.era!r} host={self.host_user_name!r}>"


class Round(Base):
    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False
    )
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    post_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    game: Mapped[Game] = relationship(back_populates="rounds")
    interactions: Mapped[list[Interaction]] = relationship(
        back_populates="round", cascade="all, delete-orphan", order_by="Interaction.position"
    )

    __table_args__ = (
        UniqueConstraint("game_id", "round_number", name="uq_rounds_game_number"),
    )

    def __repr__(self) -> str:
        return f"<Round game={self.game_id} number={self.round_number}>"


# ---------------------------------------------------------------------------
# Interaction building blocks
# ---------------------------------------------------------------------------
class InteractionMessage(Base):
    """Narrative template with ``{{users[i]}}`` / ``{{item}}`` placeholders."""
    __tablename__ = "interaction_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    event: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("text", "event", name="uq_interaction_messages_text_event"),
    )

    def __repr__(self) -> str:
        return f"<InteractionMessage id={self.id} event={self.event!r}>"


class InteractionUserMention(Base):
    """A user named in a narrative; ``user_id`` stays NULL until the name resolves."""
    __tablename__ = "interaction_user_mentions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("users.id"), default=None
    )
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    killed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    suffix: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    user: Mapped[User | None] = relationship()

    __table_args__ = (
        Index("ix_mentions_name_unresolved", "user_name", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<InteractionUserMention name={self.user_name!r} killed={self.killed}>"


class Item(Base):
    __tablename__ = "items"

    name: Mapped[str] = mapped_column(String(200), primary_key=True)

    def __repr__(self) -> str:
        return f"<Item {self.name!r}>"


interaction_user_mention_mappings = Table(
    "interaction_user_mention_mappings",
    Base.metadata,
    Column("interaction_id", ForeignKey("interactions.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "interaction_user_mention_id",
        ForeignKey("interaction_user_mentions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

interaction_item_mappings = Table(
    "interaction_item_mappings",
    Base.metadata,
    Column("interaction_id", ForeignKey("interactions.id", ondelete="CASCADE"), primary_key=True),
    Column("item_name", ForeignKey("items.name"), primary_key=True),
)


class Interaction(Base):
    """One narrated line (or one aggregated event block) within a round."""
    __tablename__ = "interactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("interaction_messages.id"), nullable=False
    )

    round: Mapped[Round] = relationship(back_populates="interactions")
    message: Mapped[InteractionMessage] = relationship()
    user_mentions: Mapped[list[InteractionUserMention]] = relationship(
        secondary=interaction_user_mention_mappings,
        order_by="InteractionUserMention.id",
    )
    items: Mapped[list[Item]] = relationship(secondary=interaction_item_mappings)

    __table_args__ = (
        UniqueConstraint("round_id", "position", name="uq_interactions_round_position"),
    )

    def __repr__(self) -> str:
        return f"<Interaction round={self.round_id} pos={self.position} msg={self.message_id}>"
