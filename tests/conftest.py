"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from chronicle.database.models import Base
from chronicle.exports.schema import ExportMessage

BOT_ID = "693167035068317736"
CHANNEL_ID = "1224009923457847428"
T0 = datetime(2024, 3, 30, 12, 0, 0)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Chronicle tables.

    Uses StaticPool so every session (and the raw connection used by the
    SQL dump) shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Export record factories
# ---------------------------------------------------------------------------
def at(minutes: float = 0) -> datetime:
    """Naive UTC timestamp *minutes* after the fixed test epoch."""
    return T0 + timedelta(minutes=minutes)


def user_json(user_id: str, name: str, *, bot: bool = False) -> dict[str, Any]:
    return {"id": user_id, "name": name, "nickname": name, "isBot": bot}


def embed_json(
    title: str = "",
    description: str = "",
    *,
    author: str | None = None,
    footer: str | None = None,
    fields: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {"title": title, "description": description}
    if author is not None:
        data["author"] = {"name": author}
    if footer is not None:
        data["footer"] = {"text": footer}
    if fields:
        data["fields"] = [{"name": n, "value": v, "isInline": False} for n, v in fields]
    return data


def message_json(
    message_id: str,
    minutes: float = 0,
    *,
    embeds: list[dict[str, Any]] | None = None,
    author: dict[str, Any] | None = None,
    content: str = "",
    interaction_user: dict[str, Any] | None = None,
    mentions: list[dict[str, Any]] | None = None,
    reactors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Raw DiscordChatExporter message; defaults to a bot post."""
    data: dict[str, Any] = {
        "id": message_id,
        "type": "Default",
        "timestamp": (T0 + timedelta(minutes=minutes)).isoformat() + "+00:00",
        "content": content,
        "author": author or user_json(BOT_ID, "Rumble Royale", bot=True),
        "mentions": mentions or [],
        "reactions": [],
        "embeds": embeds or [],
    }
    if interaction_user is not None:
        data["interaction"] = {"id": "1", "name": "balance", "user": interaction_user}
    if reactors:
        data["reactions"] = [{"emoji": {"name": "Swords"}, "count": len(reactors), "users": reactors}]
    return data


def make_message(message_id: str, minutes: float = 0, **kwargs: Any) -> ExportMessage:
    return ExportMessage.model_validate(message_json(message_id, minutes, **kwargs))


# ---------------------------------------------------------------------------
# Canned Rumble Royale embeds
# ---------------------------------------------------------------------------
def countdown_embed(host: str | None = "zed", era: str = "Classic") -> dict[str, Any]:
    if host is None:
        return embed_json(
            "Rumble Royale",
            f"Era: <:wol:696302964985298964>{era} \n\nClick the emoji below to join.",
            footer="Automatic Session",
        )
    return embed_json(
        f"Rumble Royale hosted by {host}",
        f"Era: {era}\n\nClick to join.",
    )


def start_embed(prize: str = "6000", xp: str = "1.5") -> dict[str, Any]:
    return embed_json(
        "Started a new Rumble Royale session",
        "**Number of participants:** 30\n**Era:** <:easter:1>Easter\n"
        f"**Prize:** {prize} <:gold:695955554199142421>\n\n\n"
        f"<:xp:860094804984725504> **{xp}x XP multiplier!**",
    )


def round_embed(number: int, *lines: str, event: str | None = None) -> dict[str, Any]:
    title = f"__Round {number}__" + (f" - {event}" if event else "")
    body = "\n".join(f"<:K:861698472154759199> | {line}" for line in lines)
    return embed_json(title, body + "\n\nPlayers Left: 27")


def winner_embed(winner: str = "technobean") -> dict[str, Any]:
    return embed_json(
        "<:Crwn2:872850260756664350> **__WINNER!__**",
        f"**{winner}**\n**Reward:** 6200 <:gold:695955554199142421>",
    )


def cancelled_embed() -> dict[str, Any]:
    return embed_json("Rumble Royale session cancelled", "Not enough players joined.")
