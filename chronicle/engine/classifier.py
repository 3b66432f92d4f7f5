"""
chronicle.engine.classifier — Embed Classification Rules
=========================================================

Ordered rule registry mapping a bot embed to a :class:`MessageKind`.
Rules are evaluated top to bottom and the first match wins, so more
specific shapes must come before broader ones (a countdown tick shares its
title with the countdown announcement, a winner title could otherwise be
swallowed by a catch-all).

To teach the interpreter a new bot message shape, add an :class:`EmbedRule`
to :data:`RULES` — the game tracker dispatches on ``kind`` and never looks
at raw text itself.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from chronicle.constants import (
    AUTOMATIC_SESSION_FOOTER,
    CANCELLED_TITLE,
    COUNTDOWN_TICK_PREFIX,
    GAME_START_PREFIX,
    HOSTED_BY,
    NAME_HINT_MARKERS,
    ROUND_TITLE_PREFIX,
    SUMMARY_FIELD_NAMES,
    WINNER_MARKER,
)
from chronicle.exports.schema import Embed, ExportMessage


class MessageKind(enum.StrEnum):
    """Lifecycle meaning of a bot embed."""
    COUNTDOWN = "countdown"
    COUNTDOWN_TICK = "countdown_tick"
    GAME_START = "game_start"
    CANCELLED = "cancelled"
    WINNER = "winner"
    NAME_HINT = "name_hint"
    ROUND = "round"
    SUMMARY = "summary"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class EmbedContext:
    """What a rule predicate gets to look at."""
    message: ExportMessage
    embed: Embed
    index: int  # position of the embed within the message


@dataclass(frozen=True, slots=True)
class EmbedRule:
    """One classification rule.

    Parameters
    ----------
    name : Short identifier used in logs.
    kind : Classification assigned when ``predicate`` matches.
    predicate : Pure test over an :class:`EmbedContext`.
    final : When True, the remaining embeds of the same message are not
        classified (they belong to the same announcement).
    """
    name: str
    kind: MessageKind
    predicate: Callable[[EmbedContext], bool]
    final: bool = False


def _title(ctx: EmbedContext) -> str:
    return ctx.embed.title


def _ignore(name: str, predicate: Callable[[EmbedContext], bool]) -> EmbedRule:
    return EmbedRule(name, MessageKind.IGNORED, predicate)


# ---------------------------------------------------------------------------
# Lifecycle rules
# ---------------------------------------------------------------------------
_LIFECYCLE_RULES: list[EmbedRule] = [
    EmbedRule(
        "countdown",
        MessageKind.COUNTDOWN,
        lambda c: HOSTED_BY.lstrip() in c.embed.title
        or c.embed.footer_text == AUTOMATIC_SESSION_FOOTER,
    ),
    EmbedRule(
        "countdown_tick",
        MessageKind.COUNTDOWN_TICK,
        lambda c: c.embed.description.startswith(COUNTDOWN_TICK_PREFIX),
    ),
    EmbedRule(
        "game_start",
        MessageKind.GAME_START,
        lambda c: c.embed.title.startswith(GAME_START_PREFIX),
    ),
    EmbedRule(
        "cancelled",
        MessageKind.CANCELLED,
        lambda c: c.embed.title == CANCELLED_TITLE,
        final=True,
    ),
    EmbedRule(
        "winner",
        MessageKind.WINNER,
        lambda c: c.index == 0 and WINNER_MARKER in c.embed.title,
        final=True,
    ),
    EmbedRule(
        "name_hint",
        MessageKind.NAME_HINT,
        lambda c: c.message.interaction is not None
        and any(marker in c.embed.author_name for marker in NAME_HINT_MARKERS),
        final=True,
    ),
    EmbedRule(
        "round",
        MessageKind.ROUND,
        lambda c: c.embed.title.startswith(ROUND_TITLE_PREFIX),
    ),
]

# ---------------------------------------------------------------------------
# Known-irrelevant bot output (profiles, shops, leaderboards, self-promotion)
# ---------------------------------------------------------------------------
_IGNORE_RULES: list[EmbedRule] = [
    _ignore("empty_inventory", lambda c: c.embed.description == "Your inventory is empty."),
    _ignore("title_equipped", lambda c: c.embed.description == "You already have this title equipped!"),
    _ignore("profile", lambda c: "'s Profile" in c.embed.author_name),
    _ignore("battle_history", lambda c: "'s Battle History" in _title(c)),
    _ignore("event_quests", lambda c: "Event Quests" in _title(c)),
    _ignore("season_overview", lambda c: _title(c).startswith("Season") and _title(c).endswith("| Overview")),
    _ignore("leaderboard", lambda c: _title(c).endswith("Leaderboard:") or _title(c).startswith("Leaderboard ")),
    _ignore("title_change", lambda c: c.embed.author_name == "Title Change"),
    _ignore(
        "quotes",
        lambda c: c.embed.author_name == "Quotes | View" or _title(c) in ("Quotes | View", "Quotes | Select"),
    ),
    _ignore("banners", lambda c: c.embed.author_name == "Banners" or _title(c) == "Banners"),
    _ignore("cosmetics", lambda c: _title(c).startswith("COSMETICS")),
    _ignore("season_pass", lambda c: all(s in _title(c) for s in ("umble", "ass", "eason"))),
    _ignore("vote_gems", lambda c: "Thanks for voting! Enjoy your free" in c.embed.description),
    _ignore("vote_reward", lambda c: _title(c) == "Vote for Rumble Royale"),
    _ignore(
        "bot_info",
        lambda c: _title(c) in ("Rumble Royale Info", "Rumble Royale Overview", "Rumble Royale Commands"),
    ),
    _ignore("era_phrases", lambda c: "Era Phrases" in _title(c)),
    _ignore("black_market", lambda c: _title(c) == "Black Market" or c.embed.author_name == "Black Market"),
    _ignore("support", lambda c: _title(c) == "We're glad you're enjoying the bot"),
    _ignore("backpack_rewards", lambda c: _title(c) == "Backpack Rewards!"),
    _ignore("weekly_reward", lambda c: "Weekly Reward" in _title(c)),
    _ignore("daily_reward", lambda c: "Daily Reward" in _title(c)),
]

# Checked after the ignore catalogue: profiles and leaderboards reuse these
# field names.
_SUMMARY_RULE = EmbedRule(
    "summary",
    MessageKind.SUMMARY,
    lambda c: any(f.name in SUMMARY_FIELD_NAMES for f in c.embed.fields),
)

RULES: tuple[EmbedRule, ...] = tuple(_LIFECYCLE_RULES + _IGNORE_RULES + [_SUMMARY_RULE])

UNKNOWN_RULE = EmbedRule("unknown", MessageKind.UNKNOWN, lambda c: True)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def classify_embed(
    message: ExportMessage,
    embed: Embed,
    index: int,
    rules: Sequence[EmbedRule] = RULES,
) -> EmbedRule:
    """Return the first rule in *rules* matching *embed*, else :data:`UNKNOWN_RULE`."""
    ctx = EmbedContext(message=message, embed=embed, index=index)
    for rule in rules:
        if rule.predicate(ctx):
            return rule
    return UNKNOWN_RULE
